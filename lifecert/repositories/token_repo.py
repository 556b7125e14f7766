from datetime import datetime
from asyncpg import Connection


class RevokedTokenRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def revoke(self, jti: str, expires_at: datetime) -> None:
        sql = """
            INSERT INTO revoked_tokens (jti, expires_at)
            VALUES ($1, $2)
            ON CONFLICT (jti) DO NOTHING;
        """
        await self.conn.execute(sql, jti, expires_at)

    async def is_revoked(self, jti: str) -> bool:
        sql = "SELECT EXISTS (SELECT 1 FROM revoked_tokens WHERE jti = $1);"
        return bool(await self.conn.fetchval(sql, jti))

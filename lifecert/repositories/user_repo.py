from typing import Optional
from uuid import UUID
from asyncpg import Connection, UniqueViolationError

class UserRepository:

    def __init__(self, conn: Connection):
        self.conn = conn

    async def get_by_email(self, email: str) -> Optional[dict]:
        sql = "SELECT * FROM users WHERE lower(email) = lower($1);"
        record = await self.conn.fetchrow(sql, email)
        return dict(record) if record else None

    async def get_by_id(self, user_id: UUID) -> Optional[dict]:
        sql = "SELECT * FROM users WHERE id = $1;"
        record = await self.conn.fetchrow(sql, user_id)
        return dict(record) if record else None

    async def get_by_pension_number(self, pension_number: str) -> Optional[dict]:
        sql = "SELECT * FROM users WHERE pension_number = $1;"
        record = await self.conn.fetchrow(sql, pension_number)
        return dict(record) if record else None

    async def list_by_role(self, role: str) -> list[dict]:
        sql = "SELECT * FROM users WHERE role = $1 ORDER BY created_at DESC;"
        records = await self.conn.fetch(sql, role)
        return [dict(record) for record in records]

    async def create(self, user_in: dict) -> dict:
        sql = """
            INSERT INTO users (email, hashed_password, full_name, pension_number,
                               phone_number, address, date_of_birth, role)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING *;
        """
        try:
            record = await self.conn.fetchrow(
                sql,
                user_in["email"],
                user_in["hashed_password"],
                user_in["full_name"],
                user_in.get("pension_number"),
                user_in.get("phone_number"),
                user_in.get("address"),
                user_in.get("date_of_birth"),
                user_in["role"],
            )
        except UniqueViolationError:
            raise ValueError("User with this email or pension number already exists.")
        return dict(record)

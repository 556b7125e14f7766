from typing import Optional
from uuid import UUID
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from asyncpg import Connection
from asyncpg.pool import Pool

from lifecert.core.exceptions import TokenInvalidException, TokenRevokedException, RoleRequiredException
from lifecert.core.security import decode_access_token
from lifecert.db.session import get_db_connection, get_db_pool
from lifecert.repositories.certificate_repo import CertificateRepository
from lifecert.repositories.token_repo import RevokedTokenRepository
from lifecert.repositories.user_repo import UserRepository
from lifecert.schemas.auth_schema import TokenPayload
from lifecert.services.certificate_service import CertificateService
from lifecert.services.storage import LocalStorage, storage_from_settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def get_user_repo(conn: Connection = Depends(get_db_connection)) -> UserRepository:
    return UserRepository(conn)

def get_token_repo(conn: Connection = Depends(get_db_connection)) -> RevokedTokenRepository:
    return RevokedTokenRepository(conn)

def get_certificate_repo(conn: Connection = Depends(get_db_connection)) -> CertificateRepository:
    return CertificateRepository(conn)

def get_storage() -> LocalStorage:
    return storage_from_settings()

def get_certificate_service(
        cert_repo: CertificateRepository = Depends(get_certificate_repo),
        user_repo: UserRepository = Depends(get_user_repo),
        storage: LocalStorage = Depends(get_storage),
        pool: Optional[Pool] = Depends(get_db_pool),
) -> CertificateService:
    return CertificateService(cert_repo, user_repo, storage, pool=pool)


async def resolve_token(
        token: str,
        user_repo: UserRepository,
        token_repo: RevokedTokenRepository,
) -> tuple[dict, TokenPayload]:
    try:
        payload = decode_access_token(token)
        if payload is None:
            raise TokenInvalidException()
        token_data = TokenPayload(**payload)
        user_id = UUID(token_data.sub)
    except (JWTError, ValueError, TypeError):
        raise TokenInvalidException()

    if token_data.jti and await token_repo.is_revoked(token_data.jti):
        raise TokenRevokedException()

    user_data = await user_repo.get_by_id(user_id)
    if user_data is None:
        raise TokenInvalidException()
    return user_data, token_data


async def get_current_token(
        token: str = Depends(oauth2_scheme),
        user_repo: UserRepository = Depends(get_user_repo),
        token_repo: RevokedTokenRepository = Depends(get_token_repo),
) -> TokenPayload:
    _, token_data = await resolve_token(token, user_repo, token_repo)
    return token_data


async def get_current_user(
        token: str = Depends(oauth2_scheme),
        user_repo: UserRepository = Depends(get_user_repo),
        token_repo: RevokedTokenRepository = Depends(get_token_repo),
) -> dict:
    user_data, _ = await resolve_token(token, user_repo, token_repo)
    return user_data


async def get_optional_user(
        token: Optional[str] = Depends(optional_oauth2_scheme),
        user_repo: UserRepository = Depends(get_user_repo),
        token_repo: RevokedTokenRepository = Depends(get_token_repo),
) -> Optional[dict]:
    """Current user or ``None``; a failed resolution counts as signed out."""
    if not token:
        return None
    try:
        user_data, _ = await resolve_token(token, user_repo, token_repo)
    except (TokenInvalidException, TokenRevokedException):
        return None
    return user_data


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user['role'] != "admin":
        raise RoleRequiredException("admin")
    return current_user


async def require_pensioner(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user['role'] != "pensioner":
        raise RoleRequiredException("pensioner")
    return current_user

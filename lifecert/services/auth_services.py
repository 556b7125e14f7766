import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from lifecert.repositories.user_repo import UserRepository
from lifecert.repositories.token_repo import RevokedTokenRepository
from lifecert.schemas.auth_schema import UserCreate, TokenPayload
from lifecert.core.security import hash_password, verify_password, create_access_token
from lifecert.core.config import settings
from lifecert.core.exceptions import UserAlreadyExistsException

logger = logging.getLogger(__name__)

PENSIONER_ROLE = "pensioner"


class AuthService:
    def __init__(self, user_repo: UserRepository, token_repo: Optional[RevokedTokenRepository] = None):
        self.user_repo = user_repo
        self.token_repo = token_repo

    async def register_user(self, user_in: UserCreate) -> dict:
        existing_email = await self.user_repo.get_by_email(user_in.email)
        if existing_email:
            raise UserAlreadyExistsException("email")
        existing_pension = await self.user_repo.get_by_pension_number(user_in.pension_number)
        if existing_pension:
            raise UserAlreadyExistsException("pension number")

        user_data = {
            "email": user_in.email,
            "hashed_password": hash_password(user_in.password),
            "full_name": user_in.full_name,
            "pension_number": user_in.pension_number,
            "phone_number": user_in.phone_number,
            "address": user_in.address,
            "date_of_birth": user_in.date_of_birth,
            # administrators are never created through self-registration
            "role": PENSIONER_ROLE,
        }
        return await self.user_repo.create(user_in=user_data)

    async def authenticate(self, email: str, password: str) -> Optional[dict]:
        user = await self.user_repo.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.get('hashed_password', '')):
            return None
        return user

    def create_token_for_user(self, user: dict) -> str:
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return create_access_token(subject=str(user['id']), expires_delta=access_token_expires)

    async def sign_out(self, token: TokenPayload) -> None:
        if self.token_repo is None:
            raise RuntimeError("Token repository is required for sign-out")
        if token.exp is not None:
            expires_at = datetime.fromtimestamp(token.exp, tz=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc)
        await self.token_repo.revoke(token.jti, expires_at)
        logger.info(f"Session {token.jti} signed out for user {token.sub}")

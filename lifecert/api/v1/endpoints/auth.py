from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from lifecert.core.exceptions import InvalidCredentialsException
from lifecert.schemas.auth_schema import UserCreate, Token, TokenPayload
from lifecert.schemas.user_schema import UserOut
from lifecert.api.v1.deps import get_user_repo, get_token_repo, get_current_user, get_current_token
from lifecert.repositories.token_repo import RevokedTokenRepository
from lifecert.repositories.user_repo import UserRepository
from lifecert.services.auth_services import AuthService

router = APIRouter(tags=["auth"], prefix="/api/v1/auth")


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, user_repo: UserRepository = Depends(get_user_repo)):
    auth_svc = AuthService(user_repo)
    try:
        created = await auth_svc.register_user(user_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return created


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(),
                user_repo: UserRepository = Depends(get_user_repo)):
    auth_svc = AuthService(user_repo)
    user = await auth_svc.authenticate(form_data.username, form_data.password)
    if not user:
        raise InvalidCredentialsException()
    token = auth_svc.create_token_for_user(user)
    return Token(access_token=token, token_type="bearer")


@router.get("/me", response_model=UserOut)
async def read_current_user(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(token: TokenPayload = Depends(get_current_token),
                   user_repo: UserRepository = Depends(get_user_repo),
                   token_repo: RevokedTokenRepository = Depends(get_token_repo)):
    auth_svc = AuthService(user_repo, token_repo)
    await auth_svc.sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

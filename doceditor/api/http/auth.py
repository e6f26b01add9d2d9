from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from doceditor.api.deps import get_current_user, security
from doceditor.domains.identity.entities import User
from doceditor.domains.identity.schemas import Token, UserCreate, UserLogin, UserResponse
from doceditor.domains.identity.store import AuthSessionStore

router = APIRouter(prefix="/auth", tags=["authentication"])


def _token_response(store: AuthSessionStore) -> Token:
    state = store.state
    return Token(access_token=state.access_token, user=UserResponse.model_validate(state.user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, request: Request):
    """Регистрация нового пользователя"""
    store = AuthSessionStore(request.app.state.auth_client)
    response = await store.sign_up(user_data.email, user_data.password)
    if response.error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=response.error)
    return _token_response(store)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, request: Request):
    """Вход пользователя"""
    store = AuthSessionStore(request.app.state.auth_client)
    response = await store.sign_in(login_data.email, login_data.password)
    if response.error:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=response.error,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_response(store)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    """Текущий пользователь"""
    return UserResponse.model_validate(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    user: User = Depends(get_current_user)
):
    """Выход: токен отзывается, сессия документов сбрасывается"""
    sessions = request.app.state.sessions
    store = AuthSessionStore(request.app.state.auth_client, sessions.service(user.id))
    await store.restore_session(credentials.credentials)
    await store.sign_out()
    sessions.drop(user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

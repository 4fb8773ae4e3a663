from fastapi import APIRouter, Depends

from auth_service import AuthProvider
from config import ACCESS_TOKEN_EXPIRE_MINUTES
from document_store import DocumentStore
from exceptions import NotFoundError
from models.login_model import LoginUser
from models.register_model import RegisterUser
from routes.dependencies import get_auth_provider, get_readers, get_store, require_user
from tracking import ReaderRegistry, UserIdentity

router = APIRouter(prefix="/auth", tags=["auth"])


def token_response(message: str, identity: UserIdentity, token: str) -> dict:
    return {
        "message": message,
        "access_token": token,
        "token_type": "bearer",
        "user_id": identity.user_id,
        "username": identity.username,
        "email": identity.email,
        "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


@router.post("/register", status_code=201)
async def register_user(user: RegisterUser, auth: AuthProvider = Depends(get_auth_provider)):
    identity, token = await auth.register(user)
    return token_response("Registration successful", identity, token)


@router.post("/login")
async def login_user(user: LoginUser, auth: AuthProvider = Depends(get_auth_provider)):
    identity, token = await auth.login(user.email, user.password)
    return token_response("Login successful", identity, token)


@router.get("/me")
async def get_me(user: UserIdentity = Depends(require_user), store: DocumentStore = Depends(get_store)):
    profile = await store.get("users", user.user_id)
    if profile is None:
        raise NotFoundError("User", user.user_id)
    return profile


@router.post("/logout")
async def logout_user(
    user: UserIdentity = Depends(require_user),
    readers: ReaderRegistry = Depends(get_readers),
):
    closed = readers.close_user(user.user_id)
    return {"message": "Logged out", "closed_sessions": closed}

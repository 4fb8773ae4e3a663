from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth_service import AuthProvider
from document_store import DocumentStore
from exceptions import AuthFailure, PermissionDenied
from tracking import CounterUpdater, ReaderRegistry, SessionStateResolver, UserIdentity

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_auth_provider(request: Request) -> AuthProvider:
    return request.app.state.auth_provider


def get_counters(request: Request) -> CounterUpdater:
    return request.app.state.counters


def get_resolver(request: Request) -> SessionStateResolver:
    return request.app.state.resolver


def get_readers(request: Request) -> ReaderRegistry:
    return request.app.state.readers


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthProvider = Depends(get_auth_provider),
) -> Optional[UserIdentity]:
    if credentials is None:
        return None
    return await auth.current_user(credentials.credentials)


async def require_user(user: Optional[UserIdentity] = Depends(get_optional_user)) -> UserIdentity:
    if user is None:
        raise AuthFailure("Not signed in")
    return user


def ensure_self(user_id: str, user: UserIdentity) -> None:
    if user.user_id != user_id:
        raise PermissionDenied("You can only access your own account")

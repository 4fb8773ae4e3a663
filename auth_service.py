"""Account registration, login and token checks.

Credentials live in ``accounts/{email}`` and are separate from the public
profile in ``users/{userId}``, mirroring a hosted auth provider that only
hands the application a user identity.
"""

import logging
from typing import Optional, Tuple

from document_store import DocumentStore
from exceptions import AuthFailure
from models.genre_models import genre_values, validate_genre_selection
from models.register_model import RegisterUser
from tracking.auth_context import AuthContext, UserIdentity
from utils import create_access_token, hash_password, utcnow, verify_password, verify_token

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"
USERS = "users"


def _account_key(email: str) -> str:
    return email.strip().lower()


class AuthProvider:
    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def issue_token(identity: UserIdentity) -> str:
        return create_access_token({
            "user_id": identity.user_id,
            "email": identity.email,
            "username": identity.username,
        })

    async def register(self, user: RegisterUser) -> Tuple[UserIdentity, str]:
        genres = validate_genre_selection(user.interestedGenres)
        key = _account_key(user.email)
        if await self.store.get(ACCOUNTS, key):
            raise AuthFailure("Email already exists")

        now = utcnow()
        user_id = await self.store.add(USERS, {
            "username": user.username,
            "email": key,
            "age": user.age,
            "interestedGenres": genre_values(genres),
            "createdAt": now,
        })
        await self.store.set(ACCOUNTS, key, {
            "userId": user_id,
            "passwordHash": hash_password(user.password),
            "createdAt": now,
        })
        logger.info("Registered user %s", user_id)

        identity = UserIdentity(user_id=user_id, email=key, username=user.username)
        return identity, self.issue_token(identity)

    async def login(self, email: str, password: str) -> Tuple[UserIdentity, str]:
        key = _account_key(email)
        account = await self.store.get(ACCOUNTS, key)
        if not account or not verify_password(password, account["passwordHash"]):
            logger.info("Failed login for %s", key)
            raise AuthFailure("Failed to login")

        profile = await self.store.get(USERS, account["userId"]) or {}
        identity = UserIdentity(
            user_id=account["userId"], email=key, username=profile.get("username", "")
        )
        return identity, self.issue_token(identity)

    async def current_user(self, token: Optional[str]) -> Optional[UserIdentity]:
        """Identity behind ``token``, or None when missing, invalid or orphaned."""
        if not token:
            return None
        user_id = verify_token(token)
        if user_id is None:
            return None
        profile = await self.store.get(USERS, user_id)
        if profile is None:
            return None
        return UserIdentity(
            user_id=user_id, email=profile.get("email", ""), username=profile.get("username", "")
        )

    @staticmethod
    def logout(context: AuthContext) -> None:
        context.clear()

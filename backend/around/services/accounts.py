"""
Account service: signup and credential checks.

Accounts live in the user index keyed by username. Passwords are stored
as bcrypt hashes.
"""

import asyncio
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from around.core.config import settings
from around.core.errors import AuthError, ConflictError
from around.core.logging import get_logger
from around.core.security import create_access_token, get_password_hash, verify_password
from around.db.search import RecordStore
from around.schemas.auth import UserAccount, UserSignup

logger = get_logger(__name__)


def decode_user(source: Dict[str, Any]) -> UserAccount:
    """Decode one user document; raises pydantic's ValidationError."""
    return UserAccount.model_validate(source)


class AccountService:
    """Create accounts and exchange credentials for tokens."""

    def __init__(self, record_store: RecordStore, user_index: Optional[str] = None):
        self.record_store = record_store
        self.user_index = user_index or settings.USER_INDEX

    async def signup(self, data: UserSignup) -> UserAccount:
        """
        Create an account.

        Raises:
            ConflictError: Username already taken
            RecordStoreError: Store failure
        """
        query = {"term": {"username": data.username}}
        existing = await asyncio.to_thread(self.record_store.count, self.user_index, query)
        if existing > 0:
            raise ConflictError("User already exists")

        account = UserAccount(
            username=data.username,
            password=get_password_hash(data.password),
            age=data.age,
            gender=data.gender,
        )

        # create_only: a concurrent signup for the same name loses with
        # ConflictError instead of overwriting
        await asyncio.to_thread(
            self.record_store.put,
            self.user_index,
            account.username,
            account.to_document(),
            create_only=True,
        )

        logger.info("user_added", username=account.username)
        return account

    async def authenticate(self, username: str, password: str) -> UserAccount:
        """
        Return the account matching ``username`` and ``password``.

        Raises:
            AuthError: Unknown user or wrong password
            RecordStoreError: Store failure
        """
        query = {"term": {"username": username}}
        hits = await asyncio.to_thread(self.record_store.search, self.user_index, query)

        for doc_id, source in hits:
            try:
                account = decode_user(source)
            except PydanticValidationError:
                logger.warning("user_document_invalid", username=doc_id)
                continue
            if verify_password(password, account.password):
                return account

        logger.warning("login_failed", username=username)
        raise AuthError("User doesn't exist or wrong password")

    async def login(self, username: str, password: str) -> str:
        """Authenticate and issue a signed token for the account."""
        account = await self.authenticate(username, password)
        token = create_access_token(account.username)
        logger.info("login_succeeded", username=account.username)
        return token

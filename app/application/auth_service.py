"""Signup, login and bearer-token resolution."""

import logging
from typing import Tuple
from uuid import UUID

from app.application.user_service import UserService
from app.domain.validators.user_validator import normalize_email
from app.infrastructure.database.models import UserRow
from app.infrastructure.database.user_repository_db import DbUserRepository
from app.security.exceptions import AuthenticationError
from app.security.passwords import verify_password
from app.security.tokens import TokenService


class AuthService:
    def __init__(
        self,
        users: DbUserRepository,
        user_service: UserService,
        tokens: TokenService,
        logger: logging.Logger,
    ) -> None:
        self._users = users
        self._user_service = user_service
        self._tokens = tokens
        self._logger = logger

    async def signup(self, email: str, password: str) -> Tuple[UserRow, str]:
        user = await self._user_service.register(email, password)
        self._logger.info("user_signed_up", extra={"new_user_id": str(user.id)})
        return user, self._tokens.issue(user.id)

    async def login(self, email: str, password: str) -> Tuple[UserRow, str]:
        """Same error for unknown email and wrong password."""
        if not email or not password:
            raise AuthenticationError("Email and password are required")
        user = await self._users.get_by_email(normalize_email(email))
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user, self._tokens.issue(user.id)

    async def resolve(self, token: str) -> UserRow:
        """User behind a bearer token. Raises AuthenticationError if invalid or the user is gone."""
        user_id: UUID = self._tokens.decode(token)
        user = await self._users.get(user_id)
        if user is None:
            raise AuthenticationError("User not found")
        return user

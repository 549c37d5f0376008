"""
Self-hosted identity provider.

Users live in the ``users`` table with bcrypt hashes; sessions are signed JWT
pairs. Signing out records the access token's ``jti`` so it no longer
resolves.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cityfix.exceptions import AuthError, StorageError, ValidationError
from cityfix.models.user import RevokedToken, User
from cityfix.schemas.auth import AuthSession, AuthUser, SessionTokens
from cityfix.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)


def to_auth_user(user: User) -> AuthUser:
    return AuthUser(id=user.id, email=user.email, role=user.role, name=user.name)


class LocalIdentityProvider:
    def __init__(self, db: Session):
        self.db = db

    # ----- provider contract -----

    def sign_in(self, email: str, password: str) -> AuthSession:
        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid email or password")

        claims = {"sub": user.id, "email": user.email, "role": user.role}
        return AuthSession(
            user=to_auth_user(user),
            session=SessionTokens(
                access_token=create_access_token(claims),
                refresh_token=create_refresh_token({"sub": user.id}),
            ),
        )

    def resolve_token(self, token: str) -> AuthUser:
        payload = decode_token(token, "access")
        user_id = payload.get("sub")
        if not user_id or self._is_revoked(payload.get("jti")):
            raise AuthError("Invalid token")

        user = self.db.get(User, user_id)
        if user is None:
            raise AuthError("Invalid token")
        return to_auth_user(user)

    def sign_out(self, token: str) -> None:
        try:
            payload = decode_token(token, "access")
        except AuthError:
            # Nothing to revoke for a token that never resolved
            return
        jti = payload.get("jti")
        if not jti or self._is_revoked(jti):
            return
        try:
            self.db.add(RevokedToken(jti=jti))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to revoke session: {exc}") from exc

    # ----- administration -----

    def get_user_by_email(self, email: str) -> Optional[User]:
        normalized = (email or "").strip().lower()
        return self.db.query(User).filter(User.email == normalized).first()

    def list_users(self, role: Optional[str] = None) -> List[User]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        return query.all()

    def create_user(self, *, email: str, password: str, role: str = "user", name: Optional[str] = None) -> User:
        normalized = (email or "").strip().lower()
        if not normalized or not password:
            raise ValidationError("Email and password are required")

        user = User(
            email=normalized,
            password_hash=get_password_hash(password),
            role=role,
            name=name,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationError("Email already registered") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to create user: {exc}") from exc
        self.db.refresh(user)
        logger.info("Created %s account %s", role, normalized)
        return user

    def set_role(self, user: User, role: str) -> User:
        user.role = role
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to update user role: {exc}") from exc
        return user

    def is_ready(self) -> bool:
        """True when at least one admin account can sign in."""
        return self.db.query(User).filter(User.role == "admin").count() > 0

    def _is_revoked(self, jti: Optional[str]) -> bool:
        if not jti:
            return False
        return self.db.get(RevokedToken, jti) is not None

"""
Identity store: the only persistence surface the session token manager uses.

IdentityStore is the contract; SQLIdentityStore implements it over DBStorage.
update_current_refresh_token() with `expected` is a compare-and-swap: a single
UPDATE ... WHERE refresh_token = :expected whose row count decides the winner.
"""
from __future__ import annotations

from typing import Optional, Protocol

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError

from models.user import User


class StoreError(Exception):
    """Raised when the backing database rejects a read or write."""


class _Any:
    def __repr__(self):
        return "ANY"


# default for `expected`: overwrite whatever is stored
ANY = _Any()


class IdentityStore(Protocol):
    def find_by_id(self, identity_id: str) -> Optional[User]: ...

    def find_one(self, **criteria) -> Optional[User]: ...

    def update_current_refresh_token(
        self, identity_id: str, value: Optional[str], expected=ANY
    ) -> bool: ...


class SQLIdentityStore:
    def __init__(self, storage):
        self._storage = storage

    def _fail(self, exc: SQLAlchemyError):
        # a failed statement leaves the scoped session unusable until rolled back
        self._storage.rollback()
        raise StoreError(str(exc)) from exc

    def find_by_id(self, identity_id: str) -> Optional[User]:
        if identity_id is None:
            return None
        session = self._storage.get_session()
        try:
            # refresh from the row: the cached instance may predate a rotation
            return session.get(User, identity_id, populate_existing=True)
        except SQLAlchemyError as exc:
            self._fail(exc)

    def find_one(self, **criteria) -> Optional[User]:
        """First user whose columns equal all `criteria` (keyword = column name)."""
        session = self._storage.get_session()
        try:
            return session.query(User).populate_existing().filter_by(**criteria).first()
        except SQLAlchemyError as exc:
            self._fail(exc)

    def find_by_login(self, username: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
        """First user matching the username OR the email; None when both are empty."""
        clauses = []
        if username:
            clauses.append(User.username == username.strip().lower())
        if email:
            clauses.append(User.email == email.strip().lower())
        if not clauses:
            return None
        session = self._storage.get_session()
        try:
            return session.query(User).populate_existing().filter(or_(*clauses)).first()
        except SQLAlchemyError as exc:
            self._fail(exc)

    def update_current_refresh_token(self, identity_id: str, value: Optional[str], expected=ANY) -> bool:
        """
        Write `value` (None clears it) as the user's current refresh token.
        Returns False when no row matched: unknown id, or `expected` given
        and the stored value no longer equals it.
        """
        stmt = update(User).where(User.id == identity_id)
        if expected is not ANY:
            if expected is None:
                stmt = stmt.where(User.refresh_token.is_(None))
            else:
                stmt = stmt.where(User.refresh_token == expected)
        stmt = stmt.values(refresh_token=value).execution_options(synchronize_session="fetch")

        session = self._storage.get_session()
        try:
            result = session.execute(stmt)
            self._storage.save()
        except SQLAlchemyError as exc:
            self._fail(exc)
        return result.rowcount == 1

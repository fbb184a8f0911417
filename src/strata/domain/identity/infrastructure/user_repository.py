"""Event-sourced implementation of the UserRepository port."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from strata.domain.identity.infrastructure.event_sourced_repository import (
    EventSourcedRepository,
)
from strata.domain.identity.user import User

if TYPE_CHECKING:
    from strata.domain.identity.value_objects import Email, Username
    from strata.foundation.domain.identifiers import UserId


@dataclass(frozen=True, slots=True)
class UserIndexRow:
    """Lookup fields for one user. Nickname is compared case-sensitively."""

    user_id: UUID
    email: str
    username: str
    nickname: str


class EventSourcedUserRepository(EventSourcedRepository[User, UserIndexRow]):
    """UserRepository backed by :class:`UserApplication`.

    Soft-deleted users stay in the index, so their email, username and
    nickname remain taken.
    """

    aggregate_type = User

    def _row(self, aggregate: User) -> UserIndexRow:
        return UserIndexRow(
            user_id=aggregate.id,
            email=aggregate.email,
            username=aggregate.username,
            nickname=aggregate.nickname,
        )

    def find_by_id(self, user_id: UserId) -> User | None:
        return self._get(user_id.value)

    def get_by_id(self, user_id: UserId) -> User:
        """Load a user that must exist.

        Raises:
            NotFoundError: If no user has this id.
        """
        return self._require(user_id.value)

    def find_by_email(self, email: Email) -> User | None:
        return self._first(self._matching(lambda row: row.email == email.value))

    def find_by_username(self, username: Username) -> User | None:
        return self._first(self._matching(lambda row: row.username == username.value))

    def find_by_nickname(self, nickname: str) -> User | None:
        return self._first(self._matching(lambda row: row.nickname == nickname))

    def save(self, user: User) -> User:
        return self._save(user)

    def delete(self, user_id: UserId) -> bool:
        return self._delete(user_id.value)

    def exists_by_email(self, email: Email) -> bool:
        return self._any(lambda row: row.email == email.value)

    def exists_by_username(self, username: Username) -> bool:
        return self._any(lambda row: row.username == username.value)

    def exists_by_nickname(self, nickname: str) -> bool:
        return self._any(lambda row: row.nickname == nickname)

    @staticmethod
    def _first(users: list[User]) -> User | None:
        return users[0] if users else None

"""Domain service for platform-wide uniqueness of user identity fields.

Email, username and nickname are unique across all tenants. Each check
accepts an optional user to exclude, so that a user re-submitting their
own value is not reported as a conflict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from strata.domain.identity.exceptions import (
    EmailAlreadyExistsError,
    NicknameAlreadyExistsError,
    UsernameAlreadyExistsError,
)
from strata.domain.identity.value_objects import Nickname

if TYPE_CHECKING:
    from strata.domain.identity.repositories import UserRepository
    from strata.domain.identity.user import User
    from strata.domain.identity.value_objects import Email, Username
    from strata.foundation.domain.identifiers import UserId


def _is_excluded(existing: User | None, exclude_user_id: UserId | None) -> bool:
    if existing is None or exclude_user_id is None:
        return False
    return existing.id == exclude_user_id.value


class UserValidationService:
    """Uniqueness checks over a :class:`UserRepository`.

    Semantics for every check:
        - value not present: unique
        - present, no exclusion: not unique
        - present, with exclusion: unique iff the holder is the excluded user
    """

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def is_email_unique(self, email: Email, exclude_user_id: UserId | None = None) -> bool:
        if not self._users.exists_by_email(email):
            return True
        return _is_excluded(self._users.find_by_email(email), exclude_user_id)

    def is_username_unique(
        self, username: Username, exclude_user_id: UserId | None = None
    ) -> bool:
        if not self._users.exists_by_username(username):
            return True
        return _is_excluded(self._users.find_by_username(username), exclude_user_id)

    def is_nickname_unique(
        self, nickname: str, exclude_user_id: UserId | None = None
    ) -> bool:
        normalized = Nickname(nickname).value
        if not self._users.exists_by_nickname(normalized):
            return True
        return _is_excluded(self._users.find_by_nickname(normalized), exclude_user_id)

    def ensure_registration_unique(
        self,
        email: Email,
        username: Username,
        nickname: str | None = None,
        exclude_user_id: UserId | None = None,
    ) -> None:
        """Check every identity field, nickname defaulting to the username.

        Raises:
            EmailAlreadyExistsError: If the email is taken.
            UsernameAlreadyExistsError: If the username is taken.
            NicknameAlreadyExistsError: If the nickname is taken.
        """
        if not self.is_email_unique(email, exclude_user_id):
            raise EmailAlreadyExistsError(email.value)
        if not self.is_username_unique(username, exclude_user_id):
            raise UsernameAlreadyExistsError(username.value)
        effective_nickname = nickname or username.value
        if not self.is_nickname_unique(effective_nickname, exclude_user_id):
            raise NicknameAlreadyExistsError(Nickname(effective_nickname).value)

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DirectoryUser


class UserDirectory(Protocol):
    """Read access to the internal employee directory.

    ``create_user`` is only used when reconciliation provisions missing users.
    """

    def get_by_id(self, user_id: int) -> Optional[DirectoryUser]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[DirectoryUser]:
        raise NotImplementedError

    def list_active(self) -> Sequence[DirectoryUser]:
        raise NotImplementedError

    def create_user(self, *, full_name: str, email: str, password_hash: str) -> int:
        raise NotImplementedError

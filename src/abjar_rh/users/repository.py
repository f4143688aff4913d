from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Storage interface for users; services depend on this rather than on MySQL."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_npm(self, npm: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, full_name: str, npm: str, password_hash: str, role: Role) -> int:
        """Insert a user; raises ConflictError when the npm is taken."""

        raise NotImplementedError

    def update_role(self, user_id: int, role: Role, *, expected_role: Role, max_admins: Optional[int] = None) -> bool:
        """Change the role only while it still equals `expected_role`.

        With `max_admins`, the update also requires fewer than that many admins
        at write time. Returns False when no row changed.
        """

        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        """All users, newest first."""

        raise NotImplementedError

    def count_by_role(self) -> dict[Role, int]:
        raise NotImplementedError

"""Account store interface."""

from __future__ import annotations

from typing import Protocol


class UserStore(Protocol):
    async def exists_by_email(self, email: str) -> bool:
        ...

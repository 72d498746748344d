"""Email sender interface."""

from __future__ import annotations

from typing import Protocol


class EmailSender(Protocol):
    async def send(self, to: str, subject: str, body: str, sender: str) -> None:
        ...

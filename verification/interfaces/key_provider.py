"""Encryption key provider interface."""

from __future__ import annotations

from typing import Protocol


class KeyProvider(Protocol):
    def get_key(self) -> bytes:
        ...

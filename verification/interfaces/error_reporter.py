"""Error reporter interface."""

from __future__ import annotations

from typing import Any, Protocol


class ErrorReporter(Protocol):
    def capture_exception(self, exc: BaseException, context: dict[str, Any] | None = None) -> None:
        ...

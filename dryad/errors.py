"""Errors raised while running Dryad programs, and the control-flow signals."""

from __future__ import annotations

from typing import Any

__all__ = ["DryadError", "BreakSignal", "ContinueSignal", "ReturnSignal"]


class DryadError(Exception):
    """A runtime error carrying a numeric code and a message."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class BreakSignal(DryadError):
    """Raised by a ``break`` statement to leave the innermost loop."""

    def __init__(self) -> None:
        super().__init__(3010, "break")


class ContinueSignal(DryadError):
    """Raised by a ``continue`` statement to skip to the next iteration."""

    def __init__(self) -> None:
        super().__init__(3011, "continue")


class ReturnSignal(DryadError):
    """Raised by a ``return`` statement; carries the returned value."""

    def __init__(self, value: Any) -> None:
        super().__init__(3021, "return")
        self.value = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"
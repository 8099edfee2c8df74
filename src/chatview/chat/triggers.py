"""Hooks that fire when an assistant response matches a condition."""

import re
from collections.abc import Callable, Iterable
from typing import Protocol


class ResponseTrigger(Protocol):
    """Reacts to a committed assistant response."""

    def should_activate(self, response: str) -> bool: ...

    def activate(self) -> None: ...


class KeywordTrigger:
    """Fires a callback when a response mentions any of the given keywords.

    Matching is on whole words and ignores case.
    """

    def __init__(self, keywords: Iterable[str], callback: Callable[[], None]):
        words = [re.escape(k) for k in keywords if k]
        if not words:
            raise ValueError("KeywordTrigger needs at least one keyword")
        self._pattern = re.compile(r"\b(" + "|".join(words) + r")\b", re.IGNORECASE)
        self._callback = callback

    def should_activate(self, response: str) -> bool:
        return self._pattern.search(response) is not None

    def activate(self) -> None:
        self._callback()

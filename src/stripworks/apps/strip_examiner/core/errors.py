"""Exception types raised by the strip examiner."""

from __future__ import annotations

from typing import Iterable, Tuple


class StripExaminerError(Exception):
    """Base class for strip examiner failures."""


class MissingRegionError(StripExaminerError):
    """Analysis was requested before every region role was defined."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: Tuple[str, ...] = tuple(missing)
        super().__init__(
            "Analysis requires all regions; missing: " + ", ".join(self.missing)
        )


class InvalidRegionError(StripExaminerError, ValueError):
    """A region is malformed or does not fit inside the image."""


class NarrativeError(StripExaminerError):
    """The narrative backend failed or returned no text."""

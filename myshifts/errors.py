from __future__ import annotations

from typing import Optional


class ShiftsError(Exception):
    """Base class for errors raised by the shift calendar core."""


class FetchError(ShiftsError):
    """The query source failed for one day. Never cached."""

    def __init__(self, date_iso: str, subject_id: str, message: Optional[str] = None):
        self.date_iso = date_iso
        self.subject_id = subject_id
        detail = message or "query failed"
        who = subject_id or "me"
        super().__init__(f"Could not fetch shifts for {date_iso} ({who}): {detail}")


class SubjectResolutionError(ShiftsError):
    def __init__(self, value: str, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"Could not resolve user {value!r}.")


class MalformedShiftError(ShiftsError):
    """A fragment ended at or before its start.

    The normalizer drops such fragments instead of raising; the class exists so
    callers validating single shifts can report the same condition.
    """

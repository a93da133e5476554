"""Errors raised while attaching evidence to a case."""

from __future__ import annotations


class AttachmentError(Exception):
    """Base class for every attachment failure."""


class FetchAttachedIdsFailed(AttachmentError):
    """The set of alert ids already attached to the case could not be read."""

    def __init__(self, case_id: str, reason: str = "") -> None:
        self.case_id = case_id
        msg = f"Cannot fetch attached alert ids for case {case_id}"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class MalformedRequest(AttachmentError, ValueError):
    """A request item is structurally invalid (e.g. alertId/index length mismatch)."""


class PersistFailed(AttachmentError):
    """The single create / bulk-create call against the store failed."""

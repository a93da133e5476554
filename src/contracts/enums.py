"""Canonical enumerations for case attachments."""

from __future__ import annotations

from enum import Enum


class AttachmentType(str, Enum):
    USER = "user"
    ALERT = "alert"


class ReferenceType(str, Enum):
    CASES = "cases"

"""Attachment contracts: data structures shared by all modules."""

from src.contracts.attachment import (
    AlertReference,
    AttachmentAttributes,
    AttachmentRequest,
    BulkCreateResult,
    CaseReference,
    PersistableAttachment,
    Rule,
    User,
    UserComment,
)
from src.contracts.enums import AttachmentType, ReferenceType
from src.contracts.errors import (
    AttachmentError,
    FetchAttachedIdsFailed,
    MalformedRequest,
    PersistFailed,
)

__all__ = [
    "AlertReference",
    "AttachmentAttributes",
    "AttachmentError",
    "AttachmentRequest",
    "AttachmentType",
    "BulkCreateResult",
    "CaseReference",
    "FetchAttachedIdsFailed",
    "MalformedRequest",
    "PersistFailed",
    "PersistableAttachment",
    "ReferenceType",
    "Rule",
    "User",
    "UserComment",
]

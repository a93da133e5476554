"""Turn a request plus its dedup result into a persistable record."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from src.attachments.dedup import DedupResult
from src.contracts.attachment import (
    CASE_REFERENCE_NAME,
    AlertReference,
    AttachmentAttributes,
    AttachmentRequest,
    CaseReference,
    PersistableAttachment,
    User,
    UserComment,
)
from src.contracts.enums import AttachmentType, ReferenceType

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildMetadata:
    """Call-context values stamped on every record of one call."""

    case_id: str
    created_at: str  # ISO-8601
    created_by: User
    reference_name: str = CASE_REFERENCE_NAME
    reference_type: str = ReferenceType.CASES.value

    def case_reference(self) -> CaseReference:
        return CaseReference(
            id=self.case_id,
            name=self.reference_name,
            type=self.reference_type,
        )


def build(
    item: AttachmentRequest,
    result: DedupResult,
    metadata: BuildMetadata,
) -> PersistableAttachment | None:
    """Return the record to persist, or None when the item must be dropped.

    Alert references keep only the surviving pairs from *result*; with no
    survivors the item is dropped. User comments are always built as-is.
    """
    if isinstance(item, UserComment):
        attributes = AttachmentAttributes(
            type=AttachmentType.USER,
            owner=item.owner,
            created_at=metadata.created_at,
            created_by=metadata.created_by,
            comment=item.comment,
        )
    elif isinstance(item, AlertReference):
        if result.is_empty:
            log.debug("Dropping alert request %s: no alerts left after dedup",
                      item.id or "<new>")
            return None
        attributes = AttachmentAttributes(
            type=AttachmentType.ALERT,
            owner=item.owner,
            created_at=metadata.created_at,
            created_by=metadata.created_by,
            alert_id=result.alert_ids,
            index=result.indices,
            rule=item.rule,
        )
    else:
        raise TypeError(f"Unsupported attachment request: {type(item).__name__}")

    return PersistableAttachment(
        id=item.id or str(uuid.uuid4()),
        attributes=attributes,
        references=[metadata.case_reference()],
    )

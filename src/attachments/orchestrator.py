"""Single-item and batch attachment flows for one case.

Flow per call
─────────────
  1. validate every request                      (MalformedRequest)
  2. fetch the attached alert-id snapshot once   (FetchAttachedIdsFailed)
  3. dedup -> build each request in input order, threading ``consumed``
  4. one persistence call with the survivors, or none at all
                                                 (PersistFailed)

Collaborator errors are never caught here. A call makes at most one
persistence invocation, so it either fully succeeds or changes nothing.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from src.attachments.builder import BuildMetadata, build
from src.attachments.dedup import DedupStats, dedupe, validate_request
from src.contracts.attachment import (
    CASE_REFERENCE_NAME,
    AlertReference,
    AttachmentRequest,
    BulkCreateResult,
    PersistableAttachment,
    User,
)
from src.contracts.enums import ReferenceType

log = logging.getLogger(__name__)


def _now_iso() -> str:
    dt = datetime.now(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


# ═══════════════════════════════════════════════════════════════════════════
#  Collaborator contracts
# ═══════════════════════════════════════════════════════════════════════════


class AttachedAlertIndex(abc.ABC):
    """Read side: which alert ids are already attached to a case."""

    @abc.abstractmethod
    def get_all_alert_ids(self, case_id: str) -> Iterable[str]:
        """Return every alert id attached to *case_id*.

        Raises FetchAttachedIdsFailed when the lookup fails.
        """


class CasePersistenceClient(abc.ABC):
    """Write side: store attachment records."""

    @abc.abstractmethod
    def create(
        self, attachment: PersistableAttachment, *, refresh: bool = False
    ) -> PersistableAttachment:
        """Persist one record. Raises PersistFailed."""

    @abc.abstractmethod
    def bulk_create(
        self, attachments: Sequence[PersistableAttachment], *, refresh: bool = False
    ) -> list[PersistableAttachment]:
        """Persist all records in one round trip, in order. Raises PersistFailed."""


# ═══════════════════════════════════════════════════════════════════════════
#  Orchestrator
# ═══════════════════════════════════════════════════════════════════════════


class BatchOrchestrator:
    """Attach comments and alerts to one case without duplicating alerts."""

    def __init__(
        self,
        case_id: str,
        index: AttachedAlertIndex,
        persistence: CasePersistenceClient,
        user: User | None = None,
        refresh: bool = False,
        reference_name: str = CASE_REFERENCE_NAME,
        reference_type: str = ReferenceType.CASES.value,
    ) -> None:
        self.case_id = case_id
        self.index = index
        self.persistence = persistence
        self.user = user or User()
        self.refresh = refresh
        self.reference_name = reference_name
        self.reference_type = reference_type

    # ── Public API ───────────────────────────────────────────────────────

    def create(
        self,
        item: AttachmentRequest,
        *,
        created_at: str | None = None,
    ) -> PersistableAttachment | None:
        """Attach one request.

        Returns the persisted record, or None when every alert of the
        request was already on the case (the store is not called then).
        """
        validate_request(item)
        already_attached = self._snapshot()
        metadata = self._metadata(created_at)

        result = dedupe(item, already_attached)
        record = build(item, result, metadata)
        if record is None:
            log.info("Case %s: nothing to attach, all alerts already present", self.case_id)
            return None

        persisted = self.persistence.create(record, refresh=self.refresh)
        log.info("Case %s: created %s attachment %s",
                 self.case_id, record.type.value, record.id)
        return persisted

    def bulk_create(
        self,
        items: Iterable[AttachmentRequest],
        *,
        created_at: str | None = None,
    ) -> BulkCreateResult:
        """Attach a batch of requests with a single store call.

        Output order follows input order; dropped requests are omitted.
        When nothing survives, the store is not called and
        ``persisted`` is False.
        """
        items = list(items)
        for item in items:
            validate_request(item)
        already_attached = self._snapshot()
        metadata = self._metadata(created_at)

        records: list[PersistableAttachment] = []
        consumed: frozenset[str] = frozenset()
        stats = DedupStats()

        for item in items:
            result = dedupe(item, already_attached, consumed)
            consumed = result.consumed
            record = build(item, result, metadata)

            stats.items += 1
            if isinstance(item, AlertReference):
                stats.alerts_in += len(item.alert_ids)
                stats.alerts_kept += len(result.alert_ids)
            if record is None:
                stats.dropped_items += 1
                continue
            records.append(record)

        log.info(
            "Case %s: %d request(s), %d dropped, %d duplicate alert(s) removed",
            self.case_id, stats.items, stats.dropped_items, stats.alerts_removed,
        )

        if not records:
            log.info("Case %s: nothing to attach, skipping store call", self.case_id)
            return BulkCreateResult(attachments=[], persisted=False)

        persisted = self.persistence.bulk_create(records, refresh=self.refresh)
        log.info("Case %s: created %d attachment(s)", self.case_id, len(persisted))
        return BulkCreateResult(attachments=list(persisted), persisted=True)

    # ── Internals ────────────────────────────────────────────────────────

    def _snapshot(self) -> frozenset[str]:
        already_attached = frozenset(self.index.get_all_alert_ids(self.case_id))
        log.debug("Case %s: %d alert(s) already attached",
                  self.case_id, len(already_attached))
        return already_attached

    def _metadata(self, created_at: str | None) -> BuildMetadata:
        return BuildMetadata(
            case_id=self.case_id,
            created_at=created_at or _now_iso(),
            created_by=self.user,
            reference_name=self.reference_name,
            reference_type=self.reference_type,
        )

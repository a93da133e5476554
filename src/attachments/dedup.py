"""Strip alert ids that are already on the case or already claimed.

An alert pair ``(alert_id, index)`` survives only when ``alert_id`` is
neither in the case's attached snapshot nor in the batch's ``consumed`` set.
Every surviving id is added to ``consumed`` straight away, so a repeat later
in the same item or in a later item of the same batch is dropped. The first
occurrence in input order always wins.

``consumed`` is a value: callers pass it in and take the updated one back
from the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple

from src.contracts.attachment import AlertReference, AttachmentRequest, UserComment
from src.contracts.errors import MalformedRequest

log = logging.getLogger(__name__)


class DedupResult(NamedTuple):
    alert_ids: tuple[str, ...]
    indices: tuple[str, ...]
    consumed: frozenset[str]

    @property
    def is_empty(self) -> bool:
        return not self.alert_ids


@dataclass(slots=True)
class DedupStats:
    """Per-call counters, used only for logging."""

    items: int = 0
    dropped_items: int = 0
    alerts_in: int = 0
    alerts_kept: int = 0

    @property
    def alerts_removed(self) -> int:
        return self.alerts_in - self.alerts_kept


def validate_request(item: AttachmentRequest) -> None:
    """Raise MalformedRequest unless *item* is a well-formed request."""
    if isinstance(item, UserComment):
        return
    if isinstance(item, AlertReference):
        if len(item.alert_ids) != len(item.indices):
            raise MalformedRequest(
                f"alertId/index length mismatch: {len(item.alert_ids)} ids, "
                f"{len(item.indices)} indices"
            )
        return
    raise TypeError(f"Unsupported attachment request: {type(item).__name__}")


def dedupe(
    item: AttachmentRequest,
    already_attached: frozenset[str],
    consumed: frozenset[str] = frozenset(),
) -> DedupResult:
    """Filter one request against the case snapshot and the batch state.

    Parameters
    ──────────
    item             — the request to filter
    already_attached — alert ids attached to the case before this call
    consumed         — alert ids kept by earlier items of the same batch

    Returns
    ───────
    DedupResult with the surviving ids/indices (original relative order) and
    the updated ``consumed`` set. User comments yield empty pairs and the
    same ``consumed``.
    """
    validate_request(item)
    if isinstance(item, UserComment):
        return DedupResult((), (), consumed)

    kept_ids: list[str] = []
    kept_indices: list[str] = []
    seen = set(consumed)

    for alert_id, index in item.pairs():
        if alert_id in already_attached or alert_id in seen:
            continue
        kept_ids.append(alert_id)
        kept_indices.append(index)
        seen.add(alert_id)

    removed = len(item.alert_ids) - len(kept_ids)
    if removed:
        log.debug(
            "Dedup removed %d of %d alert(s) from request %s",
            removed, len(item.alert_ids), item.id or "<new>",
        )
    return DedupResult(tuple(kept_ids), tuple(kept_indices), frozenset(seen))

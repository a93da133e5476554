"""JSONL-backed attachment store.

Implements both collaborator contracts of the orchestrator over a single
file holding one persisted record per line. Writes only append, so records
from concurrent writers are never overwritten; alert-id uniqueness across
concurrent writers is not enforced.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from src.attachments.orchestrator import AttachedAlertIndex, CasePersistenceClient
from src.contracts.attachment import PersistableAttachment
from src.contracts.enums import AttachmentType, ReferenceType
from src.contracts.errors import FetchAttachedIdsFailed, PersistFailed

log = logging.getLogger(__name__)

# Attributes added after the first on-disk format; absent in older rows.
_NULLABLE_ATTRIBUTES = ("pushed_at", "pushed_by", "updated_at", "updated_by")


def _append_lines(path: Path, content: str) -> None:
    """Дописує content у кінець файлу path одним записом (O_APPEND)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and path.stat().st_size > 0:
        with path.open("rb") as fh:
            fh.seek(-1, os.SEEK_END)
            if fh.read(1) != b"\n":
                content = "\n" + content
    with path.open("a", encoding="utf-8") as fh:
        fh.write(content)
        fh.flush()
        os.fsync(fh.fileno())


def _with_defaults(doc: dict[str, Any]) -> dict[str, Any]:
    """Return *doc* with missing nullable attributes set to None."""
    attributes = dict(doc.get("attributes", {}))
    for key in _NULLABLE_ATTRIBUTES:
        attributes.setdefault(key, None)
    return {**doc, "attributes": attributes, "references": doc.get("references", [])}


def _references_case(references: Any, case_id: str) -> bool:
    if not isinstance(references, list):
        return False
    return any(
        isinstance(ref, dict)
        and ref.get("id") == case_id
        and ref.get("type") == ReferenceType.CASES.value
        for ref in references
    )


class JsonlAttachmentStore(AttachedAlertIndex, CasePersistenceClient):
    """Attachments of every case in one JSONL file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    # ── Read side ────────────────────────────────────────────────────────

    def get_all_alert_ids(self, case_id: str) -> set[str]:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return set()
        try:
            df = pd.read_json(self.path, lines=True, dtype=False, convert_dates=False)
        except (OSError, ValueError) as exc:
            raise FetchAttachedIdsFailed(case_id, str(exc)) from exc
        if df.empty or not {"attributes", "references"} <= set(df.columns):
            return set()

        attrs = pd.json_normalize(df["attributes"].tolist(), max_level=0)
        if "alertId" not in attrs.columns:
            return set()

        on_case = df["references"].apply(_references_case, case_id=case_id).to_numpy()
        is_alert = (attrs["type"] == AttachmentType.ALERT.value).to_numpy()
        ids = attrs.loc[on_case & is_alert, "alertId"].explode().dropna()
        result = set(ids.astype(str))
        log.debug("Store %s: case %s has %d attached alert(s)",
                  self.path.name, case_id, len(result))
        return result

    def list_attachments(self, case_id: str | None = None) -> list[PersistableAttachment]:
        """Return stored records, optionally only those linked to *case_id*.

        Raises FetchAttachedIdsFailed when the file cannot be read or holds
        a line that is not valid JSON.
        """
        try:
            docs = self._read_docs()
        except (OSError, ValueError) as exc:
            raise FetchAttachedIdsFailed(case_id or "*", str(exc)) from exc
        return [
            PersistableAttachment.from_dict(_with_defaults(doc))
            for doc in docs
            if case_id is None or _references_case(doc.get("references"), case_id)
        ]

    def _read_docs(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        docs: list[dict[str, Any]] = []
        with self.path.open(encoding="utf-8") as fh:
            for line_no, line in enumerate(fh, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    docs.append(json.loads(line))
                except json.JSONDecodeError as exc:
                    raise ValueError(f"{self.path}:{line_no}: {exc}") from exc
        return docs

    # ── Write side ───────────────────────────────────────────────────────

    def create(
        self, attachment: PersistableAttachment, *, refresh: bool = False
    ) -> PersistableAttachment:
        return self.bulk_create([attachment], refresh=refresh)[0]

    def bulk_create(
        self, attachments: Sequence[PersistableAttachment], *, refresh: bool = False
    ) -> list[PersistableAttachment]:
        if not attachments:
            return []
        new_lines = "".join(a.to_json() + "\n" for a in attachments)
        try:
            _append_lines(self.path, new_lines)
        except OSError as exc:
            raise PersistFailed(f"Cannot write {len(attachments)} attachment(s) to {self.path}: {exc}") from exc

        if refresh:
            log.debug("Store %s: refresh requested, nothing to refresh", self.path.name)
        log.info("Wrote %d attachment(s) → %s", len(attachments), self.path)
        return list(attachments)

"""Request loaders: JSON / JSONL files and plain dicts -> AttachmentRequest.

Accepted item shapes::

    {"type": "user",  "comment": "...", "owner": "..."}
    {"type": "alert", "alertId": "a1" | ["a1", ...], "index": "i1" | [...],
     "owner": "...", "rule": {"id": "...", "name": "..."}}

``kind`` is accepted in place of ``type`` and ``text`` in place of
``comment``. An optional ``id`` becomes the record id.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from src.contracts.attachment import AlertReference, AttachmentRequest, Rule, UserComment
from src.contracts.enums import AttachmentType
from src.contracts.errors import MalformedRequest

log = logging.getLogger(__name__)


def _require(obj: dict[str, Any], key: str) -> Any:
    if key not in obj or obj[key] is None:
        raise MalformedRequest(f"missing required field '{key}'")
    return obj[key]


def _require_str(obj: dict[str, Any], key: str) -> str:
    value = _require(obj, key)
    if not isinstance(value, str):
        raise MalformedRequest(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _ids(value: Any, field_name: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    raise MalformedRequest(f"'{field_name}' must be a string or a list of strings")


def parse_request(obj: dict[str, Any]) -> AttachmentRequest:
    """Build an AttachmentRequest from a dict (JSON object)."""
    if not isinstance(obj, dict):
        raise MalformedRequest(f"request must be an object, got {type(obj).__name__}")

    kind = obj.get("type", obj.get("kind"))
    try:
        kind = AttachmentType(kind)
    except ValueError:
        raise MalformedRequest(f"unknown attachment type '{kind}'") from None

    owner = _require_str(obj, "owner")
    item_id = obj.get("id")
    if item_id is not None and not isinstance(item_id, str):
        raise MalformedRequest(f"'id' must be a string, got {type(item_id).__name__}")

    if kind is AttachmentType.USER:
        text = obj.get("comment", obj.get("text"))
        if text is None:
            raise MalformedRequest("missing required field 'comment'")
        if not isinstance(text, str):
            raise MalformedRequest(f"'comment' must be a string, got {type(text).__name__}")
        return UserComment(comment=text, owner=owner, id=item_id)

    alert_ids = _ids(_require(obj, "alertId"), "alertId")
    indices = _ids(_require(obj, "index"), "index")
    if len(alert_ids) != len(indices):
        raise MalformedRequest(
            f"alertId/index length mismatch: {len(alert_ids)} ids, {len(indices)} indices"
        )

    rule = _require(obj, "rule")
    if not isinstance(rule, dict):
        raise MalformedRequest("'rule' must be an object with 'id' and 'name'")

    return AlertReference(
        alert_ids=tuple(alert_ids),
        indices=tuple(indices),
        owner=owner,
        rule=Rule(id=_require_str(rule, "id"), name=_require_str(rule, "name")),
        id=item_id,
    )


def load_requests_jsonl(path: str) -> list[AttachmentRequest]:
    """Load requests from a JSONL file (one object per line).

    Unlike event loading, a bad line is not skipped: a batch with one broken
    request must fail as a whole.
    """
    requests: list[AttachmentRequest] = []
    with open(path, encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, 1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as exc:
                raise MalformedRequest(f"{path}:{line_no}: invalid JSON ({exc})") from exc
            try:
                requests.append(parse_request(obj))
            except MalformedRequest as exc:
                raise MalformedRequest(f"{path}:{line_no}: {exc}") from exc
    log.info("Loaded %d requests from JSONL: %s", len(requests), path)
    return requests


def load_requests_json(path: str) -> list[AttachmentRequest]:
    """Load requests from a JSON file holding one object or a list of objects."""
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise MalformedRequest(f"{path}: invalid JSON ({exc})") from exc
    items = data if isinstance(data, list) else [data]
    requests = [parse_request(obj) for obj in items]
    log.info("Loaded %d requests from JSON: %s", len(requests), path)
    return requests


def load_requests(path: str) -> list[AttachmentRequest]:
    """Auto-detect format by file extension and load requests."""
    p = Path(path)
    if p.suffix in (".jsonl", ".ndjson"):
        return load_requests_jsonl(path)
    return load_requests_json(path)

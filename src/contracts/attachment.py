"""Attachment data model: request variants and the persisted record shape.

Requests
────────
  UserComment     — free text, never touched by dedup
  AlertReference  — position-aligned (alert_id, index) pairs plus the rule
                    that raised the alerts

Persisted record
────────────────
  PersistableAttachment — id + attributes + case references, serialised with
  the store's field names (``alertId``, ``created_at``, ...).
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any

from src.contracts.enums import AttachmentType, ReferenceType

CASE_REFERENCE_NAME = "associated-cases"


def _as_tuple(value: str | Iterable[str]) -> tuple[str, ...]:
    """Normalise a scalar or a sequence of ids to a tuple."""
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True, slots=True)
class Rule:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class User:
    """Author of an attachment. Every field may be unknown."""

    username: str | None = None
    full_name: str | None = None
    email: str | None = None
    profile_uid: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> User | None:
        if data is None:
            return None
        return cls(
            username=data.get("username"),
            full_name=data.get("full_name"),
            email=data.get("email"),
            profile_uid=data.get("profile_uid"),
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Requests
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class UserComment:
    comment: str
    owner: str
    id: str | None = None  # caller-chosen record id, generated when absent

    @property
    def type(self) -> AttachmentType:
        return AttachmentType.USER


@dataclass(frozen=True, slots=True)
class AlertReference:
    """One or more alerts raised by the same rule.

    ``indices[i]`` names the index holding ``alert_ids[i]``. Scalars passed
    for either field are normalised to one-element tuples.
    """

    alert_ids: tuple[str, ...]
    indices: tuple[str, ...]
    owner: str
    rule: Rule
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "alert_ids", _as_tuple(self.alert_ids))
        object.__setattr__(self, "indices", _as_tuple(self.indices))

    @property
    def type(self) -> AttachmentType:
        return AttachmentType.ALERT

    def pairs(self) -> list[tuple[str, str]]:
        """Return (alert_id, index) pairs in request order."""
        return list(zip(self.alert_ids, self.indices))


AttachmentRequest = UserComment | AlertReference


# ═══════════════════════════════════════════════════════════════════════════
#  Persisted record
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CaseReference:
    """Association entry linking a record to its case."""

    id: str
    name: str = CASE_REFERENCE_NAME
    type: str = ReferenceType.CASES.value

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "type": self.type}


def _user_dict(user: User | None) -> dict[str, str | None] | None:
    return user.to_dict() if user is not None else None


@dataclass(slots=True)
class AttachmentAttributes:
    type: AttachmentType
    owner: str
    created_at: str  # ISO-8601
    created_by: User

    # ── user kind ──
    comment: str | None = None

    # ── alert kind ──
    alert_id: tuple[str, ...] = ()
    index: tuple[str, ...] = ()
    rule: Rule | None = None

    # ── filled in later by other flows ──
    pushed_at: str | None = None
    pushed_by: User | None = None
    updated_at: str | None = None
    updated_by: User | None = None

    def to_dict(self) -> dict[str, Any]:
        kind = AttachmentType(self.type)
        data: dict[str, Any] = {
            "type": kind.value,
            "owner": self.owner,
            "created_at": self.created_at,
            "created_by": self.created_by.to_dict(),
            "pushed_at": self.pushed_at,
            "pushed_by": _user_dict(self.pushed_by),
            "updated_at": self.updated_at,
            "updated_by": _user_dict(self.updated_by),
        }
        if kind is AttachmentType.USER:
            data["comment"] = self.comment
        else:
            data["alertId"] = list(self.alert_id)
            data["index"] = list(self.index)
            data["rule"] = asdict(self.rule) if self.rule is not None else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttachmentAttributes:
        rule = data.get("rule")
        return cls(
            type=AttachmentType(data["type"]),
            owner=data["owner"],
            created_at=data["created_at"],
            created_by=User.from_dict(data.get("created_by")) or User(),
            comment=data.get("comment"),
            alert_id=_as_tuple(data.get("alertId") or ()),
            index=_as_tuple(data.get("index") or ()),
            rule=Rule(id=rule["id"], name=rule["name"]) if rule else None,
            pushed_at=data.get("pushed_at"),
            pushed_by=User.from_dict(data.get("pushed_by")),
            updated_at=data.get("updated_at"),
            updated_by=User.from_dict(data.get("updated_by")),
        )


@dataclass(slots=True)
class PersistableAttachment:
    """A record ready to be handed to the store."""

    id: str
    attributes: AttachmentAttributes
    references: list[CaseReference] = field(default_factory=list)

    @property
    def type(self) -> AttachmentType:
        return AttachmentType(self.attributes.type)

    # ── serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attributes": self.attributes.to_dict(),
            "references": [r.to_dict() for r in self.references],
        }

    def to_json(self) -> str:
        """Return compact JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersistableAttachment:
        return cls(
            id=data["id"],
            attributes=AttachmentAttributes.from_dict(data["attributes"]),
            references=[
                CaseReference(id=r["id"], name=r["name"], type=r["type"])
                for r in data.get("references", [])
            ],
        )


@dataclass(slots=True)
class BulkCreateResult:
    """Outcome of a batch call.

    ``persisted`` is False when every item deduplicated away and the store
    was never called.
    """

    attachments: list[PersistableAttachment] = field(default_factory=list)
    persisted: bool = False

    def __len__(self) -> int:
        return len(self.attachments)

"""Shared fixtures for case attachment engine tests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pytest

from src.attachments.orchestrator import (
    AttachedAlertIndex,
    BatchOrchestrator,
    CasePersistenceClient,
)
from src.contracts.attachment import (
    AlertReference,
    PersistableAttachment,
    Rule,
    User,
    UserComment,
)

CASE_ID = "mock-id-1"
CREATED_DATE = "2023-04-07T12:18:36.941Z"
OWNER = "securitySolution"

# ── Helpers: create requests with sensible defaults ──────────────────────


def make_user() -> User:
    return User(
        username="damaged_raccoon",
        full_name="Damaged Raccoon",
        email="damaged_raccoon@example.com",
        profile_uid="u_raccoon_0",
    )


def make_user_comment(
    *,
    comment: str = "Wow, good luck catching that bad meanie!",
    owner: str = OWNER,
    id: str | None = None,
) -> UserComment:
    return UserComment(comment=comment, owner=owner, id=id)


def make_alert_reference(
    *,
    alert_ids: str | Sequence[str] = "test-id-1",
    indices: str | Sequence[str] | None = None,
    owner: str = OWNER,
    rule_id: str = "rule-id-1",
    rule_name: str = "rule-name-1",
    id: str | None = None,
) -> AlertReference:
    """Alert request; indices default to ``test-index-N`` matching each id."""
    if indices is None:
        ids = [alert_ids] if isinstance(alert_ids, str) else list(alert_ids)
        indices = [a.replace("id", "index") for a in ids]
        if isinstance(alert_ids, str):
            indices = indices[0]
    return AlertReference(
        alert_ids=alert_ids,
        indices=indices,
        owner=owner,
        rule=Rule(id=rule_id, name=rule_name),
        id=id,
    )


# ── Collaborator fake ────────────────────────────────────────────────────


class RecordingStore(AttachedAlertIndex, CasePersistenceClient):
    """In-memory collaborator that records every call it receives."""

    def __init__(self, attached: Iterable[str] = ()) -> None:
        self.attached = set(attached)
        self.fetch_calls: list[str] = []
        self.create_calls: list[tuple[PersistableAttachment, bool]] = []
        self.bulk_create_calls: list[tuple[list[PersistableAttachment], bool]] = []
        self.fetch_error: Exception | None = None
        self.persist_error: Exception | None = None

    def get_all_alert_ids(self, case_id: str) -> set[str]:
        self.fetch_calls.append(case_id)
        if self.fetch_error is not None:
            raise self.fetch_error
        return set(self.attached)

    def create(self, attachment, *, refresh=False):
        self.create_calls.append((attachment, refresh))
        if self.persist_error is not None:
            raise self.persist_error
        return attachment

    def bulk_create(self, attachments, *, refresh=False):
        self.bulk_create_calls.append((list(attachments), refresh))
        if self.persist_error is not None:
            raise self.persist_error
        return list(attachments)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore(attached={"test-id-4"})


@pytest.fixture
def orchestrator(store: RecordingStore) -> BatchOrchestrator:
    return BatchOrchestrator(CASE_ID, index=store, persistence=store, user=make_user())


@pytest.fixture
def single_alert() -> AlertReference:
    return make_alert_reference(alert_ids="test-id-1", indices="test-index-1")


@pytest.fixture
def multiple_alert() -> AlertReference:
    return make_alert_reference(
        alert_ids=["test-id-3", "test-id-4", "test-id-5"],
        indices=["test-index-3", "test-index-4", "test-index-5"],
    )

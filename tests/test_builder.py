"""Tests for src.attachments.builder — record construction and drop signal."""

from __future__ import annotations

import pytest

from src.attachments.builder import BuildMetadata, build
from src.attachments.dedup import DedupResult, dedupe
from src.contracts.attachment import CaseReference, Rule
from src.contracts.enums import AttachmentType
from tests.conftest import (
    CASE_ID,
    CREATED_DATE,
    OWNER,
    make_alert_reference,
    make_user,
    make_user_comment,
)


@pytest.fixture
def metadata() -> BuildMetadata:
    return BuildMetadata(case_id=CASE_ID, created_at=CREATED_DATE, created_by=make_user())


class TestBuildUserComment:
    def test_comment_unchanged(self, metadata):
        item = make_user_comment(id="comment-1")
        record = build(item, dedupe(item, frozenset()), metadata)
        assert record is not None
        assert record.id == "comment-1"
        assert record.type == AttachmentType.USER
        assert record.attributes.comment == item.comment
        assert record.attributes.owner == OWNER

    def test_comment_built_even_with_empty_dedup_result(self, metadata):
        record = build(make_user_comment(), DedupResult((), (), frozenset()), metadata)
        assert record is not None

    def test_full_serialised_shape(self, metadata):
        item = make_user_comment(id="comment-1")
        record = build(item, dedupe(item, frozenset()), metadata)
        assert record.to_dict() == {
            "id": "comment-1",
            "attributes": {
                "comment": "Wow, good luck catching that bad meanie!",
                "created_at": CREATED_DATE,
                "created_by": make_user().to_dict(),
                "owner": OWNER,
                "pushed_at": None,
                "pushed_by": None,
                "type": "user",
                "updated_at": None,
                "updated_by": None,
            },
            "references": [
                {"id": CASE_ID, "name": "associated-cases", "type": "cases"},
            ],
        }


class TestBuildAlertReference:
    def test_carries_only_surviving_pairs(self, metadata):
        item = make_alert_reference(
            alert_ids=["test-id-3", "test-id-4", "test-id-5"],
            id="comment-1",
        )
        result = dedupe(item, frozenset({"test-id-4"}))
        record = build(item, result, metadata)
        assert record is not None
        assert record.attributes.alert_id == ("test-id-3", "test-id-5")
        assert record.attributes.index == ("test-index-3", "test-index-5")
        assert record.attributes.rule == Rule(id="rule-id-1", name="rule-name-1")

    def test_empty_result_drops(self, metadata):
        item = make_alert_reference(alert_ids=["test-id-1"])
        result = dedupe(item, frozenset({"test-id-1"}))
        assert build(item, result, metadata) is None

    def test_serialised_alert_fields(self, metadata):
        item = make_alert_reference(alert_ids="test-id-1", id="comment-1")
        record = build(item, dedupe(item, frozenset()), metadata)
        attrs = record.to_dict()["attributes"]
        assert attrs["type"] == "alert"
        assert attrs["alertId"] == ["test-id-1"]
        assert attrs["index"] == ["test-index-1"]
        assert attrs["rule"] == {"id": "rule-id-1", "name": "rule-name-1"}
        assert attrs["created_at"] == CREATED_DATE
        assert "comment" not in attrs


class TestBuildCommon:
    def test_generated_id_when_absent(self, metadata):
        item = make_user_comment()
        a = build(item, dedupe(item, frozenset()), metadata)
        b = build(item, dedupe(item, frozenset()), metadata)
        assert a.id and b.id
        assert a.id != b.id

    def test_case_reference_always_present(self, metadata):
        item = make_alert_reference()
        record = build(item, dedupe(item, frozenset()), metadata)
        assert record.references == [CaseReference(id=CASE_ID)]

    def test_custom_reference_name(self):
        meta = BuildMetadata(
            case_id="c-9",
            created_at=CREATED_DATE,
            created_by=make_user(),
            reference_name="linked-case",
        )
        item = make_user_comment()
        record = build(item, dedupe(item, frozenset()), meta)
        assert record.references[0].to_dict() == {
            "id": "c-9", "name": "linked-case", "type": "cases",
        }

    def test_unsupported_request_raises(self, metadata):
        with pytest.raises(TypeError):
            build(object(), DedupResult((), (), frozenset()), metadata)

"""
Unit tests for request parsing and validation.

Run with: python -m pytest tests/test_models.py -v
"""

from datetime import datetime, timezone

import pytest

from annotation_export.errors import AnnotationValidationError
from annotation_export.models import (
    AI_ASSISTANT,
    MENTOR,
    annotation_from_dict,
    parse_export_request,
    parse_timestamp,
)
from tests.helpers import annotation_payload, reply_payload


class TestParseExportRequest:
    """Tests for the top-level request body."""

    def test_valid_request(self):
        filename, annotations = parse_export_request({
            "filename": "paper.pdf",
            "annotations": [annotation_payload(replies=[reply_payload()])],
        })

        assert filename == "paper.pdf"
        assert len(annotations) == 1
        assert annotations[0].page_index == 0
        assert annotations[0].rect.height == 20
        assert annotations[0].replies[0].author.name == "Bob"

    def test_empty_annotation_list_is_accepted(self):
        filename, annotations = parse_export_request({"filename": "paper.pdf", "annotations": []})
        assert annotations == []

    @pytest.mark.parametrize("body", [
        None,
        [],
        {"annotations": []},
        {"filename": "", "annotations": []},
        {"filename": "paper.pdf"},
        {"filename": "paper.pdf", "annotations": "nope"},
        {"filename": 42, "annotations": []},
    ])
    def test_missing_or_invalid_fields(self, body):
        with pytest.raises(AnnotationValidationError):
            parse_export_request(body)


class TestAnnotationFromDict:
    """Tests for single annotation parsing."""

    def test_selected_text_from_ai_annotation(self):
        annotation = annotation_from_dict(annotation_payload(selected_text="quoted source"))
        assert annotation.selected_text == "quoted source"

    def test_selected_text_defaults_to_empty(self):
        assert annotation_from_dict(annotation_payload()).selected_text == ""

    def test_missing_replies_becomes_empty_list(self):
        payload = annotation_payload()
        del payload["replies"]
        assert annotation_from_dict(payload).replies == []

    def test_localized_roles_are_normalized(self):
        payload = annotation_payload(role="AI助手", replies=[reply_payload(role="导师")])
        annotation = annotation_from_dict(payload)

        assert annotation.author.role == AI_ASSISTANT
        assert annotation.author.is_ai
        assert annotation.replies[0].author.role == MENTOR

    def test_missing_coordinates(self):
        payload = annotation_payload()
        del payload["coordinates"]
        with pytest.raises(AnnotationValidationError, match="coordinates"):
            annotation_from_dict(payload)

    def test_non_numeric_coordinate(self):
        payload = annotation_payload()
        payload["coordinates"]["pdfCoordinates"]["y"] = "200"
        with pytest.raises(AnnotationValidationError, match="pdfCoordinates.y"):
            annotation_from_dict(payload)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_coordinate(self, value):
        payload = annotation_payload(x=value)
        with pytest.raises(AnnotationValidationError, match="pdfCoordinates.x must be a finite number"):
            annotation_from_dict(payload)

    def test_unaliased_role_kept_verbatim(self):
        annotation = annotation_from_dict(annotation_payload(replies=[reply_payload(role="student")]))
        assert annotation.replies[0].author.role == "student"
        assert not annotation.replies[0].author.is_ai

    def test_negative_page_index(self):
        with pytest.raises(AnnotationValidationError, match="pageIndex"):
            annotation_from_dict(annotation_payload(page_index=-1))

    def test_bad_reply_timestamp(self):
        reply = reply_payload()
        reply["timestamp"] = "yesterday"
        with pytest.raises(AnnotationValidationError, match="timestamp"):
            annotation_from_dict(annotation_payload(replies=[reply]))


class TestParseTimestamp:

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-05-01T10:20:30.123Z") == datetime(
            2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)

    def test_offset_is_converted_to_utc(self):
        assert parse_timestamp("2024-05-01T18:20:30+08:00").hour == 10

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-05-01T10:20:30").tzinfo == timezone.utc

"""
Tests for pure annotation utility functions.
"""

from datetime import datetime, timedelta, timezone

import pytest

from charme_annotator.core.annotation import AnnotationRecord
from charme_annotator.core.annotation.utils import (
    default_annotation_formatter,
    format_coordinate,
    format_timestamp,
)


class TestFormatCoordinate:
    @pytest.mark.parametrize(
        "value,expected",
        [(55, "55"), (55.0, "55"), (-3.5, "-3.5"), (0.1, "0.1"), (-0.0, "0"), (1e-3, "0.001")],
    )
    def test_values(self, value, expected):
        assert format_coordinate(value) == expected


class TestFormatTimestamp:
    def test_utc(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, 6000, tzinfo=timezone.utc)

        assert format_timestamp(moment) == "2024-01-02T03:04:05.006Z"

    def test_other_zone_is_converted(self):
        moment = datetime(2024, 1, 2, 3, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(moment) == "2024-01-02T01:00:00.000Z"


class TestDefaultFormatter:
    def test_full_record(self):
        record = AnnotationRecord(
            spatial_text="POINT (1 2)",
            text="Warm",
            time="2024-01-02T03:04:05Z",
            firstname="Jane",
            surname="Doe",
            email="jane@example.org",
        )

        assert default_annotation_formatter(record) == (
            "Warm<br><br>"
            "Annotated at 2024-01-02T03:04:05Z by:<br>"
            '<a href="mailto:jane@example.org"><b>Jane Doe</b></a><br>'
        )

    def test_name_without_email_is_not_linked(self):
        record = AnnotationRecord(spatial_text=None, text="hot", name="Alice")

        assert default_annotation_formatter(record) == "hot<br><br><b>Alice</b><br>"

    def test_email_without_name_adds_nothing(self):
        record = AnnotationRecord(spatial_text=None, text="hot", email="a@b.c")

        assert default_annotation_formatter(record) == "hot<br><br>"

    def test_markup_in_text_is_escaped(self):
        record = AnnotationRecord(spatial_text=None, text="<script>")

        assert "<script>" not in default_annotation_formatter(record)


class TestAnnotationRecord:
    def test_from_feature_uses_wkt_property(self):
        feature = {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [1, 2]},
            "properties": {"wkt": "POINT (1 2)", "text": "hot", "account": "jdoe"},
        }

        record = AnnotationRecord.from_feature(feature)

        assert record.spatial_text == "POINT (1 2)"
        assert record.text == "hot"
        assert record.account == "jdoe"

    def test_from_feature_derives_wkt_from_geometry(self):
        feature = {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [1.5, 2]},
            "properties": {"text": "hot"},
        }

        record = AnnotationRecord.from_feature(feature)

        assert record.spatial_text.startswith("POINT")
        assert "1.5" in record.spatial_text

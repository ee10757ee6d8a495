"""Tests for the module-level binding functions."""

import io
import logging
from pathlib import Path
from typing import List

import pytest

from structural_xml_binder.api import (
    bind,
    bind_detailed,
    bind_element,
    bind_file,
    bind_string,
    populate,
)
from structural_xml_binder.binding import MappingPolicy
from structural_xml_binder.markup import Element, parse_string
from structural_xml_binder.shared import (
    BinderConfig,
    DiagnosticSeverity,
    MarkupParseError,
    NoSuchFieldError,
    UnsupportedLeafTypeError,
)

ZONE_XML = """<zone>
    <tzid>Europe/Paris</tzid>
    <aliases><alias>CET</alias><alias>MET</alias></aliases>
</zone>"""


class Zone:
    def setTzid(self, value: str) -> None:
        self.tzid = value

    def setAliases(self, value: List[str]) -> None:
        self.aliases = value


class Unconstructible:
    def __init__(self, required: str) -> None:
        self.required = required


class TestBind:
    """Test the one-shot entry points."""

    def test_bind_string(self):
        zone = bind_string(ZONE_XML, Zone)

        assert zone.tzid == "Europe/Paris"
        assert zone.aliases == ["CET", "MET"]

    def test_bind_bytes(self):
        assert bind(ZONE_XML.encode("utf-8"), Zone).tzid == "Europe/Paris"

    def test_bind_string_rejects_other_inputs(self):
        with pytest.raises(TypeError, match="markup must be str or bytes"):
            bind_string(io.StringIO(ZONE_XML), Zone)

    def test_bind_file(self, tmp_path: Path):
        path = tmp_path / "zone.xml"
        path.write_text(ZONE_XML, encoding="utf-8")

        assert bind_file(path, Zone).tzid == "Europe/Paris"
        assert bind_file(str(path), Zone).aliases == ["CET", "MET"]

    def test_bind_file_missing(self, tmp_path: Path):
        with pytest.raises(MarkupParseError, match="File not found"):
            bind_file(tmp_path / "missing.xml", Zone)

    def test_bind_with_policy(self):
        policy = MappingPolicy(skip=["aliases"], field_names={"id": "tzid"})

        zone = bind("<zone><id>UTC</id><aliases><alias>Z</alias></aliases></zone>", Zone, policy)

        assert zone.tzid == "UTC"
        assert not hasattr(zone, "aliases")

    def test_bind_with_config(self):
        """Test the strict preset keeps empty leaves as coercion errors."""
        config = BinderConfig.strict()

        with pytest.raises(UnsupportedLeafTypeError):
            bind("<zone><aliases/></zone>", Zone, config=config)
        assert bind("<zone><aliases/></zone>", Zone).aliases == []

    def test_root_not_constructible(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert bind("<root><a>1</a></root>", Unconstructible) is None

        assert "Cannot construct root type Unconstructible" in caplog.text

    def test_unknown_field_propagates(self):
        with pytest.raises(NoSuchFieldError) as exc_info:
            bind("<zone><offset>1</offset></zone>", Zone)

        assert exc_info.value.path == "/zone/offset"


class TestBindDetailed:
    """Test detailed results."""

    def test_metrics(self):
        result = bind_detailed(ZONE_XML, Zone)

        assert result.success
        assert result.value.tzid == "Europe/Paris"
        assert result.target_type == "Zone"
        assert result.metrics.elements_visited == 4
        assert result.metrics.values_assigned == 2
        assert result.metrics.values_appended == 2
        assert result.metrics.containers_created == 1
        assert result.metrics.objects_constructed == 1
        assert result.metrics.max_depth_reached == 2

    def test_fixed_correlation_id(self):
        result = bind_detailed(ZONE_XML, Zone, correlation_id="req-42")

        assert result.correlation_id == "req-42"

    def test_generated_correlation_ids_differ(self):
        first = bind_detailed(ZONE_XML, Zone)
        second = bind_detailed(ZONE_XML, Zone)

        assert first.correlation_id and second.correlation_id
        assert first.correlation_id != second.correlation_id

    def test_correlation_tracking_disabled(self):
        config = BinderConfig().override(global___enable_correlation_tracking=False)

        assert bind_detailed(ZONE_XML, Zone, config=config).correlation_id is None

    def test_root_failure_recorded(self):
        result = bind_detailed("<root/>", Unconstructible)

        assert result.success is False
        assert result.value is None
        warning = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)[0]
        assert warning.component == "construction"
        assert warning.path == "/root"

    def test_skips_recorded(self):
        result = bind_detailed(ZONE_XML, Zone, MappingPolicy(skip=["aliases"]))

        assert result.skipped_paths == ["/zone/aliases"]
        assert result.metrics.elements_skipped == 1


class TestPartialBinding:
    """Test binding into existing objects."""

    def test_bind_element(self):
        zone = Zone()

        bind_element(Element(tag="tzid", text="UTC"), zone)

        assert zone.tzid == "UTC"

    def test_populate(self):
        zone = Zone()
        zone.tzid = "unchanged"

        returned = populate("<zone><aliases><alias>A</alias></aliases></zone>", zone)

        assert returned is zone
        assert zone.tzid == "unchanged"
        assert zone.aliases == ["A"]

    def test_populate_from_element(self):
        root = parse_string(ZONE_XML)

        assert populate(root, Zone()).tzid == "Europe/Paris"

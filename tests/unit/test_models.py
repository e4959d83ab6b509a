"""
Unit tests for data-stream models.

Tests ContainerKind, ComponentRefInfo/CatalogEntry extraction and the
result data classes.
"""

import pytest
from lxml import etree

from conftest import CAT_NS, XLINK_NS
from scapds.exceptions import InvalidCatalogEntryError, InvalidComponentRefError
from scapds.models import (
    CONTAINER_ORDER,
    CatalogEntry,
    ComponentRefInfo,
    ComposeResult,
    ContainerKind,
    DecomposeResult,
)


def _ref(attrs: str) -> etree._Element:
    return etree.fromstring(f'<component-ref xmlns:xlink="{XLINK_NS}" {attrs}/>')


def _uri(attrs: str) -> etree._Element:
    return etree.fromstring(f'<uri xmlns="{CAT_NS}" {attrs}/>')


# ---------------------------------------------------------------------------
# ContainerKind
# ---------------------------------------------------------------------------
@pytest.mark.unit
class TestContainerKind:
    """Test container enum and ordering."""

    def test_values(self) -> None:
        assert {k.value for k in ContainerKind} == {
            "dictionaries",
            "checklists",
            "checks",
            "extended-components",
        }

    def test_skeleton_order(self) -> None:
        assert [k.value for k in CONTAINER_ORDER] == [
            "dictionaries",
            "checklists",
            "checks",
            "extended-components",
        ]


# ---------------------------------------------------------------------------
# ComponentRefInfo
# ---------------------------------------------------------------------------
@pytest.mark.unit
class TestComponentRefInfo:
    """Test reading component-ref elements."""

    def test_href_resolves_component_and_destination(self) -> None:
        info = ComponentRefInfo.from_element(_ref('id="r1" xlink:href="#dir/file-xccdf.xml"'))

        assert info.ref_id == "r1"
        assert info.href == "#dir/file-xccdf.xml"
        assert info.component_id == "dir/file-xccdf.xml"
        assert info.destination == "dir/file-xccdf.xml"

    def test_explicit_destination(self) -> None:
        info = ComponentRefInfo.from_element(_ref('id="r1" xlink:href="#comp"'), destination="sub/out.xml")

        assert info.component_id == "comp"
        assert info.destination == "sub/out.xml"

    def test_plain_href(self) -> None:
        info = ComponentRefInfo.from_element(_ref('id="r1" href="#comp"'))
        assert info.component_id == "comp"

    def test_missing_id_is_allowed(self) -> None:
        info = ComponentRefInfo.from_element(_ref('xlink:href="#comp"'))

        assert info.ref_id is None
        assert info.walk_key == "#comp"

    def test_walk_key_prefers_id(self) -> None:
        info = ComponentRefInfo.from_element(_ref('id="r1" xlink:href="#comp"'))
        assert info.walk_key == "r1"

    def test_missing_href(self) -> None:
        with pytest.raises(InvalidComponentRefError) as exc_info:
            ComponentRefInfo.from_element(_ref('id="r1"'))

        assert exc_info.value.attribute == "href"
        assert exc_info.value.ref_id == "r1"
        assert exc_info.value.recoverable is True

    def test_href_of_length_one(self) -> None:
        with pytest.raises(InvalidComponentRefError):
            ComponentRefInfo.from_element(_ref('id="r1" xlink:href="#"'))

    def test_frozen(self) -> None:
        info = ComponentRefInfo.from_element(_ref('id="r1" xlink:href="#comp"'))
        with pytest.raises(AttributeError):
            info.destination = "elsewhere"


# ---------------------------------------------------------------------------
# CatalogEntry
# ---------------------------------------------------------------------------
@pytest.mark.unit
class TestCatalogEntry:
    """Test reading catalog uri entries."""

    def test_valid_entry(self) -> None:
        entry = CatalogEntry.from_element(_uri('name="oval/defs.xml" uri="#cref-oval"'))

        assert entry.name == "oval/defs.xml"
        assert entry.target_ref_id == "cref-oval"

    def test_missing_name(self) -> None:
        with pytest.raises(InvalidCatalogEntryError) as exc_info:
            CatalogEntry.from_element(_uri('uri="#cref"'), parent_ref_id="parent")

        assert exc_info.value.attribute == "name"
        assert exc_info.value.ref_id == "parent"

    def test_missing_uri(self) -> None:
        with pytest.raises(InvalidCatalogEntryError) as exc_info:
            CatalogEntry.from_element(_uri('name="x.xml"'))

        assert exc_info.value.attribute == "uri"

    def test_uri_too_short(self) -> None:
        with pytest.raises(InvalidCatalogEntryError) as exc_info:
            CatalogEntry.from_element(_uri('name="x.xml" uri="#"'))

        assert exc_info.value.attribute == "uri"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------
@pytest.mark.unit
class TestDecomposeResult:
    """Test DecomposeResult helpers."""

    def test_empty_result(self) -> None:
        result = DecomposeResult(source_file="in.xml", target_dir="out")

        assert result.file_count == 0
        assert result.error_count == 0
        assert result.success is True

    def test_counts_and_serialization(self) -> None:
        result = DecomposeResult(
            source_file="in.xml",
            target_dir="out",
            datastream_id="ds1",
            written_files=["out/./a.xml", "out/./b.xml"],
            errors=[{"error_code": "COMPONENT_NOT_FOUND"}],
        )

        assert result.file_count == 2
        assert result.error_count == 1
        assert result.success is False
        assert result.to_dict()["written_files"] == ["out/./a.xml", "out/./b.xml"]
        assert result.to_dict()["datastream_id"] == "ds1"


@pytest.mark.unit
class TestComposeResult:
    """Test ComposeResult defaults."""

    def test_defaults(self) -> None:
        document = etree.ElementTree(etree.Element("root"))
        result = ComposeResult(document=document)

        assert result.component_refs == []
        assert result.components == []
        assert result.warnings == []
        assert result.output_file is None

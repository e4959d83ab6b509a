"""
Integration tests: compose a collection from files, split it again and
compare with the originals.
"""

import pytest
from lxml import etree

from conftest import XCCDF_NS, tree_signature
from scapds.composer import compose
from scapds.decomposer import decompose

BENCHMARK = f"""<?xml version="1.0" encoding="UTF-8"?>
<xccdf:Benchmark xmlns:xccdf="{XCCDF_NS}" id="xccdf_org.test_benchmark_roundtrip" resolved="1">
  <xccdf:title>Round trip</xccdf:title>
  <!-- rules follow -->
  <xccdf:Rule id="xccdf_org.test_rule_pkg" selected="true">
    <xccdf:title>Package installed</xccdf:title>
    <xccdf:check system="http://oval.mitre.org/XMLSchema/oval-definitions-5">
      <xccdf:check-content-ref href="oval/roundtrip-oval.xml" name="oval:org.test:def:10"/>
    </xccdf:check>
  </xccdf:Rule>
  <xccdf:Rule id="xccdf_org.test_rule_svc" selected="true">
    <xccdf:check system="http://oval.mitre.org/XMLSchema/oval-definitions-5">
      <xccdf:check-content-ref href="oval/roundtrip-oval.xml" name="oval:org.test:def:11"/>
    </xccdf:check>
  </xccdf:Rule>
</xccdf:Benchmark>
"""

OVAL = """<?xml version="1.0" encoding="UTF-8"?>
<oval_definitions xmlns="http://oval.mitre.org/XMLSchema/oval-definitions-5"
    xmlns:ind="http://oval.mitre.org/XMLSchema/oval-definitions-5#independent">
  <definitions>
    <definition id="oval:org.test:def:10" version="1" class="compliance"/>
    <definition id="oval:org.test:def:11" version="1" class="compliance"/>
  </definitions>
  <objects>
    <ind:textfilecontent54_object id="oval:org.test:obj:1" version="1"/>
  </objects>
</oval_definitions>
"""


@pytest.mark.integration
class TestComposeThenDecompose:
    """Test that decomposing a composed collection restores the file layout."""

    def test_roundtrip(self, write_xml, tmp_path) -> None:
        xccdf = write_xml("src/roundtrip-xccdf.xml", BENCHMARK)
        oval = write_xml("src/oval/roundtrip-oval.xml", OVAL)
        collection = tmp_path / "roundtrip-ds.xml"
        split_dir = tmp_path / "split"

        composed = compose(xccdf, collection, datastream_id="scap_org.test_datastream_roundtrip")
        result = decompose(collection, target_dir=split_dir)

        assert composed.warnings == []
        assert result.success
        assert result.datastream_id == "scap_org.test_datastream_roundtrip"
        assert result.file_count == 2

        for original, restored in (
            (xccdf, split_dir / "roundtrip-xccdf.xml"),
            (oval, split_dir / "oval" / "roundtrip-oval.xml"),
        ):
            assert restored.is_file()
            assert tree_signature(etree.parse(str(restored)).getroot()) == tree_signature(
                etree.parse(str(original)).getroot()
            )

    def test_parent_relative_dependency_skipped_on_both_sides(self, write_xml, tmp_path) -> None:
        xccdf = write_xml(
            "src/roundtrip-xccdf.xml",
            BENCHMARK.replace("oval/roundtrip-oval.xml", "../roundtrip-oval.xml"),
        )
        write_xml("roundtrip-oval.xml", OVAL)
        collection = tmp_path / "parent-ds.xml"
        split_dir = tmp_path / "split"

        composed = compose(xccdf, collection)
        result = decompose(collection, target_dir=split_dir)

        assert composed.components == ["roundtrip-xccdf.xml"]
        assert len(composed.warnings) == 1
        assert result.success
        assert result.file_count == 1
        assert sorted(p.name for p in split_dir.iterdir()) == ["roundtrip-xccdf.xml"]

    def test_roundtrip_is_stable(self, write_xml, tmp_path) -> None:
        xccdf = write_xml("src/roundtrip-xccdf.xml", BENCHMARK)
        write_xml("src/oval/roundtrip-oval.xml", OVAL)

        compose(xccdf, tmp_path / "first-ds.xml")
        decompose(tmp_path / "first-ds.xml", target_dir=tmp_path / "first")
        compose(tmp_path / "first" / "roundtrip-xccdf.xml", tmp_path / "second-ds.xml")
        decompose(tmp_path / "second-ds.xml", target_dir=tmp_path / "second")

        for relative in ("roundtrip-xccdf.xml", "oval/roundtrip-oval.xml"):
            first = etree.parse(str(tmp_path / "first" / relative)).getroot()
            second = etree.parse(str(tmp_path / "second" / relative)).getroot()
            assert tree_signature(first) == tree_signature(second)

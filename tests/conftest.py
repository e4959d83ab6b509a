"""
Shared fixtures for scapds tests.

Provides small but realistic data-stream collections written to tmp_path,
and a helper for comparing XML subtrees independently of prefixes and
namespace declaration placement.
"""

from pathlib import Path
from typing import Callable

import pytest
from lxml import etree

from scapds.config import get_settings

DS_NS = "http://scap.nist.gov/schema/scap/source/1.2"
XLINK_NS = "http://www.w3.org/1999/xlink"
CAT_NS = "urn:oasis:names:tc:entity:xmlns:xml:catalog"
XCCDF_NS = "http://checklists.nist.gov/xccdf/1.2"
OVAL_NS = "http://oval.mitre.org/XMLSchema/oval-definitions-5"


SAMPLE_COLLECTION = """<?xml version="1.0" encoding="UTF-8"?>
<ds:data-stream-collection xmlns:ds="http://scap.nist.gov/schema/scap/source/1.2"
    xmlns:xlink="http://www.w3.org/1999/xlink"
    xmlns:cat="urn:oasis:names:tc:entity:xmlns:xml:catalog"
    xmlns:xccdf="http://checklists.nist.gov/xccdf/1.2"
    id="scap_org.test_collection_sample" schematron-version="1.2">
  <ds:data-stream id="scap_org.test_datastream_first" scap-version="1.2" use-case="OTHER">
    <ds:dictionaries>
      <ds:component-ref id="scap_org.test_cref_test-cpe-dictionary.xml" xlink:href="#test-cpe-dictionary.xml"/>
    </ds:dictionaries>
    <ds:checklists>
      <ds:component-ref id="scap_org.test_cref_test-xccdf.xml" xlink:href="#test-xccdf.xml">
        <cat:catalog>
          <cat:uri name="test-oval.xml" uri="#scap_org.test_cref_test-oval.xml"/>
          <cat:uri name="cpe/test-cpe-oval.xml" uri="#scap_org.test_cref_test-cpe-oval.xml"/>
        </cat:catalog>
      </ds:component-ref>
    </ds:checklists>
    <ds:checks>
      <ds:component-ref id="scap_org.test_cref_test-oval.xml" xlink:href="#test-oval.xml"/>
      <ds:component-ref id="scap_org.test_cref_test-cpe-oval.xml" xlink:href="#test-cpe-oval.xml"/>
    </ds:checks>
  </ds:data-stream>
  <ds:data-stream id="scap_org.test_datastream_second" scap-version="1.2" use-case="OTHER">
    <ds:checklists>
      <ds:component-ref id="scap_org.test_cref_second-xccdf.xml" xlink:href="#second-xccdf.xml"/>
    </ds:checklists>
  </ds:data-stream>
  <ds:component id="test-xccdf.xml" timestamp="2024-01-01T00:00:00">
    <xccdf:Benchmark id="xccdf_org.test_benchmark_first" resolved="1">
      <xccdf:title>First benchmark</xccdf:title>
      <xccdf:Rule id="xccdf_org.test_rule_one" selected="true">
        <xccdf:title>Rule one</xccdf:title>
        <xccdf:check system="http://oval.mitre.org/XMLSchema/oval-definitions-5">
          <xccdf:check-content-ref href="test-oval.xml" name="oval:org.test:def:1"/>
        </xccdf:check>
      </xccdf:Rule>
    </xccdf:Benchmark>
  </ds:component>
  <ds:component id="test-oval.xml" timestamp="2024-01-01T00:00:00">
    <oval_definitions xmlns="http://oval.mitre.org/XMLSchema/oval-definitions-5">
      <definitions>
        <definition id="oval:org.test:def:1" version="1" class="compliance"/>
      </definitions>
    </oval_definitions>
  </ds:component>
  <ds:component id="test-cpe-oval.xml" timestamp="2024-01-01T00:00:00">
    <oval_definitions xmlns="http://oval.mitre.org/XMLSchema/oval-definitions-5">
      <definitions>
        <definition id="oval:org.test.cpe:def:1" version="1" class="inventory"/>
      </definitions>
    </oval_definitions>
  </ds:component>
  <ds:component id="test-cpe-dictionary.xml" timestamp="2024-01-01T00:00:00">
    <cpe-list xmlns="http://cpe.mitre.org/dictionary/2.0"/>
  </ds:component>
  <ds:component id="second-xccdf.xml" timestamp="2024-01-01T00:00:00">
    <xccdf:Benchmark id="xccdf_org.test_benchmark_second" resolved="1">
      <xccdf:title>Second benchmark</xccdf:title>
    </xccdf:Benchmark>
  </ds:component>
</ds:data-stream-collection>
"""


def build_collection(datastreams: str, components: str) -> str:
    """Wrap data-stream and component markup in a collection root."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<ds:data-stream-collection xmlns:ds="http://scap.nist.gov/schema/scap/source/1.2" '
        'xmlns:xlink="http://www.w3.org/1999/xlink" '
        'xmlns:cat="urn:oasis:names:tc:entity:xmlns:xml:catalog">'
        f"{datastreams}{components}"
        "</ds:data-stream-collection>"
    )


def payload(element_id: str) -> str:
    """A tiny stand-alone payload document."""
    return f'<payload xmlns="urn:test:payload" id="{element_id}"><item>{element_id}</item></payload>'


def tree_signature(element):
    """
    Structural fingerprint of an element: Clark-notation tag, attributes,
    stripped text and child fingerprints. Prefixes, comments and the place
    namespaces are declared do not affect it.
    """
    children = [tree_signature(child) for child in element if isinstance(child.tag, str)]
    return (
        element.tag,
        tuple(sorted(element.attrib.items())),
        (element.text or "").strip(),
        tuple(children),
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test see settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_xml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write XML text to a file under tmp_path and return its path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_collection(write_xml) -> Path:
    """Collection with two data-streams, a catalog and a nested catalog path."""
    return write_xml("sample-ds.xml", SAMPLE_COLLECTION)


@pytest.fixture
def sample_document(sample_collection):
    """Parsed sample collection."""
    return etree.parse(str(sample_collection))


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty directory for decomposed output."""
    path = tmp_path / "out"
    path.mkdir()
    return path

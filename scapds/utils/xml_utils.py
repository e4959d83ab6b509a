"""
SCAP XML Utility Functions
Shared lxml helpers for reading, cloning and writing data-stream documents
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from lxml import etree

from ..config import get_settings
from ..exceptions import OutputPathError, XmlParseError

logger = logging.getLogger(__name__)


DS_NAMESPACE = "http://scap.nist.gov/schema/scap/source/1.2"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
CATALOG_NAMESPACE = "urn:oasis:names:tc:entity:xmlns:xml:catalog"

# Common XML namespaces used across SCAP processing
SCAP_NAMESPACES = {
    "ds": DS_NAMESPACE,
    "xlink": XLINK_NAMESPACE,
    "cat": CATALOG_NAMESPACE,
    "xccdf": "http://checklists.nist.gov/xccdf/1.2",
    "xccdf-1.1": "http://checklists.nist.gov/xccdf/1.1",
    "oval": "http://oval.mitre.org/XMLSchema/oval-definitions-5",
    "cpe-dict": "http://cpe.mitre.org/dictionary/2.0",
}

# Candidate namespace prefix of a QName written inside a value ("oval:def")
QNAME_PREFIX_PATTERN = re.compile(r"(?<![\w.:-])([A-Za-z_][\w.-]*):(?=[A-Za-z_])")


def create_secure_parser(huge_tree: Optional[bool] = None) -> etree.XMLParser:
    """Build an lxml parser with XXE prevention settings."""
    if huge_tree is None:
        huge_tree = get_settings().huge_tree

    return etree.XMLParser(
        resolve_entities=False,  # Prevent XXE
        no_network=True,  # No network access
        huge_tree=huge_tree,  # Lifts libxml2 depth and size limits
    )


def parse_document(
    path: Union[str, Path],
    max_bytes: Optional[int] = None,
    huge_tree: Optional[bool] = None,
) -> etree._ElementTree:
    """
    Parse an XML file into a document tree.

    Args:
        path: Path to the XML file
        max_bytes: Largest accepted file size (defaults to settings)
        huge_tree: Lift lxml tree size limits (defaults to settings)

    Returns:
        Parsed document

    Raises:
        XmlParseError: If the file is missing, too large, unreadable or not
            well-formed XML. Carries the lxml error code and line when known.
    """
    str_path = str(path)
    if max_bytes is None:
        max_bytes = get_settings().max_input_bytes

    try:
        file_size = os.path.getsize(str_path)
    except OSError as e:
        raise XmlParseError(
            message=f"Could not read/parse XML of given input file at path '{str_path}'.",
            source_file=str_path,
            details={"reason": e.strerror or str(e)},
        ) from e

    if file_size > max_bytes:
        raise XmlParseError(
            message=f"File exceeds maximum size limit ({max_bytes} bytes)",
            source_file=str_path,
            details={"file_size": file_size, "max_size": max_bytes},
        )

    try:
        return etree.parse(str_path, create_secure_parser(huge_tree))
    except etree.XMLSyntaxError as e:
        raise XmlParseError(
            message=f"Could not read/parse XML of given input file at path '{str_path}'.",
            source_file=str_path,
            parser_code=e.code,
            line_number=e.lineno,
            details={"reason": e.msg},
        ) from e
    except OSError as e:
        raise XmlParseError(
            message=f"Could not read/parse XML of given input file at path '{str_path}'.",
            source_file=str_path,
            details={"reason": str(e)},
        ) from e


def is_element(node) -> bool:
    """Return True for element nodes (not comments, PIs or entities)."""
    return isinstance(node.tag, str)


def local_name(node) -> str:
    """Element name without its namespace."""
    return etree.QName(node).localname


def child_elements(parent, name: Optional[str] = None) -> Iterator[etree._Element]:
    """
    Iterate element children of parent in document order.

    Children are matched by local name so the same lookups work whatever
    prefix or namespace a producer used.
    """
    for candidate in parent:
        if not is_element(candidate):
            continue
        if name is not None and local_name(candidate) != name:
            continue
        yield candidate


def first_child_element(parent, name: Optional[str] = None) -> Optional[etree._Element]:
    """First element child of parent, optionally restricted to a local name."""
    return next(child_elements(parent, name), None)


def get_attribute(node, name: str) -> Optional[str]:
    """
    Read an attribute regardless of its namespace.

    An unprefixed attribute wins; otherwise the first namespaced attribute
    with a matching local name is returned, so ``href`` also finds
    ``xlink:href``.
    """
    value = node.get(name)
    if value is not None:
        return value

    suffix = "}" + name
    for key, candidate in node.attrib.items():
        if key.startswith("{") and key.endswith(suffix):
            return candidate

    return None


def clone_subtree(element) -> etree._ElementTree:
    """
    Deep-clone element into a brand new, independent document.

    The clone's root declares the namespaces the subtree uses: those of
    element and attribute names, plus prefixes that appear as
    ``prefix:name`` inside attribute values or text (QName-typed content in
    XCCDF/OVAL). Declarations inherited from the source document that the
    subtree does not use are dropped. The source document is not modified.

    Args:
        element: Root of the subtree to clone

    Returns:
        New ElementTree owning the clone
    """
    root = etree.Element(element.tag, attrib=dict(element.attrib), nsmap=element.nsmap)
    root.text = element.text

    for child in element:
        root.append(copy.deepcopy(child))

    etree.cleanup_namespaces(root, keep_ns_prefixes=_value_prefixes(root))
    return etree.ElementTree(root)


def _value_prefixes(root) -> List[str]:
    """Declared prefixes referenced as ``prefix:name`` in attribute values or text."""
    declared = {prefix for prefix in root.nsmap if prefix is not None}
    if not declared:
        return []

    used = set()
    for node in root.iter():
        values = [node.text]
        if is_element(node):
            values.extend(node.attrib.values())
        for value in values:
            if value:
                used.update(QNAME_PREFIX_PATTERN.findall(value))

    return sorted(used & declared)


def write_document(
    tree: etree._ElementTree,
    path: Union[str, Path],
    encoding: Optional[str] = None,
    pretty_print: Optional[bool] = None,
) -> str:
    """
    Serialize a document to path with an XML declaration.

    Args:
        tree: Document to write
        path: Destination file
        encoding: Output encoding (defaults to settings, UTF-8)
        pretty_print: Re-indent output (defaults to settings)

    Returns:
        The path written, as a string

    Raises:
        OutputPathError: If the file cannot be written
    """
    settings = get_settings()
    if encoding is None:
        encoding = settings.output_encoding
    if pretty_print is None:
        pretty_print = settings.pretty_print

    str_path = str(path)
    try:
        tree.write(str_path, xml_declaration=True, encoding=encoding, pretty_print=pretty_print)
    except (OSError, etree.SerialisationError) as e:
        raise OutputPathError(
            message=f"Could not write XML document to '{str_path}'",
            path=str_path,
            details={"reason": str(e)},
        ) from e

    logger.debug("Wrote %s", str_path)
    return str_path

"""
Element lookups within a data-stream collection.

All lookups walk direct children in document order and match on local
names, returning the first hit or None. Callers decide whether a miss is
fatal (no data-stream) or recoverable (a component or component-ref).
"""

from typing import List, Optional

from lxml import etree

from .utils.xml_utils import child_elements, get_attribute


def _collection_root(document) -> etree._Element:
    if isinstance(document, etree._ElementTree):
        return document.getroot()
    return document


def find_datastream(document, datastream_id: Optional[str] = None) -> Optional[etree._Element]:
    """
    Select a <data-stream> of the collection.

    Args:
        document: Collection document or its root element
        datastream_id: Id to match; None selects the first data-stream
            in document order whatever ids it or later ones carry

    Returns:
        The matching data-stream element, or None
    """
    for candidate in child_elements(_collection_root(document), "data-stream"):
        if datastream_id is None:
            return candidate
        if get_attribute(candidate, "id") == datastream_id:
            return candidate

    return None


def list_datastream_ids(document) -> List[Optional[str]]:
    """Ids of every data-stream in document order (None for anonymous ones)."""
    return [get_attribute(ds, "id") for ds in child_elements(_collection_root(document), "data-stream")]


def find_component(document, component_id: str) -> Optional[etree._Element]:
    """
    Find a top-level <component> by id.

    Only direct children of the collection root are considered.

    Args:
        document: Collection document or its root element
        component_id: Value of the component's id attribute

    Returns:
        The first matching component element, or None
    """
    for candidate in child_elements(_collection_root(document), "component"):
        if get_attribute(candidate, "id") == component_id:
            return candidate

    return None


def find_component_ref(document, datastream, ref_id: str) -> Optional[etree._Element]:
    """
    Find a <component-ref> of a data-stream by id.

    Searches every container of the data-stream in declaration order, then
    the refs of each container in order, so a catalog entry can point at a
    ref in any container.

    Args:
        document: Collection the data-stream belongs to
        datastream: The <data-stream> element
        ref_id: Value of the component-ref's id attribute

    Returns:
        The first matching component-ref element, or None
    """
    for container in child_elements(datastream):
        for component_ref in child_elements(container, "component-ref"):
            if get_attribute(component_ref, "id") == ref_id:
                return component_ref

    return None

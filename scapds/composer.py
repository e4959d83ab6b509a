"""
SCAP Source Data-Stream Composer

Builds a data-stream collection from standalone component files, the inverse
of scapds.decomposer.

A composed collection holds one <data-stream> with the four standard
containers, one <component-ref> per embedded file, and one <component> per
file carrying the file's root element. Component ids are the relative file
paths, so each ref's href ("#" + path) is at the same time the component
link and the path the decomposer writes the file back to.

When composing from an XCCDF benchmark, the files its check-content-ref
elements point to (OVAL definitions, typically) are embedded as well and
listed in the benchmark ref's catalog under the href the benchmark uses.
Decomposing the result reproduces the original file layout.

Usage:
    from scapds.composer import compose

    result = compose("ssg-rhel8-xccdf.xml", "ssg-rhel8-ds.xml")
    print(f"Embedded {len(result.components)} components")
"""

import logging
import posixpath
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

from lxml import etree

from .config import Settings, get_settings
from .exceptions import MissingContainerError, XmlParseError
from .locators import find_datastream
from .models import CONTAINER_ORDER, ComposeResult, ContainerKind
from .utils.logging_utils import sanitize_for_log
from .utils.xml_utils import (
    CATALOG_NAMESPACE,
    DS_NAMESPACE,
    XLINK_NAMESPACE,
    first_child_element,
    get_attribute,
    is_element,
    local_name,
    parse_document,
    write_document,
)

logger = logging.getLogger(__name__)


# Checked in order: the CPE suffixes must win over the generic "-oval.xml"
COMPONENT_SUFFIXES = [
    ("-cpe-oval.xml", ContainerKind.DICTIONARIES),
    ("-cpe-dictionary.xml", ContainerKind.DICTIONARIES),
    ("-xccdf.xml", ContainerKind.CHECKLISTS),
    ("-oval.xml", ContainerKind.CHECKS),
]

COLLECTION_NSMAP = {
    "ds": DS_NAMESPACE,
    "xlink": XLINK_NAMESPACE,
    "cat": CATALOG_NAMESPACE,
}


def _ds_tag(name: str, namespace: Optional[str] = None) -> str:
    return f"{{{namespace or DS_NAMESPACE}}}{name}"


def compose_skeleton(datastream_id: Optional[str] = None) -> etree._ElementTree:
    """
    Build an empty data-stream collection.

    The collection holds a single <ds:data-stream> with the containers
    dictionaries, checklists, checks and extended-components, in that order.

    Args:
        datastream_id: Id for the data-stream; omitted when None

    Returns:
        New collection document
    """
    root = etree.Element(_ds_tag("data-stream-collection"), nsmap=COLLECTION_NSMAP)

    datastream = etree.SubElement(root, _ds_tag("data-stream"))
    if datastream_id is not None:
        datastream.set("id", datastream_id)
    datastream.set("scap-version", "1.2")
    datastream.set("use-case", "OTHER")

    for kind in CONTAINER_ORDER:
        etree.SubElement(datastream, _ds_tag(kind.value))

    return etree.ElementTree(root)


def classify_component_file(filepath: str) -> ContainerKind:
    """
    Pick the data-stream container for a component file by its name.

    Examples:
        >>> classify_component_file("ssg-rhel8-xccdf.xml")
        <ContainerKind.CHECKLISTS: 'checklists'>
        >>> classify_component_file("ssg-rhel8-cpe-oval.xml")
        <ContainerKind.DICTIONARIES: 'dictionaries'>
    """
    for suffix, kind in COMPONENT_SUFFIXES:
        if filepath.endswith(suffix):
            return kind
    return ContainerKind.EXTENDED_COMPONENTS


def add_component_with_ref(
    document: etree._ElementTree,
    datastream: etree._Element,
    filepath: str,
    ref_id: str,
) -> etree._Element:
    """
    Append a component-ref for filepath to the matching container.

    The ref gets id=ref_id, xlink:href="#" + filepath and an empty catalog
    that dependency entries can be added to.

    Args:
        document: Collection being composed
        datastream: Data-stream to add the ref to
        filepath: Relative path of the component file
        ref_id: Id of the new component-ref

    Returns:
        The new <component-ref> element

    Raises:
        MissingContainerError: If the data-stream lacks the container the
            file belongs in
    """
    kind = classify_component_file(filepath)
    container = first_child_element(datastream, kind.value)
    if container is None:
        raise MissingContainerError(
            message=f"No {kind.value} element found in the datastream.",
            container=kind.value,
            datastream_id=get_attribute(datastream, "id"),
        )

    namespace = etree.QName(datastream).namespace
    component_ref = etree.SubElement(container, _ds_tag("component-ref", namespace))
    component_ref.set("id", ref_id)
    component_ref.set(f"{{{XLINK_NAMESPACE}}}href", f"#{filepath}")
    etree.SubElement(component_ref, f"{{{CATALOG_NAMESPACE}}}catalog")

    logger.debug(
        "Added component-ref %s to %s",
        sanitize_for_log(ref_id),
        kind.value,
    )
    return component_ref


def add_component(
    document: etree._ElementTree,
    source_path: Union[str, Path],
    component_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> etree._Element:
    """
    Embed a file as a new top-level <component> of the collection.

    Args:
        document: Collection being composed
        source_path: File to embed
        component_id: Id of the component; defaults to source_path as given
        settings: Parsing limits (defaults to global settings)

    Returns:
        The new <component> element

    Raises:
        XmlParseError: If the file cannot be read or parsed
    """
    settings = settings or get_settings()
    payload = parse_document(
        source_path,
        max_bytes=settings.max_input_bytes,
        huge_tree=settings.huge_tree,
    )

    root = document.getroot()
    component = etree.SubElement(root, _ds_tag("component", etree.QName(root).namespace))
    component.set("id", component_id if component_id is not None else str(source_path))
    component.set("timestamp", datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"))
    component.append(payload.getroot())

    return component


class DatastreamComposer:
    """
    Composes a collection from an XCCDF benchmark and the files it depends on.

    Attributes:
        settings: Parsing and naming settings
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        # relative path -> component-ref id, for files already embedded
        self._embedded: Dict[str, str] = {}

    def compose(
        self,
        xccdf_path: Union[str, Path],
        datastream_id: Optional[str] = None,
    ) -> ComposeResult:
        """
        Compose a collection around an XCCDF benchmark.

        Args:
            xccdf_path: Benchmark file; its directory is the base for
                resolving dependency hrefs
            datastream_id: Id for the composed data-stream

        Returns:
            ComposeResult holding the composed document

        Raises:
            XmlParseError: If the benchmark cannot be read or parsed
        """
        self._embedded = {}
        xccdf_path = Path(xccdf_path)
        base_dir = xccdf_path.parent

        document = compose_skeleton(datastream_id)
        datastream = find_datastream(document)
        result = ComposeResult(document=document, datastream_id=datastream_id)

        logger.info("Composing datastream from %s", xccdf_path)

        self._add_file(document, datastream, base_dir, xccdf_path.name, result)

        logger.info(
            "Composition finished: %d components, %d warnings",
            len(result.components),
            len(result.warnings),
        )
        return result

    def _add_file(
        self,
        document: etree._ElementTree,
        datastream: etree._Element,
        base_dir: Path,
        filepath: str,
        result: ComposeResult,
    ) -> str:
        """Embed one file with its ref, then its dependencies. Returns the ref id."""
        ref_id = f"{self.settings.ref_id_prefix}{filepath}"

        component = add_component(document, base_dir / filepath, component_id=filepath, settings=self.settings)
        component_ref = add_component_with_ref(document, datastream, filepath, ref_id)

        self._embedded[filepath] = ref_id
        result.components.append(filepath)
        result.component_refs.append(ref_id)

        if classify_component_file(filepath) == ContainerKind.CHECKLISTS:
            self._add_xccdf_dependencies(
                document,
                datastream,
                base_dir,
                filepath,
                first_child_element(component),
                first_child_element(component_ref, "catalog"),
                result,
            )

        return ref_id

    def _add_xccdf_dependencies(
        self,
        document: etree._ElementTree,
        datastream: etree._Element,
        base_dir: Path,
        filepath: str,
        benchmark: etree._Element,
        catalog: etree._Element,
        result: ComposeResult,
    ) -> None:
        """
        Embed the local files a benchmark's check-content-ref elements point
        to and list them in the benchmark ref's catalog.

        Example XCCDF check:
        <xccdf:check system="http://oval.mitre.org/XMLSchema/oval-definitions-5">
            <xccdf:check-content-ref name="oval:..." href="ssg-rhel8-oval.xml"/>
        </xccdf:check>
        """
        catalogued = set()

        for element in benchmark.iter():
            if not is_element(element) or local_name(element) != "check-content-ref":
                continue

            href = get_attribute(element, "href")
            if not href or href in catalogued:
                continue

            if href.startswith("#") or "://" in href or posixpath.isabs(href):
                self._warn(result, f"Dependency '{href}' of {filepath} is not a local relative file, not embedding it")
                catalogued.add(href)
                continue

            dependency = posixpath.normpath(posixpath.join(posixpath.dirname(filepath), href))
            catalogued.add(href)

            if dependency == filepath:
                continue

            # Component ids double as output paths on decompose, which refuses ".."
            if dependency == posixpath.pardir or dependency.startswith(posixpath.pardir + "/"):
                self._warn(
                    result,
                    f"Dependency '{href}' of {filepath} is outside the benchmark's directory, not embedding it",
                )
                continue

            if dependency not in self._embedded:
                if not (base_dir / dependency).is_file():
                    self._warn(result, f"Dependency '{href}' of {filepath} was not found at {base_dir / dependency}")
                    continue
                try:
                    self._add_file(document, datastream, base_dir, dependency, result)
                except XmlParseError as e:
                    self._warn(result, f"Dependency '{href}' of {filepath} could not be parsed: {e.message}")
                    continue

            uri = etree.SubElement(catalog, f"{{{CATALOG_NAMESPACE}}}uri")
            uri.set("name", href)
            uri.set("uri", f"#{self._embedded[dependency]}")

    def _warn(self, result: ComposeResult, message: str) -> None:
        result.warnings.append(message)
        logger.warning("%s", sanitize_for_log(message, max_length=500))


def compose(
    xccdf_path: Union[str, Path],
    output_path: Union[str, Path],
    datastream_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ComposeResult:
    """
    Compose a collection around an XCCDF benchmark and write it to output_path.

    Raises:
        XmlParseError: If the benchmark cannot be read or parsed
        OutputPathError: If the collection cannot be written
    """
    settings = settings or get_settings()
    result = DatastreamComposer(settings).compose(xccdf_path, datastream_id)
    result.output_file = write_document(
        result.document,
        output_path,
        encoding=settings.output_encoding,
        pretty_print=settings.pretty_print,
    )
    return result

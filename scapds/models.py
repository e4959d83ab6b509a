"""
Data-stream Models and Types

Typed views over the lxml tree of a SCAP source data-stream collection, and
the result objects returned by the decomposer and composer.

The tree itself is the data model: these classes only capture what an
operation read out of it (ComponentRefInfo, CatalogEntry) or what it
produced (DecomposeResult, ComposeResult).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from lxml import etree

from .exceptions import InvalidCatalogEntryError, InvalidComponentRefError
from .utils.xml_utils import get_attribute


class ContainerKind(str, Enum):
    """
    Component-ref containers of a <data-stream>.

    Attributes:
        DICTIONARIES: CPE dictionaries and CPE OVAL checks
        CHECKLISTS: XCCDF benchmarks
        CHECKS: OVAL definitions and other check systems
        EXTENDED_COMPONENTS: Anything else
    """

    DICTIONARIES = "dictionaries"
    CHECKLISTS = "checklists"
    CHECKS = "checks"
    EXTENDED_COMPONENTS = "extended-components"


# Order in which containers appear in a freshly composed data-stream
CONTAINER_ORDER: List[ContainerKind] = [
    ContainerKind.DICTIONARIES,
    ContainerKind.CHECKLISTS,
    ContainerKind.CHECKS,
    ContainerKind.EXTENDED_COMPONENTS,
]


def strip_fragment_marker(value: str) -> str:
    """Drop the leading character of a same-document link ("#id" -> "id")."""
    return value[1:]


@dataclass(frozen=True)
class ComponentRefInfo:
    """
    A <component-ref> read once from the tree.

    The href attribute does two jobs in a data-stream: it links the ref to
    a <component> by id, and (for top-level refs) it doubles as the relative
    file path the component is written to. Both readings are resolved here
    into separate fields.

    Attributes:
        ref_id: Value of the id attribute, None if missing
        href: Raw href value ("#" + component id)
        component_id: Id of the <component> the ref points to
        destination: Relative file path to dump the component to
    """

    ref_id: Optional[str]
    href: str
    component_id: str
    destination: str

    @classmethod
    def from_element(
        cls,
        element: etree._Element,
        destination: Optional[str] = None,
    ) -> "ComponentRefInfo":
        """
        Read a component-ref element.

        Args:
            element: The <component-ref> element
            destination: Relative output path; defaults to the component id

        Raises:
            InvalidComponentRefError: If href is missing or shorter than two
                characters (the "#" plus at least one id character)
        """
        ref_id = get_attribute(element, "id")
        href = get_attribute(element, "href")

        if not href or len(href) < 2:
            raise InvalidComponentRefError(
                message="No or invalid xlink:href attribute on given component-ref.",
                attribute="href",
                ref_id=ref_id,
                details={"href": href},
            )

        component_id = strip_fragment_marker(href)
        return cls(
            ref_id=ref_id,
            href=href,
            component_id=component_id,
            destination=destination if destination is not None else component_id,
        )

    @property
    def walk_key(self) -> str:
        """Identity used to detect catalog cycles."""
        return self.ref_id if self.ref_id is not None else self.href


@dataclass(frozen=True)
class CatalogEntry:
    """
    A catalog <uri> entry of a component-ref.

    Attributes:
        name: Relative path to dump the referenced component to, resolved
            against the directory of the parent component's file
        target_ref_id: Id of the component-ref the entry points to
    """

    name: str
    target_ref_id: str

    @classmethod
    def from_element(cls, element: etree._Element, parent_ref_id: Optional[str] = None) -> "CatalogEntry":
        """
        Read a catalog <uri> element.

        Raises:
            InvalidCatalogEntryError: If name is missing, or uri is missing
                or shorter than two characters
        """
        name = get_attribute(element, "name")
        if not name:
            raise InvalidCatalogEntryError(
                message="No or invalid name for a component referenced in the catalog. Skipping...",
                attribute="name",
                ref_id=parent_ref_id,
            )

        uri = get_attribute(element, "uri")
        if not uri or len(uri) < 2:
            raise InvalidCatalogEntryError(
                message="No or invalid URI for a component referenced in the catalog. Skipping...",
                attribute="uri",
                ref_id=parent_ref_id,
                details={"name": name, "uri": uri},
            )

        return cls(name=name, target_ref_id=strip_fragment_marker(uri))


@dataclass
class DecomposeResult:
    """
    Outcome of splitting a collection into component files.

    Attributes:
        source_file: The collection that was decomposed
        datastream_id: Id of the selected data-stream (None if it has none)
        target_dir: Output directory
        written_files: Files written, in the order they were written
        errors: Recoverable errors, as DatastreamError.to_dict() records
    """

    source_file: str
    target_dir: str
    datastream_id: Optional[str] = None
    written_files: List[str] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.written_files)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        """True when every component-ref was dumped without error."""
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_file": self.source_file,
            "datastream_id": self.datastream_id,
            "target_dir": self.target_dir,
            "written_files": list(self.written_files),
            "errors": list(self.errors),
        }


@dataclass
class ComposeResult:
    """
    Outcome of composing a collection from component files.

    Attributes:
        document: The composed collection
        datastream_id: Id given to the composed data-stream
        component_refs: Ids of the component-refs added, in order
        components: Ids of the components embedded, in order
        warnings: Dependencies that were referenced but not embedded
        output_file: Where the document was written, if it was
    """

    document: etree._ElementTree
    datastream_id: Optional[str] = None
    component_refs: List[str] = field(default_factory=list)
    components: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    output_file: Optional[str] = None

"""
SCAP Source Data-Stream Decomposer

Splits a SCAP source data-stream collection into standalone component files.

Every component-ref in the selected data-stream's <checklists> container is
dumped to the relative path named by its href. A component-ref may carry a
catalog of further component-refs (an XCCDF benchmark listing the OVAL files
its checks point to, for example); those are dumped next to it, relative to
the directory of the parent's file, and their own catalogs are followed in
turn. The output therefore mirrors the file layout the collection was
composed from:

    target_dir/ssg-rhel8-xccdf.xml
    target_dir/ssg-rhel8-oval.xml           (catalog entry of the XCCDF ref)
    target_dir/ssg-rhel8-cpe-dictionary.xml

Error handling:
    Unreadable input, an unknown data-stream, a data-stream without
    <checklists> and output directories that cannot be created are fatal
    and raised. Problems with a single component-ref, component, component
    file or catalog entry are
    logged, recorded in DecomposeResult.errors, and the walk carries on
    with the siblings.

Usage:
    from scapds.decomposer import decompose

    result = decompose("/path/to/ssg-rhel8-ds.xml", target_dir="/tmp/split")
    print(f"Wrote {result.file_count} files, {result.error_count} errors")
"""

import logging
from typing import List, Optional, Tuple

from lxml import etree

from .config import Settings, get_settings
from .exceptions import (
    RECOVERABLE_ERRORS,
    CatalogCycleError,
    ComponentNotFoundError,
    ComponentRefNotFoundError,
    ComponentWriteError,
    DatastreamError,
    DatastreamNotFoundError,
    EmptyComponentError,
    InvalidComponentRefError,
    MissingChecklistsError,
    OutputPathError,
    UnsafeDestinationError,
)
from .locators import find_component, find_component_ref, find_datastream, list_datastream_ids
from .models import CatalogEntry, ComponentRefInfo, DecomposeResult
from .utils.logging_utils import sanitize_for_log
from .utils.path_utils import ensure_directory_path, is_within_directory, split_dir_and_base
from .utils.xml_utils import (
    child_elements,
    clone_subtree,
    first_child_element,
    get_attribute,
    parse_document,
    write_document,
)

logger = logging.getLogger(__name__)


class DatastreamDecomposer:
    """
    Decomposes one data-stream of a collection into component files.

    The decomposer is stateful only for the duration of a decompose() call:
    recoverable errors and written files are collected on the instance and
    handed back in the DecomposeResult.

    Attributes:
        settings: Output and parsing settings
        errors: Recoverable errors of the current run (to_dict records)
        written_files: Files written by the current run
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.errors: List[dict] = []
        self.written_files: List[str] = []
        self._source_file: Optional[str] = None
        self._output_root: Optional[str] = None

    def _reset_state(self) -> None:
        self.errors = []
        self.written_files = []
        self._source_file = None
        self._output_root = None

    def _record_error(self, error: DatastreamError) -> None:
        if error.source_file is None:
            error.source_file = self._source_file
        self.errors.append(error.to_dict())
        logger.warning("[%s] %s", error.error_code, sanitize_for_log(error.message))

    def decompose(
        self,
        input_path: str,
        datastream_id: Optional[str] = None,
        target_dir: str = ".",
    ) -> DecomposeResult:
        """
        Dump every checklist of a data-stream, and its catalog dependencies,
        into target_dir.

        Args:
            input_path: Data-stream collection to read
            datastream_id: Data-stream to split; None picks the first one
            target_dir: Output directory ("" means the current directory)

        Returns:
            DecomposeResult listing written files and recoverable errors

        Raises:
            XmlParseError: If the input cannot be read or parsed
            DatastreamNotFoundError: If no data-stream matches
            MissingChecklistsError: If the data-stream has no <checklists>
            PathTooLongError: If an output directory path is too long
            DirectoryCreationError: If an output directory cannot be created
        """
        self._reset_state()
        input_path = str(input_path)
        target_dir = str(target_dir) if target_dir else "."
        self._source_file = input_path
        self._output_root = target_dir

        document = parse_document(
            input_path,
            max_bytes=self.settings.max_input_bytes,
            huge_tree=self.settings.huge_tree,
        )

        datastream = find_datastream(document, datastream_id)
        if datastream is None:
            message = (
                f"Could not find any datastream of id '{datastream_id}'"
                if datastream_id is not None
                else "Could not find any datastream inside the file"
            )
            raise DatastreamNotFoundError(
                message=message,
                source_file=input_path,
                datastream_id=datastream_id,
                available_ids=[ds_id for ds_id in list_datastream_ids(document) if ds_id is not None],
            )

        selected_id = get_attribute(datastream, "id")

        checklists = first_child_element(datastream, "checklists")
        if checklists is None:
            raise MissingChecklistsError(source_file=input_path, datastream_id=selected_id)

        logger.info(
            "Decomposing datastream %s of %s into %s",
            sanitize_for_log(selected_id),
            input_path,
            target_dir,
        )

        for component_ref in child_elements(checklists, "component-ref"):
            self.dump_component_ref(component_ref, document, datastream, target_dir)

        result = DecomposeResult(
            source_file=input_path,
            target_dir=target_dir,
            datastream_id=selected_id,
            written_files=list(self.written_files),
            errors=list(self.errors),
        )

        logger.info(
            "Decomposition finished: %d files written, %d errors",
            result.file_count,
            result.error_count,
        )
        return result

    def dump_component_ref(
        self,
        component_ref: etree._Element,
        document: etree._ElementTree,
        datastream: etree._Element,
        target_dir: str,
    ) -> None:
        """
        Dump a top-level component-ref to the path named by its href.

        The href ("#" + component id) doubles as the relative destination.
        """
        try:
            info = ComponentRefInfo.from_element(component_ref)
        except RECOVERABLE_ERRORS as e:
            self._record_error(e)
            return

        self.dump_component_ref_as(component_ref, document, datastream, target_dir, info.destination)

    def dump_component_ref_as(
        self,
        component_ref: etree._Element,
        document: etree._ElementTree,
        datastream: etree._Element,
        target_dir: str,
        relative_filename: str,
        chain: Tuple[str, ...] = (),
    ) -> None:
        """
        Dump the component a ref points to as target_dir/relative_filename,
        then follow the ref's catalog.

        Catalog entries are dumped relative to the directory of this ref's
        file. chain holds the refs currently being expanded; an entry that
        points back into it is reported as a CatalogCycleError instead of
        being followed.

        Args:
            component_ref: The <component-ref> element
            document: Collection the ref belongs to
            datastream: Data-stream the ref belongs to
            target_dir: Directory relative_filename is resolved against
            relative_filename: Destination path of the component
            chain: Keys of the component-refs being expanded above this one
        """
        ref_id = get_attribute(component_ref, "id")
        if ref_id is None:
            self._record_error(
                InvalidComponentRefError(
                    message="No or invalid id attribute on given component-ref.",
                    attribute="id",
                    details={"href": get_attribute(component_ref, "href")},
                )
            )

        try:
            info = ComponentRefInfo.from_element(component_ref, destination=relative_filename)
        except RECOVERABLE_ERRORS as e:
            self._record_error(e)
            return

        chain = chain + (info.walk_key,)

        file_reldir, _ = split_dir_and_base("./" + relative_filename)
        _, file_basename = split_dir_and_base(relative_filename)

        target_dirname = f"{target_dir}/{file_reldir}"
        target_filename = f"{target_dirname}/{file_basename}"

        output_root = self._output_root or target_dir
        if not is_within_directory(output_root, target_filename):
            self._record_error(
                UnsafeDestinationError(
                    message=f"Destination '{relative_filename}' of component-ref '{ref_id}' "
                    f"is outside the output directory. Skipping...",
                    path=target_filename,
                    details={"ref_id": ref_id, "output_dir": output_root},
                )
            )
            return

        ensure_directory_path(
            target_dirname,
            mode=self.settings.directory_mode,
            max_length=self.settings.max_path_length,
        )

        try:
            self.dump_component(info.component_id, document, target_filename)
        except RECOVERABLE_ERRORS as e:
            self._record_error(e)

        catalog = first_child_element(component_ref, "catalog")
        if catalog is None:
            return

        for uri in child_elements(catalog, "uri"):
            try:
                entry = CatalogEntry.from_element(uri, parent_ref_id=ref_id)

                catalog_ref = find_component_ref(document, datastream, entry.target_ref_id)
                if catalog_ref is None:
                    raise ComponentRefNotFoundError(
                        message=f"component-ref with given id '{entry.target_ref_id}' wasn't found in the document!",
                        ref_id=entry.target_ref_id,
                        details={"catalog_of": ref_id, "name": entry.name},
                    )

                if entry.target_ref_id in chain:
                    raise CatalogCycleError(
                        message=f"Catalog of component-ref '{ref_id}' points back to "
                        f"'{entry.target_ref_id}', which is already being dumped. Skipping...",
                        chain=list(chain) + [entry.target_ref_id],
                        ref_id=entry.target_ref_id,
                    )
            except RECOVERABLE_ERRORS as e:
                self._record_error(e)
                continue

            self.dump_component_ref_as(
                catalog_ref,
                document,
                datastream,
                target_dirname,
                entry.name,
                chain=chain,
            )

    def dump_component(
        self,
        component_id: str,
        document: etree._ElementTree,
        destination_path: str,
    ) -> str:
        """
        Write the payload of a component to destination_path as a standalone
        document.

        The payload (the component's only element child) is cloned into a new
        tree first, so the collection stays intact for later dumps.

        Args:
            component_id: Id of the top-level <component>
            document: Collection holding the component
            destination_path: File to write

        Returns:
            The path written

        Raises:
            ComponentNotFoundError: If no component has this id
            EmptyComponentError: If the component has no element child
            ComponentWriteError: If the file cannot be written
        """
        component = find_component(document, component_id)
        if component is None:
            raise ComponentNotFoundError(
                message=f"Component of given id '{component_id}' was not found in the document.",
                component_id=component_id,
            )

        inner_root = first_child_element(component)
        if inner_root is None:
            raise EmptyComponentError(
                message=f"Found component (id='{component_id}') but it has no element contents, "
                "nothing to dump, skipping...",
                component_id=component_id,
            )

        standalone = clone_subtree(inner_root)
        try:
            written = write_document(
                standalone,
                destination_path,
                encoding=self.settings.output_encoding,
                pretty_print=self.settings.pretty_print,
            )
        except OutputPathError as e:
            raise ComponentWriteError(
                message=f"Could not write component (id='{component_id}') to '{destination_path}', skipping...",
                path=str(destination_path),
                component_id=component_id,
                details={"reason": e.details.get("reason")},
            ) from e
        self.written_files.append(written)

        logger.info(
            "Dumped component %s to %s",
            sanitize_for_log(component_id),
            sanitize_for_log(written),
        )
        return written


def decompose(
    input_path: str,
    datastream_id: Optional[str] = None,
    target_dir: str = ".",
    settings: Optional[Settings] = None,
) -> DecomposeResult:
    """
    Split a data-stream collection into component files.

    Convenience wrapper around DatastreamDecomposer.decompose().
    """
    return DatastreamDecomposer(settings).decompose(input_path, datastream_id, target_dir)

"""
Data-stream Module Exceptions

This module defines the exception classes raised while decomposing a SCAP
source data-stream collection into component files and while composing
component files back into a collection.

Exception Hierarchy:
    DatastreamError (base)
    ├── XmlParseError (input could not be read or parsed)
    ├── DatastreamNotFoundError (no matching <data-stream>)
    ├── MissingContainerError (required container element absent)
    │   └── MissingChecklistsError (selected data-stream has no <checklists>)
    ├── OutputPathError (output location problems)
    │   ├── PathTooLongError (directory path exceeds the maximum length)
    │   ├── DirectoryCreationError (a path segment could not be created)
    │   └── UnsafeDestinationError (destination escapes the output directory)
    ├── ComponentError (component lookups, recoverable)
    │   ├── ComponentNotFoundError
    │   ├── EmptyComponentError
    │   └── ComponentWriteError
    └── ComponentRefError (component-ref and catalog problems, recoverable)
        ├── InvalidComponentRefError
        ├── InvalidCatalogEntryError
        ├── ComponentRefNotFoundError
        └── CatalogCycleError

Severity:
    Every class carries a ``recoverable`` flag. Fatal errors abort the whole
    decompose/compose call. Recoverable errors abort only the component-ref
    or catalog entry being processed; the decomposer logs them, records
    them in its result and carries on with the siblings.
"""

from typing import Any, Dict, List, Optional


class DatastreamError(Exception):
    """
    Base exception for all data-stream operations.

    Attributes:
        message: Human-readable error description
        details: Additional context information
        source_file: Path to the document that caused the error (if applicable)
        error_code: Machine-readable error identifier
    """

    recoverable: bool = False
    default_error_code: str = "DATASTREAM_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        error_code: Optional[str] = None,
    ) -> None:
        """
        Initialize a DatastreamError.

        Args:
            message: Human-readable error description.
            details: Additional context information for debugging.
            source_file: Path to the document that caused the error.
            error_code: Overrides the class default error code.
        """
        self.message = message
        self.details = details or {}
        self.source_file = source_file
        self.error_code = error_code or self.default_error_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the exception.
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "source_file": self.source_file,
        }


class XmlParseError(DatastreamError):
    """
    Raised when an input document cannot be read or parsed.

    Attributes:
        parser_code: Error code reported by the XML parser, if any
        line_number: Line where the parser gave up, if known
    """

    default_error_code = "XML_PARSE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        parser_code: Optional[int] = None,
        line_number: Optional[int] = None,
    ) -> None:
        self.parser_code = parser_code
        self.line_number = line_number

        enhanced_details = details or {}
        if parser_code is not None:
            enhanced_details["parser_code"] = parser_code
        if line_number is not None:
            enhanced_details["line_number"] = line_number

        super().__init__(message, enhanced_details, source_file)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["parser_code"] = self.parser_code
        result["line_number"] = self.line_number
        return result


class DatastreamNotFoundError(DatastreamError):
    """
    Raised when no <data-stream> matches the requested identifier.

    Attributes:
        datastream_id: Requested identifier (None when any data-stream would do)
        available_ids: Identifiers present in the document
    """

    default_error_code = "DATASTREAM_NOT_FOUND"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        datastream_id: Optional[str] = None,
        available_ids: Optional[List[str]] = None,
    ) -> None:
        self.datastream_id = datastream_id
        self.available_ids = available_ids or []

        enhanced_details = details or {}
        if datastream_id is not None:
            enhanced_details["datastream_id"] = datastream_id
        if available_ids:
            enhanced_details["available_ids"] = available_ids

        super().__init__(message, enhanced_details, source_file)


class MissingContainerError(DatastreamError):
    """
    Raised when a data-stream lacks a container element an operation needs.

    Attributes:
        container: Local name of the missing container
        datastream_id: Identifier of the data-stream, if it has one
    """

    default_error_code = "MISSING_CONTAINER"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        container: Optional[str] = None,
        datastream_id: Optional[str] = None,
    ) -> None:
        self.container = container
        self.datastream_id = datastream_id

        enhanced_details = details or {}
        if container:
            enhanced_details["container"] = container
        if datastream_id:
            enhanced_details["datastream_id"] = datastream_id

        super().__init__(message, enhanced_details, source_file)


class MissingChecklistsError(MissingContainerError):
    """Raised when the selected data-stream has no <checklists> container."""

    default_error_code = "MISSING_CHECKLISTS"

    def __init__(
        self,
        message: str = "No checklists element found in the matching datastream.",
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        datastream_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            details,
            source_file,
            container="checklists",
            datastream_id=datastream_id,
        )


class OutputPathError(DatastreamError):
    """
    Base class for problems with output paths.

    Attributes:
        path: The path that could not be used
    """

    default_error_code = "OUTPUT_PATH_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        self.path = path

        enhanced_details = details or {}
        if path is not None:
            enhanced_details["path"] = path

        super().__init__(message, enhanced_details, source_file)


class PathTooLongError(OutputPathError):
    """Raised when a directory path exceeds the maximum supported length."""

    default_error_code = "PATH_TOO_LONG"

    def __init__(
        self,
        message: str,
        path: str,
        max_length: int,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
    ) -> None:
        self.max_length = max_length

        enhanced_details = details or {}
        enhanced_details["max_length"] = max_length
        enhanced_details["length"] = len(path)

        super().__init__(message, enhanced_details, source_file, path=path)


class DirectoryCreationError(OutputPathError):
    """
    Raised when one segment of a directory path cannot be created.

    Attributes:
        segment: The directory prefix that failed
        reason: Operating system reason for the failure
    """

    default_error_code = "DIRECTORY_CREATION_FAILED"

    def __init__(
        self,
        message: str,
        path: str,
        segment: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
    ) -> None:
        self.segment = segment
        self.reason = reason

        enhanced_details = details or {}
        enhanced_details["segment"] = segment
        enhanced_details["reason"] = reason

        super().__init__(message, enhanced_details, source_file, path=path)


class UnsafeDestinationError(OutputPathError):
    """Raised when a destination taken from the document leaves the output directory."""

    recoverable = True
    default_error_code = "UNSAFE_DESTINATION"


class ComponentError(DatastreamError):
    """
    Base class for problems with a <component> element.

    Attributes:
        component_id: Identifier of the component involved
    """

    recoverable = True
    default_error_code = "COMPONENT_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        component_id: Optional[str] = None,
    ) -> None:
        self.component_id = component_id

        enhanced_details = details or {}
        if component_id is not None:
            enhanced_details["component_id"] = component_id

        super().__init__(message, enhanced_details, source_file)


class ComponentNotFoundError(ComponentError):
    """Raised when no top-level <component> carries the requested id."""

    default_error_code = "COMPONENT_NOT_FOUND"


class EmptyComponentError(ComponentError):
    """Raised when a component has no element child to dump."""

    default_error_code = "EMPTY_COMPONENT"


class ComponentWriteError(ComponentError):
    """
    Raised when a component's file cannot be written.

    Attributes:
        path: Destination that could not be written
    """

    default_error_code = "COMPONENT_WRITE_FAILED"

    def __init__(
        self,
        message: str,
        path: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        component_id: Optional[str] = None,
    ) -> None:
        self.path = path

        enhanced_details = details or {}
        enhanced_details["path"] = path

        super().__init__(message, enhanced_details, source_file, component_id=component_id)


class ComponentRefError(DatastreamError):
    """
    Base class for problems with <component-ref> elements and their catalogs.

    Attributes:
        ref_id: Identifier of the component-ref involved, if known
    """

    recoverable = True
    default_error_code = "COMPONENT_REF_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        ref_id: Optional[str] = None,
    ) -> None:
        self.ref_id = ref_id

        enhanced_details = details or {}
        if ref_id is not None:
            enhanced_details["ref_id"] = ref_id

        super().__init__(message, enhanced_details, source_file)


class InvalidComponentRefError(ComponentRefError):
    """
    Raised when a component-ref has a missing or malformed attribute.

    Attributes:
        attribute: Name of the offending attribute ("id" or "href")
    """

    default_error_code = "INVALID_COMPONENT_REF"

    def __init__(
        self,
        message: str,
        attribute: str,
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        ref_id: Optional[str] = None,
    ) -> None:
        self.attribute = attribute

        enhanced_details = details or {}
        enhanced_details["attribute"] = attribute

        super().__init__(message, enhanced_details, source_file, ref_id=ref_id)


class InvalidCatalogEntryError(InvalidComponentRefError):
    """Raised when a catalog <uri> entry lacks a usable name or uri attribute."""

    default_error_code = "INVALID_CATALOG_ENTRY"


class ComponentRefNotFoundError(ComponentRefError):
    """Raised when a catalog entry points at a component-ref that does not exist."""

    default_error_code = "COMPONENT_REF_NOT_FOUND"


class CatalogCycleError(ComponentRefError):
    """
    Raised when following a catalog entry would revisit a component-ref that
    is already being expanded.

    Attributes:
        chain: Component-ref ids from the outermost ref down to the repeated one
    """

    default_error_code = "CATALOG_CYCLE_DETECTED"

    def __init__(
        self,
        message: str,
        chain: List[str],
        details: Optional[Dict[str, Any]] = None,
        source_file: Optional[str] = None,
        ref_id: Optional[str] = None,
    ) -> None:
        self.chain = list(chain)

        enhanced_details = details or {}
        enhanced_details["chain"] = self.chain

        super().__init__(message, enhanced_details, source_file, ref_id=ref_id)


# Errors that abort only the component-ref or catalog entry being processed
RECOVERABLE_ERRORS = (ComponentError, ComponentRefError, UnsafeDestinationError)

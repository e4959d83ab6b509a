"""
scapds - SCAP source data-stream decomposition and composition

A data-stream collection bundles SCAP components (XCCDF checklists, OVAL
checks, CPE dictionaries, extended components) into a single XML file. Each
<data-stream> lists its components through <component-ref> elements, and a
component-ref may carry a catalog naming further component-refs it depends
on. This package walks that graph in both directions:

    decompose   collection -> directory tree of standalone component files
    compose     XCCDF benchmark (+ the files it references) -> collection

Quick Start:
    from scapds import compose, decompose

    result = decompose("ssg-rhel8-ds.xml", target_dir="split/")
    for path in result.written_files:
        print(path)

    compose("split/ssg-rhel8-xccdf.xml", "rebuilt-ds.xml")

Module Structure:
    scapds/
    ├── __init__.py      # This file - public API
    ├── config.py        # Environment-driven settings
    ├── exceptions.py    # Error hierarchy (fatal vs. recoverable)
    ├── models.py        # ComponentRefInfo, CatalogEntry, result types
    ├── locators.py      # data-stream / component / component-ref lookups
    ├── decomposer.py    # collection -> files
    ├── composer.py      # files -> collection
    ├── cli.py           # `scapds split|compose|list`
    └── utils/           # path, lxml and logging helpers
"""

from .composer import (
    DatastreamComposer,
    add_component,
    add_component_with_ref,
    classify_component_file,
    compose,
    compose_skeleton,
)
from .config import Settings, get_settings
from .decomposer import DatastreamDecomposer, decompose
from .exceptions import (
    RECOVERABLE_ERRORS,
    CatalogCycleError,
    ComponentError,
    ComponentNotFoundError,
    ComponentRefError,
    ComponentRefNotFoundError,
    ComponentWriteError,
    DatastreamError,
    DatastreamNotFoundError,
    DirectoryCreationError,
    EmptyComponentError,
    InvalidCatalogEntryError,
    InvalidComponentRefError,
    MissingChecklistsError,
    MissingContainerError,
    OutputPathError,
    PathTooLongError,
    UnsafeDestinationError,
    XmlParseError,
)
from .locators import find_component, find_component_ref, find_datastream, list_datastream_ids
from .models import CONTAINER_ORDER, CatalogEntry, ComponentRefInfo, ComposeResult, ContainerKind, DecomposeResult

__version__ = "0.1.0"

__all__ = [
    # Operations
    "decompose",
    "compose",
    "compose_skeleton",
    "add_component",
    "add_component_with_ref",
    "classify_component_file",
    "DatastreamDecomposer",
    "DatastreamComposer",
    # Lookups
    "find_component",
    "find_component_ref",
    "find_datastream",
    "list_datastream_ids",
    # Models
    "CONTAINER_ORDER",
    "CatalogEntry",
    "ComponentRefInfo",
    "ComposeResult",
    "ContainerKind",
    "DecomposeResult",
    # Configuration
    "Settings",
    "get_settings",
    # Exceptions
    "RECOVERABLE_ERRORS",
    "DatastreamError",
    "XmlParseError",
    "DatastreamNotFoundError",
    "MissingContainerError",
    "MissingChecklistsError",
    "OutputPathError",
    "PathTooLongError",
    "DirectoryCreationError",
    "UnsafeDestinationError",
    "ComponentError",
    "ComponentNotFoundError",
    "EmptyComponentError",
    "ComponentWriteError",
    "ComponentRefError",
    "InvalidComponentRefError",
    "InvalidCatalogEntryError",
    "ComponentRefNotFoundError",
    "CatalogCycleError",
]

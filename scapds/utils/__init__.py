"""
Shared helpers for path handling, lxml document access and safe logging.
"""

from .logging_utils import sanitize_for_log
from .path_utils import ensure_directory_path, is_within_directory, split_dir_and_base
from .xml_utils import (
    CATALOG_NAMESPACE,
    DS_NAMESPACE,
    SCAP_NAMESPACES,
    XLINK_NAMESPACE,
    child_elements,
    clone_subtree,
    create_secure_parser,
    first_child_element,
    get_attribute,
    is_element,
    local_name,
    parse_document,
    write_document,
)

__all__ = [
    "sanitize_for_log",
    "ensure_directory_path",
    "is_within_directory",
    "split_dir_and_base",
    "CATALOG_NAMESPACE",
    "DS_NAMESPACE",
    "SCAP_NAMESPACES",
    "XLINK_NAMESPACE",
    "child_elements",
    "clone_subtree",
    "create_secure_parser",
    "first_child_element",
    "get_attribute",
    "is_element",
    "local_name",
    "parse_document",
    "write_document",
]

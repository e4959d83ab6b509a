"""
Path Utilities
Directory creation and path splitting for decomposed component output
"""

import logging
import os
import posixpath
from typing import List, Optional, Tuple

from ..config import get_settings
from ..exceptions import DirectoryCreationError, PathTooLongError

logger = logging.getLogger(__name__)


def ensure_directory_path(
    path: str,
    mode: Optional[int] = None,
    max_length: Optional[int] = None,
) -> List[str]:
    """
    Create every "/"-delimited prefix of path, like ``mkdir -p``.

    Directories that already exist are accepted as they are. New directories
    get owner-only permissions unless another mode is configured.

    Args:
        path: Slash-delimited directory path
        mode: Permission bits for new directories (defaults to settings)
        max_length: Longest accepted path in bytes (defaults to settings)

    Returns:
        List of directories that were actually created, outermost first

    Raises:
        PathTooLongError: If path exceeds max_length. Nothing is created.
        DirectoryCreationError: If a segment cannot be created or exists as
            something other than a directory.
    """
    settings = get_settings()
    if mode is None:
        mode = settings.directory_mode
    if max_length is None:
        max_length = settings.max_path_length

    if len(os.fsencode(path)) > max_length:
        raise PathTooLongError(
            message=f"Directory path exceeds the maximum length of {max_length} bytes",
            path=path,
            max_length=max_length,
        )

    created: List[str] = []

    for i in range(len(path) + 1):
        if i < len(path) and path[i] != "/":
            continue

        segment = path[:i]
        if not segment or segment.endswith("/"):
            continue

        try:
            os.mkdir(segment, mode)
            created.append(segment)
        except FileExistsError:
            if not os.path.isdir(segment):
                raise DirectoryCreationError(
                    message=f"Cannot create directory '{segment}': a file with that name exists",
                    path=path,
                    segment=segment,
                    reason="not a directory",
                )
        except OSError as e:
            raise DirectoryCreationError(
                message=f"Cannot create directory '{segment}': {e.strerror}",
                path=path,
                segment=segment,
                reason=e.strerror or str(e),
            ) from e

    if created:
        logger.debug("Created %d directories for %s", len(created), path)

    return created


def split_dir_and_base(path: str) -> Tuple[str, str]:
    """
    Split a path into its directory portion and final segment.

    Follows POSIX dirname(3)/basename(3) rather than os.path.split:
    trailing slashes are ignored, a path without a directory component
    has the directory ".", and an empty path yields (".", ".").

    Examples:
        >>> split_dir_and_base("a/b/c.xml")
        ('a/b', 'c.xml')
        >>> split_dir_and_base("c.xml")
        ('.', 'c.xml')
        >>> split_dir_and_base("a/b/")
        ('a', 'b')
    """
    if not path:
        return ".", "."

    stripped = path.rstrip("/")
    if not stripped:
        return "/", "/"

    head, tail = posixpath.split(stripped)
    if not head:
        return ".", tail

    dirname = head.rstrip("/")
    if not dirname:
        dirname = "/"

    return dirname, tail


def is_within_directory(base_path: str, candidate: str) -> bool:
    """
    Check that candidate stays inside base_path once both are normalized.

    Args:
        base_path: Directory that should contain the candidate
        candidate: Path to check

    Returns:
        True if candidate is base_path itself or lies below it
    """
    base = os.path.normpath(os.path.abspath(base_path))
    target = os.path.normpath(os.path.abspath(candidate))
    return os.path.commonpath([base, target]) == base

"""Folder scoping rules.

A folder-level settings file lives at ``<root>/<subdir>/<file>``; the folder
it configures is ``<root>``. A resource belongs to a folder when its path is
the root itself or lies below it.
"""

import os
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname


def absolute_path(path: Path | str) -> Path:
    """Return an absolute, normalised path without resolving symlinks."""
    return Path(os.path.normpath(os.path.abspath(path)))


def folder_root(config_file: Path | str) -> Path:
    """Return the folder a settings file applies to (its grandparent)."""
    return absolute_path(config_file).parent.parent


def is_parent_folder(root: Path | str, path: Path | str) -> bool:
    """Check whether ``path`` is ``root`` or inside it.

    Comparison works on path segments, so ``/proj`` does not contain
    ``/project``.
    """
    root = os.path.normpath(str(root))
    path = os.path.normpath(str(path))
    if path == root:
        return True
    return path.startswith(root.rstrip(os.sep) + os.sep)


def uri_to_path(uri: str | None) -> Path | None:
    """Convert a ``file://`` URI (or bare absolute path) to a local path.

    Returns:
        Local path, or None for other schemes and unparsable input
    """
    if not uri:
        return None
    if os.path.isabs(uri):
        return Path(os.path.normpath(uri))
    try:
        parsed = urlparse(uri)
    except ValueError:
        return None
    if parsed.scheme != "file":
        return None
    path = url2pathname(parsed.path)
    if parsed.netloc and parsed.netloc != "localhost":
        path = f"//{parsed.netloc}{path}"
    if not path:
        return None
    return Path(os.path.normpath(path))

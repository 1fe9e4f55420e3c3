"""Path resolution against the image directory tree."""

import logging
import posixpath
from typing import NamedTuple

from .entry import TreeEntry
from .errors import NotADirectory, NotFound
from .naming import matches

logger = logging.getLogger(__name__)


class ResolvedPath(NamedTuple):
    path: str
    entry: TreeEntry


def normalize(path):
    """Return the canonical absolute form of a client supplied path"""
    path = (path or "").replace("\\", "/")
    path = posixpath.normpath("/" + path)
    # normpath keeps a leading "//" as POSIX allows
    return "/" + path.lstrip("/")


def split(path):
    return [part for part in normalize(path).split("/") if part]


def resolve(reader, root, path, strategies):
    """Walk from the root entry to the entry named by `path`.

    Intermediate segments must be directories. The final segment may be of
    any kind; symbolic links are returned as they are, never followed.
    """
    canonical = normalize(path)
    current = root
    walked = ""
    for segment in split(canonical):
        if not current.is_dir:
            logger.debug("Cannot resolve %s: %s is not a directory",
                         canonical, walked)
            raise NotADirectory(walked)
        current = _lookup(reader, current, segment, strategies)
        walked += "/" + segment
        if current is None:
            logger.debug("Cannot resolve %s: no %s", canonical, walked)
            raise NotFound(walked)
    return ResolvedPath(canonical, current)


def _lookup(reader, directory, segment, strategies):
    for child in reader.children(directory):
        if child.is_dot or child.is_dotdot:
            continue
        if matches(child, segment, strategies):
            return child
    return None

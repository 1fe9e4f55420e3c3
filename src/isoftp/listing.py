"""Directory listing."""

from typing import List, Tuple

from .errors import NotADirectory
from .metadata import ProjectedMetadata, project
from .naming import display_name


def list_directory(reader, entry, strategies) -> List[Tuple[str, ProjectedMetadata]]:
    """List the immediate children of a directory entry.

    Children come back in the order they are stored on disc, without the
    "." and ".." records.
    """
    if not entry.is_dir:
        raise NotADirectory(entry.identifier)
    listing = []
    for child in reader.children(entry):
        if child.is_dot or child.is_dotdot:
            continue
        listing.append((display_name(child, strategies), project(child)))
    return listing

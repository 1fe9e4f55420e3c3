"""
Image sessions
One open image per client connection, exposing the read half of the
storage contract and refusing the write half.
"""

import logging

from .config import StorageConfig
from .errors import NotADirectory, NotAFile, NotASymlink
from .guard import WriteGuard
from .listing import list_directory
from .metadata import project
from .naming import JOLIET, strategies_for
from .reader import JOLIET as JOLIET_TREE
from .reader import PRIMARY, ImageReader
from .resolver import resolve
from .stream import open_range

logger = logging.getLogger(__name__)


class ImageSession(WriteGuard):
    """Storage back-end bound to one open image.

    Sessions keep no state between commands: each call resolves its path
    from the root again.
    """

    def __init__(self, config, reader=None):
        self.config = config
        self.reader = reader or ImageReader.open(config.source)
        self.strategies = strategies_for(config.extensions,
                                         self.reader.has_rock_ridge,
                                         self.reader.has_joliet)
        self.tree = _tree_for(self.strategies)
        self.root = self.reader.root(self.tree)
        self.closed = False
        logger.debug("Session opened on %s using %s names", config.source,
                     "/".join(s.name for s in self.strategies))

    def resolve(self, path):
        return resolve(self.reader, self.root, path, self.strategies)

    def stat(self, path):
        return project(self.resolve(path).entry)

    def list(self, path):
        """Return (name, metadata) pairs for the directory at `path`"""
        resolved = self.resolve(path)
        if not resolved.entry.is_dir:
            raise NotADirectory(resolved.path)
        return list_directory(self.reader, resolved.entry, self.strategies)

    def retrieve(self, path, offset=0, length=None):
        """Open the file at `path` as a bounded stream starting at `offset`"""
        resolved = self.resolve(path)
        if not resolved.entry.is_file:
            raise NotAFile(resolved.path)
        return open_range(self.reader, resolved.entry, offset, length,
                          name=resolved.path, chunk_size=self.config.chunk_size)

    def readlink(self, path):
        resolved = self.resolve(path)
        if not resolved.entry.is_symlink:
            raise NotASymlink(resolved.path)
        return resolved.entry.symlink_target

    def chdir_check(self, path):
        """Resolve a working directory change; returns the canonical path"""
        resolved = self.resolve(path)
        if not resolved.entry.is_dir:
            raise NotADirectory(resolved.path)
        return resolved.path

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.reader.close()
        logger.debug("Session on %s closed", self.config.source)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def _tree_for(strategies):
    # Rock Ridge names live on the primary tree, Joliet names on their own
    return JOLIET_TREE if strategies[0].name == JOLIET else PRIMARY


def open_session(source, extensions=None, chunk_size=None):
    """Per-connection factory: open a fresh session onto an image.

    `source` is a path, a binary file object, or a ready StorageConfig.
    """
    if isinstance(source, StorageConfig):
        config = source
    else:
        kwargs = {}
        if extensions is not None:
            kwargs["extensions"] = extensions
        if chunk_size is not None:
            kwargs["chunk_size"] = chunk_size
        config = StorageConfig(source, **kwargs)
    return ImageSession(config)

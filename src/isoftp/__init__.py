"""
ISO 9660 FTP Storage Back-end
Serves the contents of ISO 9660 disc images (with Joliet and Rock Ridge)
read-only over FTP, or mounts them with FUSE.
"""

__version__ = "0.1.0"

from .config import ServerConfig, StorageConfig
from .errors import (MalformedImage, NotADirectory, NotAFile, NotASymlink,
                     NotFound, PermissionDenied, StorageError)
from .session import ImageSession, open_session

__all__ = [
    "ImageSession", "open_session", "StorageConfig", "ServerConfig",
    "StorageError", "NotFound", "NotADirectory", "NotAFile", "NotASymlink",
    "PermissionDenied", "MalformedImage",
]

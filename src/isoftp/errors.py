"""
Error kinds raised by the image storage back-end.

All of them are OSError subclasses carrying an errno, so the FTP layer
answers them with a 550 reply and the FUSE layer can hand the errno
straight to FuseOSError.
"""

import errno


class StorageError(OSError):
    """Base class for every error the storage back-end raises"""

    errno_code = errno.EIO
    message = "Input/output error"

    def __init__(self, path=None, message=None):
        super().__init__(self.errno_code, message or self.message, path)


class NotFound(StorageError):
    errno_code = errno.ENOENT
    message = "No such file or directory"


class NotADirectory(StorageError):
    errno_code = errno.ENOTDIR
    message = "Not a directory"


class NotAFile(StorageError):
    errno_code = errno.EISDIR
    message = "Not a regular file"


class NotASymlink(StorageError):
    errno_code = errno.EINVAL
    message = "Not a symbolic link"


class PermissionDenied(StorageError):
    errno_code = errno.EROFS
    message = "Read-only file system"


class MalformedImage(StorageError):
    """The image bytes could not be interpreted by the format reader"""

    errno_code = errno.EIO
    message = "Malformed disc image"

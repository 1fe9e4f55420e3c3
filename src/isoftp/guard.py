"""Write guard: every mutating storage operation is refused."""

import logging

from .errors import PermissionDenied

logger = logging.getLogger(__name__)

MUTATING_OPERATIONS = ("store", "delete", "rename", "mkdir", "rmdir",
                       "set_permissions", "set_mtime")


def deny(operation, path):
    logger.info("Refused %s on %s: image is read-only", operation, path)
    raise PermissionDenied(path)


class WriteGuard:
    """Mutating half of the storage contract.

    None of these methods touch the image reader or resolve the path, so a
    refused request cannot have side effects.
    """

    def store(self, path, data=None, offset=0):
        deny("store", path)

    def delete(self, path):
        deny("delete", path)

    def rename(self, source, destination):
        deny("rename", source)

    def mkdir(self, path):
        deny("mkdir", path)

    def rmdir(self, path):
        deny("rmdir", path)

    def set_permissions(self, path, mode):
        deny("set_permissions", path)

    def set_mtime(self, path, mtime):
        deny("set_mtime", path)

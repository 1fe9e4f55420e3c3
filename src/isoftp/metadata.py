"""
Metadata projection
Each field is taken from the first source that has it, richest first:
Rock Ridge, then the ISO 9660 record, then fixed defaults.
"""

import os
import stat
from dataclasses import dataclass

from .entry import EntryKind

EPOCH = 0.0

READ_ONLY_FILE = 0o444
READ_ONLY_DIR = 0o555
_READ_EXECUTE = 0o555

_TYPE_BITS = {
    EntryKind.DIRECTORY: stat.S_IFDIR,
    EntryKind.FILE: stat.S_IFREG,
    EntryKind.SYMLINK: stat.S_IFLNK,
}


@dataclass(frozen=True)
class ProjectedMetadata:
    kind: EntryKind
    size: int
    mtime: float
    permissions: int
    uid: int = 0
    gid: int = 0
    nlink: int = 1
    inode: int = 0

    @property
    def is_dir(self):
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self):
        return self.kind is EntryKind.FILE

    @property
    def is_symlink(self):
        return self.kind is EntryKind.SYMLINK

    @property
    def mode(self):
        """Permission bits combined with the file type bits"""
        return _TYPE_BITS[self.kind] | self.permissions

    def as_stat_result(self):
        return os.stat_result((self.mode, self.inode, 0, self.nlink, self.uid,
                               self.gid, self.size, self.mtime, self.mtime,
                               self.mtime))


def _rr_mtime(entry):
    return entry.rr_mtime


def _record_mtime(entry):
    return entry.record_mtime


def _volume_mtime(entry):
    return entry.volume_mtime


MTIME_SOURCES = (_rr_mtime, _record_mtime, _volume_mtime)


def _rr_permissions(entry):
    if entry.rr_mode is None:
        return None
    perms = entry.rr_mode & _READ_EXECUTE
    if entry.is_dir:
        # Readable directories must also be traversable
        perms |= (perms & 0o444) >> 2
    return perms


def _default_permissions(entry):
    return READ_ONLY_DIR if entry.is_dir else READ_ONLY_FILE


PERMISSION_SOURCES = (_rr_permissions, _default_permissions)


def _first(sources, entry, default):
    for source in sources:
        value = source(entry)
        if value is not None:
            return value
    return default


def project(entry):
    """Project a tree entry into the metadata shape the FTP layer expects.

    Missing optional fields fall back to defaults, so this never raises.
    """
    nlink = entry.rr_nlink
    if not nlink:
        nlink = 2 if entry.is_dir else 1
    return ProjectedMetadata(
        kind=entry.kind,
        size=entry.size,
        mtime=_first(MTIME_SOURCES, entry, EPOCH),
        permissions=_first(PERMISSION_SOURCES, entry, READ_ONLY_FILE),
        uid=entry.rr_uid or 0,
        gid=entry.rr_gid or 0,
        nlink=nlink,
        inode=entry.extent,
    )

#!/usr/bin/env python3
"""
ISO 9660 FUSE Filesystem
Read-only FUSE view of a disc image, served by the same session the FTP
front end uses.
"""

import os
import errno
import ctypes.util
from contextlib import contextmanager

# Monkeypatch find_library to support fuse-t on macOS
_original_find_library = ctypes.util.find_library

def _find_library(name):
    if name == 'fuse':
        # Check for fuse-t
        if os.path.exists('/usr/local/lib/libfuse-t.dylib'):
            return '/usr/local/lib/libfuse-t.dylib'
    return _original_find_library(name)

ctypes.util.find_library = _find_library

from fuse import FUSE, FuseOSError, Operations

from .session import open_session


@contextmanager
def _as_fuse_errors():
    try:
        yield
    except OSError as err:
        raise FuseOSError(err.errno or errno.EIO) from err


class IsoFuse(Operations):
    """FUSE filesystem for ISO 9660 disc images"""

    def __init__(self, source, extensions=None):
        self.session = open_session(source, extensions=extensions)
        self._handles = {}  # fh -> ExtentStream
        self._next_fh = 1

    def _attrs(self, meta):
        return dict(
            st_mode=meta.mode,
            st_nlink=meta.nlink,
            st_size=meta.size,
            st_uid=meta.uid,
            st_gid=meta.gid,
            st_ino=meta.inode,
            st_mtime=meta.mtime,
            st_atime=meta.mtime,
            st_ctime=meta.mtime,
        )

    # FUSE Operations
    # ===============

    def getattr(self, path, fh=None):
        """Get file/directory attributes"""
        with _as_fuse_errors():
            return self._attrs(self.session.stat(path))

    def readdir(self, path, fh):
        """List directory contents"""
        with _as_fuse_errors():
            names = [name for name, meta in self.session.list(path)]
        return ['.', '..'] + names

    def readlink(self, path):
        with _as_fuse_errors():
            return self.session.readlink(path)

    def open(self, path, flags):
        """Open a file for reading; any write access is refused"""
        with _as_fuse_errors():
            if flags & (os.O_WRONLY | os.O_RDWR | os.O_TRUNC | os.O_APPEND):
                self.session.store(path)
            stream = self.session.retrieve(path)
        fh = self._next_fh
        self._next_fh += 1
        self._handles[fh] = stream
        return fh

    def read(self, path, length, offset, fh):
        """Read data from file"""
        stream = self._handles.get(fh)
        with _as_fuse_errors():
            if stream is None:
                # Opened without our open(), e.g. via a kernel-cached handle
                with self.session.retrieve(path) as stream:
                    stream.seek(offset)
                    return stream.read(length)
            stream.seek(offset)
            return stream.read(length)

    def release(self, path, fh):
        stream = self._handles.pop(fh, None)
        if stream is not None:
            stream.close()
        return 0

    def statfs(self, path):
        block_size = self.session.reader.block_size
        return dict(f_bsize=block_size, f_frsize=block_size, f_blocks=0,
                    f_bfree=0, f_bavail=0, f_files=0, f_ffree=0, f_favail=0,
                    f_namemax=255)

    def access(self, path, amode):
        with _as_fuse_errors():
            self.session.stat(path)
            if amode & os.W_OK:
                self.session.store(path)
        return 0

    # Everything below modifies the image and is refused

    def create(self, path, mode, fi=None):
        with _as_fuse_errors():
            self.session.store(path)

    def write(self, path, data, offset, fh):
        with _as_fuse_errors():
            self.session.store(path, data, offset)

    def truncate(self, path, length, fh=None):
        with _as_fuse_errors():
            self.session.store(path)

    def unlink(self, path):
        with _as_fuse_errors():
            self.session.delete(path)

    def rename(self, old, new):
        with _as_fuse_errors():
            self.session.rename(old, new)

    def mkdir(self, path, mode):
        with _as_fuse_errors():
            self.session.mkdir(path)

    def rmdir(self, path):
        with _as_fuse_errors():
            self.session.rmdir(path)

    def chmod(self, path, mode):
        with _as_fuse_errors():
            self.session.set_permissions(path, mode)

    def chown(self, path, uid, gid):
        with _as_fuse_errors():
            self.session.set_permissions(path, None)

    def utimens(self, path, times=None):
        with _as_fuse_errors():
            self.session.set_mtime(path, times)

    def symlink(self, target, source):
        with _as_fuse_errors():
            self.session.store(target)

    def link(self, target, source):
        with _as_fuse_errors():
            self.session.store(target)

    def mknod(self, path, mode, dev):
        with _as_fuse_errors():
            self.session.store(path)

    def destroy(self, path):
        """Clean up resources when unmounting"""
        handles = list(self._handles.values())
        self._handles.clear()
        for stream in handles:
            stream.close()
        self.session.close()


def mount(image_path, mount_point, foreground=True, extensions=None):
    """Mount a disc image read-only"""
    if not os.path.exists(mount_point):
        os.makedirs(mount_point)

    filesystem = IsoFuse(image_path, extensions=extensions)
    FUSE(filesystem, mount_point, nothreads=True, foreground=foreground,
         ro=True)

"""
Image reader
Thin seam over pycdlib that turns its directory records into TreeEntry
objects and serves bounded byte ranges out of file extents.
"""

import logging
import os
import threading

import pycdlib
from pycdlib.pycdlibexception import PyCdlibException

from .entry import (EntryKind, TreeEntry, any_record_time,
                    directory_record_time, volume_descriptor_time)
from .errors import MalformedImage, NotADirectory, NotAFile
from .naming import strip_version

logger = logging.getLogger(__name__)

PRIMARY = "primary"
JOLIET = "joliet"


class ImageReader:
    """Read-only view of one disc image"""

    def __init__(self, source):
        self.source = source
        self._iso = pycdlib.PyCdlib()
        self._lock = threading.Lock()
        try:
            if isinstance(source, (str, bytes, os.PathLike)):
                self._iso.open(os.fsdecode(source), "rb")
            else:
                self._iso.open_fp(source)
        except PyCdlibException as err:
            raise MalformedImage(_source_name(source), str(err)) from err
        self.has_joliet = self._iso.has_joliet()
        self.has_rock_ridge = self._iso.has_rock_ridge()
        self.block_size = self._iso.logical_block_size
        self._volume_mtime = volume_descriptor_time(
            getattr(self._iso.pvd, "volume_modification_date", None))
        self._closed = False
        logger.debug("Opened image %s (joliet=%s, rock ridge=%s)",
                     _source_name(source), self.has_joliet, self.has_rock_ridge)

    @classmethod
    def open(cls, source):
        return cls(source)

    def root(self, tree=PRIMARY):
        """Return the root directory entry of the primary or Joliet tree"""
        if tree == JOLIET:
            if not self.has_joliet:
                raise NotADirectory("/", "Image has no Joliet tree")
            record = self._iso.joliet_vd.root_directory_record()
        else:
            record = self._iso.pvd.root_directory_record()
        return self._make_entry(record, joliet=(tree == JOLIET), name="")

    def children(self, entry):
        """Yield every child of a directory entry in on-disc order.

        The "." and ".." records are yielded too; callers decide what to do
        with them.
        """
        if not entry.is_dir:
            raise NotADirectory(entry.identifier)
        joliet = entry.joliet_name is not None
        last = None
        try:
            for record in entry.record.children:
                ident = record.file_identifier()
                # Continuation records of a multi-extent file share its name and
                # are reached through the first one
                if ident == last:
                    continue
                last = ident
                rr = record.rock_ridge
                if rr is not None and rr.relocated_record():
                    continue
                if rr is not None and rr.child_link_record_exists():
                    record = _relocated_target(record)
                yield self._make_entry(record, joliet=joliet)
        except PyCdlibException as err:
            raise MalformedImage(entry.identifier, str(err)) from err

    def read_extent(self, entry, offset, length):
        """Read at most `length` bytes of a file entry starting at `offset`.

        The range is clipped to the entry's recorded length, so bytes that
        follow the file on disc are never returned. Multi-extent files are
        read across their continuation records.
        """
        if not entry.is_file:
            raise NotAFile(entry.identifier)
        end = min(entry.size, offset + length)
        if offset < 0 or offset >= end:
            return b""
        parts = []
        start = 0
        for record in extent_chain(entry.record):
            stop = start + record.get_data_length()
            if stop > offset and start < end:
                lo = max(offset, start) - start
                hi = min(end, stop) - start
                parts.append(self._read_record(entry, record, lo, hi - lo))
            start = stop
            if start >= end:
                break
        return b"".join(parts)

    def _read_record(self, entry, record, offset, size):
        fp = record.data_fp
        if fp is None:
            return b""
        # Every stream of the session reads through the same file object
        with self._lock:
            fp.seek(record.fp_offset + offset)
            data = fp.read(size)
        if len(data) != size:
            raise MalformedImage(
                entry.identifier,
                "Short read at extent %d: wanted %d bytes, got %d"
                % (record.extent_location(), size, len(data)))
        return data

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._iso.close()
        logger.debug("Closed image %s", _source_name(self.source))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _make_entry(self, record, joliet=False, name=None):
        ident = record.file_identifier()
        child = name is None
        if child and joliet:
            name = strip_version(ident.decode("utf-16_be", "replace"))
        elif child:
            name = ident.decode("utf-8", "replace")

        rr = record.rock_ridge
        if record.is_symlink():
            kind = EntryKind.SYMLINK
        elif record.is_dir():
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.FILE

        attrs = dict(
            kind=kind,
            size=sum(r.get_data_length() for r in extent_chain(record)),
            extent=record.extent_location(),
            identifier=name,
            joliet_name=name if joliet else None,
            record_mtime=directory_record_time(record.date),
            volume_mtime=self._volume_mtime,
            is_dot=child and record.is_dot(),
            is_dotdot=child and record.is_dotdot(),
            record=record,
        )
        if rr is not None:
            attrs.update(_rock_ridge_attrs(rr, kind))
        return TreeEntry(**attrs)


def _rock_ridge_attrs(rr, kind):
    attrs = {}
    rr_name = rr.name()
    if rr_name:
        attrs["rr_name"] = rr_name.decode("utf-8", "replace")

    px = rr.dr_entries.px_record or rr.ce_entries.px_record
    if px is not None:
        attrs["rr_mode"] = px.posix_file_mode
        attrs["rr_uid"] = px.posix_user_id
        attrs["rr_gid"] = px.posix_group_id
        attrs["rr_nlink"] = px.posix_file_links

    tf = rr.dr_entries.tf_record or rr.ce_entries.tf_record
    if tf is not None and tf.modification_time is not None:
        attrs["rr_mtime"] = any_record_time(tf.modification_time)

    if kind is EntryKind.SYMLINK:
        attrs["symlink_target"] = rr.symlink_path().decode("utf-8", "replace")
    return attrs


def extent_chain(record):
    """Yield a record and the continuation records of a multi-extent file"""
    while record is not None:
        yield record
        record = getattr(record, "data_continuation", None)


def _relocated_target(record):
    """Follow a Rock Ridge child link to the directory that was moved away"""
    moved = record.rock_ridge.cl_to_moved_dr
    return record if moved is None else moved


def _source_name(source):
    if isinstance(source, (str, bytes, os.PathLike)):
        return os.fsdecode(source)
    return getattr(source, "name", repr(source))

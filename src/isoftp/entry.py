"""Tree entries as surfaced by the image reader."""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional


class EntryKind(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class TreeEntry:
    """One directory record of the image hierarchy.

    `identifier` is the name recorded in the tree being walked (the ISO 9660
    name, or the Unicode name when the Joliet tree is walked). The optional
    `rr_*` fields are only filled in when the record carries Rock Ridge
    extension records.
    """

    kind: EntryKind
    size: int
    extent: int
    identifier: str
    joliet_name: Optional[str] = None
    rr_name: Optional[str] = None
    rr_mode: Optional[int] = None
    rr_uid: Optional[int] = None
    rr_gid: Optional[int] = None
    rr_nlink: Optional[int] = None
    rr_mtime: Optional[float] = None
    symlink_target: Optional[str] = None
    record_mtime: Optional[float] = None
    volume_mtime: Optional[float] = None
    is_dot: bool = False
    is_dotdot: bool = False
    record: Any = field(default=None, compare=False, repr=False)

    @property
    def is_dir(self):
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self):
        return self.kind is EntryKind.FILE

    @property
    def is_symlink(self):
        return self.kind is EntryKind.SYMLINK


def directory_record_time(date) -> Optional[float]:
    """Convert a 7-byte directory record date to POSIX seconds"""
    if date is None:
        return None
    year = getattr(date, "years_since_1900", None)
    if year is None:
        return None
    return _to_timestamp(1900 + year, date.month, date.day_of_month,
                         date.hour, date.minute, date.second, 0,
                         date.gmtoffset)


def volume_descriptor_time(date) -> Optional[float]:
    """Convert a 17-byte volume descriptor date to POSIX seconds"""
    if date is None:
        return None
    year = getattr(date, "year", None)
    if not year:
        # An all-zero date means "not specified"
        return None
    return _to_timestamp(year, date.month, date.dayofmonth, date.hour,
                         date.minute, date.second, date.hundredthsofsecond,
                         date.gmtoffset)


def any_record_time(date) -> Optional[float]:
    """Rock Ridge TF timestamps come in either of the two layouts"""
    if hasattr(date, "years_since_1900"):
        return directory_record_time(date)
    return volume_descriptor_time(date)


def _to_timestamp(year, month, day, hour, minute, second, hundredths, gmtoffset):
    try:
        # gmtoffset counts 15 minute intervals from UTC
        tz = timezone(timedelta(minutes=15 * (gmtoffset or 0)))
        stamp = datetime(year, month, day, hour, minute, second,
                         (hundredths or 0) * 10000, tzinfo=tz)
        return stamp.timestamp()
    except (ValueError, OverflowError, TypeError):
        return None

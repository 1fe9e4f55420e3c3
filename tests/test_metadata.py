import stat
import time

from isoftp import open_session
from isoftp.entry import EntryKind, TreeEntry, volume_descriptor_time
from isoftp.metadata import EPOCH, READ_ONLY_DIR, READ_ONLY_FILE, project

from conftest import BIG


def _entry(kind=EntryKind.FILE, **kwargs):
    return TreeEntry(kind=kind, size=kwargs.pop("size", 0), extent=20,
                     identifier="X", **kwargs)


def test_defaults_when_nothing_is_known():
    meta = project(_entry())
    assert meta.mtime == EPOCH
    assert meta.permissions == READ_ONLY_FILE
    assert (meta.uid, meta.gid, meta.nlink) == (0, 0, 1)

    meta = project(_entry(EntryKind.DIRECTORY))
    assert meta.permissions == READ_ONLY_DIR
    assert meta.nlink == 2
    assert stat.S_ISDIR(meta.mode)


def test_mtime_sources_in_order():
    assert project(_entry(rr_mtime=3.0, record_mtime=2.0, volume_mtime=1.0)).mtime == 3.0
    assert project(_entry(record_mtime=2.0, volume_mtime=1.0)).mtime == 2.0
    assert project(_entry(volume_mtime=1.0)).mtime == 1.0


def test_rock_ridge_mode_is_made_read_only():
    meta = project(_entry(rr_mode=0o100664))
    assert meta.permissions == 0o444
    meta = project(_entry(EntryKind.DIRECTORY, rr_mode=0o040740))
    assert meta.permissions == 0o550
    meta = project(_entry(EntryKind.DIRECTORY, rr_mode=0o040604))
    assert meta.permissions == 0o505


def test_symlink_mode_bits():
    meta = project(_entry(EntryKind.SYMLINK, rr_mode=0o120777))
    assert stat.S_ISLNK(meta.mode)
    assert meta.permissions == 0o555


def test_stat_result_shape():
    meta = project(_entry(size=42, rr_uid=1000, rr_gid=100, record_mtime=5.0))
    st = meta.as_stat_result()
    assert st.st_size == 42
    assert st.st_mtime == 5.0
    assert (st.st_uid, st.st_gid, st.st_ino) == (1000, 100, 20)
    assert stat.S_ISREG(st.st_mode)


def test_invalid_volume_date_is_ignored():
    class Date:
        year, month, dayofmonth = 2020, 13, 40
        hour = minute = second = hundredthsofsecond = gmtoffset = 0

    assert volume_descriptor_time(Date()) is None


def test_projected_kinds_match_image(rr_image):
    with open_session(rr_image) as session:
        assert session.stat("/").kind is EntryKind.DIRECTORY
        assert session.stat("/Documents").kind is EntryKind.DIRECTORY
        assert session.stat("/Documents/readme.rr.txt").kind is EntryKind.FILE
        assert session.stat("/link").kind is EntryKind.SYMLINK
        assert session.stat("/big.bin").size == len(BIG)


def test_rock_ridge_metadata_from_image(rr_image):
    with open_session(rr_image) as session:
        readme = session.stat("/Documents/readme.rr.txt")
        docs = session.stat("/Documents")
    assert readme.permissions == 0o440
    assert docs.permissions == 0o550
    assert abs(readme.mtime - time.time()) < 2 * 86400


def test_directory_size_is_extent_length(joliet_image):
    with open_session(joliet_image) as session:
        meta = session.stat("/Docs")
    assert meta.size > 0
    assert meta.size % 2048 == 0


def test_plain_image_uses_record_timestamps(plain_image):
    with open_session(plain_image) as session:
        meta = session.stat("/DOCS/README.TXT")
    assert meta.permissions == READ_ONLY_FILE
    assert abs(meta.mtime - time.time()) < 2 * 86400

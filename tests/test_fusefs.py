import errno
import os
import stat

import pytest

try:
    from fuse import FuseOSError

    from isoftp.fusefs import IsoFuse
except (ImportError, OSError) as exc:  # libfuse missing
    pytest.skip("FUSE not available: %s" % exc, allow_module_level=True)

from conftest import BIG, README


@pytest.fixture
def fuse_fs(rr_image):
    fs = IsoFuse(str(rr_image))
    yield fs
    fs.destroy("/")


def test_getattr(fuse_fs):
    attrs = fuse_fs.getattr("/Documents/readme.rr.txt")
    assert stat.S_ISREG(attrs["st_mode"])
    assert attrs["st_size"] == len(README)
    assert stat.S_ISDIR(fuse_fs.getattr("/")["st_mode"])
    assert stat.S_ISLNK(fuse_fs.getattr("/link")["st_mode"])


def test_getattr_missing(fuse_fs):
    with pytest.raises(FuseOSError) as info:
        fuse_fs.getattr("/missing")
    assert info.value.errno == errno.ENOENT


def test_readdir(fuse_fs):
    names = fuse_fs.readdir("/", None)
    assert names[:2] == [".", ".."]
    assert set(names[2:]) == {"Documents", "big.bin", "empty.dat", "link"}


def test_readlink(fuse_fs):
    assert fuse_fs.readlink("/link") == "Documents/readme.rr.txt"


def test_open_read_release(fuse_fs):
    fh = fuse_fs.open("/big.bin", os.O_RDONLY)
    assert fuse_fs.read("/big.bin", 100, 2000, fh) == BIG[2000:2100]
    assert fuse_fs.read("/big.bin", 100, len(BIG) + 10, fh) == b""
    assert fuse_fs.release("/big.bin", fh) == 0
    # Reads on an unknown handle fall back to a one-off stream
    assert fuse_fs.read("/big.bin", 10, 0, 999) == BIG[:10]


def test_open_directory_fails(fuse_fs):
    with pytest.raises(FuseOSError) as info:
        fuse_fs.open("/Documents", os.O_RDONLY)
    assert info.value.errno == errno.EISDIR


@pytest.mark.parametrize("call", [
    lambda fs: fs.open("/big.bin", os.O_WRONLY),
    lambda fs: fs.create("/new", 0o644),
    lambda fs: fs.write("/big.bin", b"x", 0, 0),
    lambda fs: fs.truncate("/big.bin", 0),
    lambda fs: fs.unlink("/big.bin"),
    lambda fs: fs.rename("/big.bin", "/x"),
    lambda fs: fs.mkdir("/New", 0o755),
    lambda fs: fs.rmdir("/Documents/sub"),
    lambda fs: fs.chmod("/big.bin", 0o777),
    lambda fs: fs.chown("/big.bin", 0, 0),
    lambda fs: fs.utimens("/big.bin"),
    lambda fs: fs.symlink("/new-link", "/big.bin"),
    lambda fs: fs.link("/new-link", "/big.bin"),
    lambda fs: fs.access("/big.bin", os.W_OK),
])
def test_writes_are_refused(fuse_fs, call):
    with pytest.raises(FuseOSError) as info:
        call(fuse_fs)
    assert info.value.errno == errno.EROFS

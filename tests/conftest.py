"""Fixture images, mastered in-process with pycdlib."""

from io import BytesIO

import pycdlib
import pytest

README = b"0123456789"
BIG = bytes(i % 251 for i in range(3 * 2048 + 123))
NOTES = b"notes after the readme\n"

README_MODE = 0o100640
DOCS_MODE = 0o040750


def make_image(path, joliet=True, rock_ridge=False):
    """Write a small image to `path`.

    Layout (ISO 9660 / Joliet / Rock Ridge names):

        DOCS        Docs        Documents
          README.TXT  Readme.txt  readme.rr.txt   (10 bytes)
          NOTES.TXT   Notes.txt   notes.txt
          SUB         Sub         sub
        BIG.BIN     big.bin     big.bin
        EMPTY.DAT   empty.dat   empty.dat
        LINK        link        link -> Documents/readme.rr.txt  (Rock Ridge only)
    """
    iso = pycdlib.PyCdlib()
    iso.new(interchange_level=1, vol_ident="FIXTURE",
            joliet=3 if joliet else None,
            rock_ridge="1.09" if rock_ridge else None)
    keep = []

    def names(joliet_path=None, rr_name=None, mode=None):
        kwargs = {}
        if joliet:
            kwargs["joliet_path"] = joliet_path
        if rock_ridge:
            kwargs["rr_name"] = rr_name
            if mode is not None:
                kwargs["file_mode"] = mode
        return kwargs

    def add_file(iso_path, data, **kwargs):
        fp = BytesIO(data)
        keep.append(fp)
        iso.add_fp(fp, len(data), iso_path, **kwargs)

    iso.add_directory("/DOCS", **names("/Docs", "Documents", DOCS_MODE))
    add_file("/DOCS/README.TXT;1", README,
             **names("/Docs/Readme.txt", "readme.rr.txt", README_MODE))
    add_file("/DOCS/NOTES.TXT;1", NOTES, **names("/Docs/Notes.txt", "notes.txt"))
    iso.add_directory("/DOCS/SUB", **names("/Docs/Sub", "sub"))
    add_file("/BIG.BIN;1", BIG, **names("/big.bin", "big.bin"))
    add_file("/EMPTY.DAT;1", b"", **names("/empty.dat", "empty.dat"))
    if rock_ridge:
        kwargs = {"joliet_path": "/link"} if joliet else {}
        iso.add_symlink(symlink_path="/LINK.;1", rr_symlink_name="link",
                        rr_path="Documents/readme.rr.txt", **kwargs)

    iso.write(str(path))
    iso.close()
    return path


@pytest.fixture
def joliet_image(tmp_path):
    """ISO 9660 plus Joliet, no Rock Ridge"""
    return make_image(tmp_path / "joliet.iso", joliet=True, rock_ridge=False)


@pytest.fixture
def plain_image(tmp_path):
    """Bare ISO 9660"""
    return make_image(tmp_path / "plain.iso", joliet=False, rock_ridge=False)


@pytest.fixture
def rr_image(tmp_path):
    """ISO 9660 with both Rock Ridge and Joliet"""
    return make_image(tmp_path / "rr.iso", joliet=True, rock_ridge=True)


@pytest.fixture
def garbage_image(tmp_path):
    path = tmp_path / "garbage.iso"
    path.write_bytes(b"\x00" * (40 * 2048))
    return path

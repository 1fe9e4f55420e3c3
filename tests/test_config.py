import pytest

from isoftp.config import (DEFAULT_EXTENSIONS, ServerConfig, StorageConfig,
                           parse_extensions, parse_port_range)


def test_storage_defaults(joliet_image):
    config = StorageConfig(joliet_image)
    assert config.extensions == DEFAULT_EXTENSIONS == ("rock_ridge", "joliet")


def test_storage_rejects_bad_input(joliet_image, tmp_path):
    with pytest.raises(ValueError):
        StorageConfig(joliet_image, extensions=("udf",))
    with pytest.raises(ValueError):
        StorageConfig(joliet_image, extensions=("joliet", "joliet"))
    with pytest.raises(ValueError):
        StorageConfig(joliet_image, chunk_size=0)
    with pytest.raises(ValueError):
        StorageConfig(tmp_path / "missing.iso")


def test_extensions_are_kept_as_tuple(joliet_image):
    config = StorageConfig(joliet_image, extensions=["joliet"])
    assert config.extensions == ("joliet",)


@pytest.mark.parametrize("text, expected", [
    ("rock_ridge,joliet", ("rock_ridge", "joliet")),
    ("joliet, rr", ("joliet", "rock_ridge")),
    ("plain", ()),
    ("", ()),
])
def test_parse_extensions(text, expected):
    assert parse_extensions(text) == expected


def test_parse_port_range():
    assert parse_port_range("50000-50010") == range(50000, 50011)
    assert parse_port_range("2121") == range(2121, 2122)
    for bad in ("x-y", "10-5", "0-10", "60000-70000"):
        with pytest.raises(ValueError):
            parse_port_range(bad)


def test_server_config_needs_a_login():
    with pytest.raises(ValueError):
        ServerConfig(user=None, anonymous=False)
    with pytest.raises(ValueError):
        ServerConfig(port=70000)
    assert ServerConfig().banner == "Welcome to my ISO over FTP"

"""Construction-time configuration for image sessions and the FTP server."""

import os
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .naming import EXTENSIONS, JOLIET, ROCK_RIDGE
from .stream import DEFAULT_CHUNK_SIZE

DEFAULT_EXTENSIONS = (ROCK_RIDGE, JOLIET)
DEFAULT_BANNER = "Welcome to my ISO over FTP"
DEFAULT_PORT = 2121
DEFAULT_PASSIVE_PORTS = range(50000, 65536)


@dataclass(frozen=True)
class StorageConfig:
    """Where the image lives and which naming extensions to prefer.

    `extensions` is ordered, richest first; an empty tuple serves plain
    ISO 9660 names even when the image carries Joliet or Rock Ridge.
    """

    source: Any
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        object.__setattr__(self, "extensions", tuple(self.extensions))
        for ext in self.extensions:
            if ext not in EXTENSIONS:
                raise ValueError("Unknown extension %r (expected one of %s)"
                                 % (ext, ", ".join(EXTENSIONS)))
        if len(set(self.extensions)) != len(self.extensions):
            raise ValueError("Duplicate extension in %r" % (self.extensions,))
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if isinstance(self.source, (str, os.PathLike)) and not os.path.isfile(self.source):
            raise ValueError("Image not found: %s" % os.fspath(self.source))


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    user: Optional[str] = None
    password: str = ""
    anonymous: bool = True
    passive_ports: Optional[range] = DEFAULT_PASSIVE_PORTS
    banner: str = DEFAULT_BANNER
    max_connections: int = 512
    max_connections_per_ip: int = 0

    def __post_init__(self):
        if not 0 <= self.port <= 65535:
            raise ValueError("Invalid port: %d" % self.port)
        if self.user is None and not self.anonymous:
            raise ValueError("Either a user or anonymous access is required")


def parse_extensions(text):
    """Parse "rock_ridge,joliet" (or "none"/"plain") into an ordered tuple"""
    text = (text or "").strip().lower()
    if text in ("", "none", "plain", "iso9660"):
        return ()
    aliases = {"rr": ROCK_RIDGE, "rockridge": ROCK_RIDGE, "rock-ridge": ROCK_RIDGE}
    parts = [part.strip() for part in text.split(",") if part.strip()]
    return tuple(aliases.get(part, part) for part in parts)


def parse_port_range(text):
    """Parse "50000-65535" into range(50000, 65536)"""
    low, sep, high = text.partition("-")
    try:
        low = int(low)
        high = int(high) if sep else low
    except ValueError:
        raise ValueError("Invalid port range: %r" % text) from None
    if not 0 < low <= high <= 65535:
        raise ValueError("Invalid port range: %r" % text)
    return range(low, high + 1)

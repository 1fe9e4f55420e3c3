"""
Naming conventions
Each strategy either yields a name for an entry or defers to the next one.
"""

import re
from typing import NamedTuple

ROCK_RIDGE = "rock_ridge"
JOLIET = "joliet"
ISO9660 = "iso9660"

EXTENSIONS = (ROCK_RIDGE, JOLIET)

_VERSION_RE = re.compile(r";\d*$")


def strip_version(name):
    """Drop a trailing ";1" style version number"""
    return _VERSION_RE.sub("", name)


def primary_name(name):
    """Turn "README.TXT;1" into "README.TXT" and "NOEXT.;1" into "NOEXT" """
    name = strip_version(name)
    if name.endswith(".") and name not in (".", ".."):
        name = name[:-1]
    return name


def _exact(a, b):
    return a == b


def _caseless(a, b):
    return primary_name(a).casefold() == primary_name(b).casefold()


class NameStrategy(NamedTuple):
    name: str
    lookup: object
    same: object

    def name_of(self, entry):
        return self.lookup(entry)


STRATEGIES = {
    ROCK_RIDGE: NameStrategy(ROCK_RIDGE, lambda e: e.rr_name or None, _exact),
    JOLIET: NameStrategy(JOLIET, lambda e: e.joliet_name or None, _exact),
    ISO9660: NameStrategy(ISO9660, lambda e: primary_name(e.identifier) or None,
                          _caseless),
}


def strategies_for(extensions, has_rock_ridge, has_joliet):
    """Build the ordered strategy list for one image.

    Preferred extensions the image does not carry are skipped; the plain
    ISO 9660 name always closes the list.
    """
    available = {ROCK_RIDGE: has_rock_ridge, JOLIET: has_joliet}
    chosen = [STRATEGIES[ext] for ext in extensions if available.get(ext)]
    chosen.append(STRATEGIES[ISO9660])
    return tuple(chosen)


def display_name(entry, strategies):
    for strategy in strategies:
        name = strategy.name_of(entry)
        if name is not None:
            return name
    return entry.identifier


def matches(entry, segment, strategies):
    """Whether a path segment names this entry.

    Only the first strategy that yields a name for the entry is consulted.
    """
    for strategy in strategies:
        name = strategy.name_of(entry)
        if name is not None:
            return strategy.same(name, segment)
    return False

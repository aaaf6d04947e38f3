r"""
Switchyard switch specifications.

Overview
- Switch: immutable declaration of one single-character switch (e.g., -a) that a
  command recognizes. A switch is either value-bearing (the next token is its
  value) or boolean (presence-only; recorded as "true").

Metadata (sanitized on construction)
- tag: exactly one character, case-insensitive (stored lower-cased). The switch
  prefix '-' and whitespace are rejected.
- descr: Unset | str | Text (short help), non-empty when provided.
- required: bool, the command refuses to run without it.
- boolean: bool, never consumes a following token.

Reserved tags
- RESERVED_TAGS ('h' and '?') belong to the built-in help; they are refused when
  a command is declared with them (see switchyard.commands).

Quick example:
    >>> from switchyard.switches import Switch
    >>> Switch("a", "first number", required=True)
    switch(tag='a', descr='first number', required=True, boolean=False)
"""
from rich.text import Text

from .utils import *
from .utils import SpecType

PREFIX = "-"
HELP_TAG = "h"
RESERVED_TAGS = frozenset({HELP_TAG, "?"})


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate switch metadata in place.

    Raises
    - TypeError: when 'tag' is not a string or 'descr' is not a string/Text.
    - ValueError: when 'tag' is not exactly one usable character or 'descr' is empty.
    """
    if not isinstance(tag := metadata["tag"], str):
        raise TypeError(f"{cls.__typename__} 'tag' must be a string")
    elif len(tag) != 1 or tag.isspace():
        raise ValueError(f"{cls.__typename__} 'tag' must be exactly one non-blank character")
    elif tag == PREFIX:
        raise ValueError(f"{cls.__typename__} 'tag' cannot be the switch prefix {PREFIX!r}")
    metadata["tag"] = tag.lower()

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Switch(metaclass=SpecType):
    """
    Single-character switch specification.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    - name: the switch as typed on the command line (prefix + tag).
    """

    __introspectable__ = (
        "tag",
        "descr",
        "required",
        "boolean",
    )

    def __init__(self, tag, /, descr=Unset, *, required=False, boolean=False):
        metadata = {
            "tag": tag,
            "descr": descr,
            "required": bool(required),
            "boolean": bool(boolean),
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def name(self):
        return PREFIX + self.tag

    def __str__(self):
        return f"{self.name} - {self.descr}" if self.descr else self.name


__all__ = (
    "PREFIX",
    "HELP_TAG",
    "RESERVED_TAGS",
    "Switch",
)

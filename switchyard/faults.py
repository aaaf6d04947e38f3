"""
Switchyard faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every diagnostic the
  dispatch pipeline can produce. Codes are grouped by domain to keep copy
  consistent and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves as a single, lowercased, actionable line.

Pipeline contract
- faults are values: the tokenizer and the command validation return them inside
  their results instead of raising them. the dispatcher decides how to report
  each one (error line, debug-only line) and which status to fold it into.
- construction-time misuse (bad tags, duplicate verbs, ...) is not a fault: it
  raises TypeError/ValueError immediately, as a programming error.

UX goals
- Position-first messages: every switch-level message includes the ordinal
  position of the offending token (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, MISSING_COMMAND
    - tokenizer (1111x)
      • MALFORMED_SWITCH, UNKNOWN_SWITCH, DUPLICATE_SWITCH, UNEXPECTED_VALUE
    - validation (1112x)
      • MISSING_REQUIRED_SWITCH, MISSING_SWITCH_VALUE
    - delegated (1113x)
      • FATAL_FAULT
    - warnings (12xxx)
      • UNREGISTERED_ERROR_CODE

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND         = 11101
    MISSING_COMMAND         = 11102

    # --- tokenizer errors (11xxx) ---
    MALFORMED_SWITCH        = 11111
    UNKNOWN_SWITCH          = 11112
    DUPLICATE_SWITCH        = 11113
    UNEXPECTED_VALUE        = 11114

    # --- validation errors (11xxx) ---
    MISSING_REQUIRED_SWITCH = 11121
    MISSING_SWITCH_VALUE    = 11122

    # --- delegated errors (11xxx) ---
    FATAL_FAULT             = 11131

    # --- warnings (12xxx) ---
    UNREGISTERED_ERROR_CODE = 12131


class _Renderable:
    """
    rendering and option-merging behavior shared by errors and warnings.

    options understood by __rich__
    - prog: program name shown in the header (defaults to the command verb, then "switchyard").
    - colorful: style the line with the palette (default False).
    - styles: mapping overriding palette entries.
    - code, title, hint: header and hint copy.
    """
    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def title(self):
        return self.options.get("title", "")

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return str(self.message or "")

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        styles = defaultdict(str, type(self).__palette__ | dict(self.options.get("styles", {})))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        prog = self.options.get("prog") or self.options.get("verb") or "switchyard"
        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.code.value if self.code else "?", "code"),
            " | ",
            text(self.title.title(), "title"),
            " ] ",
        )
        line = Text.assemble(header, text(self.message, "message"))
        if self.hint:
            line.append_text(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))
        return line

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandException(_Renderable, Exception):
    __palette__ = {
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "title": "bold #FF4DA6",  # friendly pinky title
        "message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    }


class UnknownCommandError(CommandException): ...
class MissingCommandError(CommandException): ...
class MalformedSwitchError(CommandException): ...
class UnknownSwitchError(CommandException): ...
class DuplicateSwitchError(CommandException): ...
class UnexpectedValueError(CommandException): ...
class MissingRequiredSwitchError(CommandException): ...
class MissingSwitchValueError(CommandException): ...
class FatalFaultError(CommandException): ...


class CommandWarning(_Renderable, Warning):
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",  # amber fault code for warnings
        "title": "bold #FFC2E0",  # softer pinky title for warnings
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }


class UnregisteredErrorCodeWarning(CommandWarning): ...


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "MissingCommandError",
    "MalformedSwitchError",
    "UnknownSwitchError",
    "DuplicateSwitchError",
    "UnexpectedValueError",
    "MissingRequiredSwitchError",
    "MissingSwitchValueError",
    "FatalFaultError",
    "CommandWarning",
    "UnregisteredErrorCodeWarning",
)

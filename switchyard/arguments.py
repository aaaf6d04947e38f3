"""
Switchyard argument parsing: the switch tokenizer and its result types.

What this module provides
- Arguments: the parsed switches of one invocation (tag → value) plus the trailing
  tokens found after them. Built fresh per call; read-only once returned.
- ParseResult: (arguments, fault) pair; ok is True when no fault was found.
- State: the three tokenizer states (TAG, VALUE, TRAILING).
- parse(tokens, command): run the tokenizer over a token sequence for a command.

Token grammar
- a switch-shaped token is exactly two characters: the prefix '-' plus one tag.
- '--' ends the switches; it is discarded and every later token is trailing.
- everything else is either a value (right after a value-bearing switch) or
  a trailing token.

State machine
- initial: TAG when the first token is switch-shaped, TRAILING otherwise
  (a bare invocation treats the whole input as trailing tokens).
- TAG → TRAILING when a token longer than two characters has no prefix
  (a long bare word starts the file/positional section).
- VALUE → TAG when the value position holds a switch-shaped token; the
  pending switch keeps a None value and validation reports it later.
- TAG consumes a switch: boolean ones record "true" and stay in TAG, the others
  record None and move to VALUE. VALUE stores the token and returns to TAG.
- the first fault stops the scan; there is no partial recovery.

Example
    >>> arguments, fault = parse(["-a", "3", "-b", "4"], command)
    >>> arguments["A"], arguments.trailing, fault
    ('3', (), None)
"""
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from .faults import *
from .switches import PREFIX, HELP_TAG
from .utils import *

TERMINATOR = PREFIX * 2


class Arguments:
    """
    Parsed switches and trailing tokens of a single invocation.

    Access
    - arguments["a"]: value of switch 'a' (case-insensitive); None when the switch
      is absent or was given without a value.
    - "a" in arguments: whether switch 'a' was given at all.
    - arguments.tags: tags in the order they were given.
    - arguments.trailing: tokens found after the switches, verbatim.
    """

    __slots__ = ("_values", "_trailing")

    def __init__(self, values=(), trailing=()):
        self._values = {str(tag).lower(): value for tag, value in dict(values).items()}
        self._trailing = list(trailing)

    @property
    def values(self):
        return MappingProxyType(self._values)

    @property
    def trailing(self):
        return tuple(self._trailing)

    @property
    def tags(self):
        return tuple(self._values)

    def get(self, tag, default=None, /):
        if not isinstance(tag, str):
            raise TypeError(f"arguments tags must be strings, not {type(tag).__name__}")
        return self._values.get(tag.lower(), default)

    def __getitem__(self, tag, /):
        return self.get(tag)

    def __contains__(self, tag, /):
        return isinstance(tag, str) and tag.lower() in self._values

    def __len__(self):
        return len(self._values)

    def __eq__(self, other, /):
        if not isinstance(other, Arguments):
            return NotImplemented
        return self._values == other._values and self._trailing == other._trailing

    __hash__ = None

    def __rich_repr__(self):
        yield "values", dict(self._values)
        yield "trailing", self.trailing

    def __repr__(self):
        return f"arguments(values={dict(self._values)!r}, trailing={self.trailing!r})"


class ParseResult(NamedTuple):
    arguments: Arguments
    fault: CommandException | None = None

    @property
    def ok(self):
        return self.fault is None


class State(Enum):
    TAG = "tag"
    VALUE = "value"
    TRAILING = "trailing"


def _switchlike(token):
    return len(token) == 2 and token.startswith(PREFIX)


def parse(tokens, command, /, *, index=1):
    """
    Tokenize switch input for a command.

    Parameters
    - tokens: Iterable[str]
      the tokens following the command verb (or the whole line for a default command).
    - command: object exposing a 'switches' mapping of tag → Switch (usually a Command).
    - index: int (keyword-only)
      1-based position of the first token in the full input line; used for the
      ordinal positions quoted in fault messages.

    Returns
    - ParseResult(arguments, fault). fault is None on success; otherwise it is one of
      MalformedSwitchError, UnknownSwitchError, DuplicateSwitchError or
      UnexpectedValueError and arguments holds what was read before it.

    Notes
    - the reserved help tag is always accepted as a boolean switch so that callers
      can honour '-h' before any validation.
    - a value-bearing switch left without a value keeps None; the caller validates it.
    """
    tokens = list(tokens)
    switches = command.switches
    verb = getattr(command, "verb", None) or None
    values = {}
    trailing = []

    if not tokens:
        return ParseResult(Arguments(values, trailing))

    state = State.TAG if _switchlike(tokens[0]) else State.TRAILING
    tag = None

    for position, token in enumerate(tokens, index):
        if token == TERMINATOR:
            state = State.TRAILING
            continue

        if state is State.VALUE and _switchlike(token):
            state = State.TAG

        if state is State.TAG and len(token) > 2 and not token.startswith(PREFIX):
            state = State.TRAILING

        match state:
            case State.TAG:
                if not _switchlike(token):
                    return ParseResult(Arguments(values, trailing), MalformedSwitchError(
                        "expected a switch at %s position but found %r" % (ordinal(position), token),
                        title="malformed switch",
                        code=FaultCode.MALFORMED_SWITCH,
                        input=token,
                        index=position,
                        verb=verb,
                        hint="switches are a '%s' followed by a single character, e.g. '%sa'" % (PREFIX, PREFIX),
                    ))

                tag = token[1].lower()

                if tag == HELP_TAG:
                    boolean = True
                elif tag in switches:
                    boolean = switches[tag].boolean
                else:
                    return ParseResult(Arguments(values, trailing), UnknownSwitchError(
                        "switch %r at %s position is not recognized" % (token, ordinal(position)),
                        title="unknown switch",
                        code=FaultCode.UNKNOWN_SWITCH,
                        input=token,
                        index=position,
                        tag=tag,
                        verb=verb,
                        hint="run with '%s%s' to see the switches this command accepts" % (PREFIX, HELP_TAG),
                    ))

                if tag in values:
                    return ParseResult(Arguments(values, trailing), DuplicateSwitchError(
                        "switch %r at %s position was already provided" % (token, ordinal(position)),
                        title="duplicate switch",
                        code=FaultCode.DUPLICATE_SWITCH,
                        input=token,
                        index=position,
                        tag=tag,
                        verb=verb,
                        hint="keep a single %r; each switch can be specified only once" % token,
                    ))

                if boolean:
                    values[tag] = "true"
                else:
                    values[tag] = None
                    state = State.VALUE

            case State.VALUE:
                # unreachable while boolean switches never enter VALUE
                if tag == HELP_TAG or switches[tag].boolean:
                    return ParseResult(Arguments(values, trailing), UnexpectedValueError(
                        "value %r at %s position given to switch '%s%s' which takes none" % (
                            token, ordinal(position), PREFIX, tag
                        ),
                        title="unexpected value",
                        code=FaultCode.UNEXPECTED_VALUE,
                        input=token,
                        index=position,
                        tag=tag,
                        verb=verb,
                        hint="remove the value; '%s%s' is a presence-only switch" % (PREFIX, tag),
                    ))
                values[tag] = token
                state = State.TAG

            case State.TRAILING:
                trailing.append(token)

    return ParseResult(Arguments(values, trailing))


__all__ = (
    "TERMINATOR",
    "Arguments",
    "ParseResult",
    "State",
    "parse",
)

"""
Switchyard command layer: declare commands and run their execution pipeline.

What this module provides
- Command: immutable declaration of one invocable command, pairing a verb and a
  set of switches with a handler callable (Arguments -> int).
- Result / Outcome: the tagged result of running a command (completed with a
  status, help requested, or rejected with a fault).
- command(...): create a Command or a decorator that produces one.

Execution pipeline (Command.execute)
1. tokenize the switch input (switchyard.arguments.parse); a fault rejects the run.
2. the help switch wins over everything else: Outcome.HELP.
3. validate: every required switch is present, then every present value-bearing
   switch has a value. Both passes walk the switches in sorted tag order so the
   reported fault is deterministic.
4. only then is the handler invoked; its return value is the status.

A command never renders anything itself: faults and help requests travel back to
the dispatcher inside the Result, which reports them and picks the final status.

Quick start
    from switchyard import command, Switch

    @command(verb="add", switches=[Switch("a", "first number", required=True),
                                   Switch("b", "second number", required=True)])
    def add(arguments):
        # values are plain strings; converting them is the handler's job
        try:
            a, b = int(arguments["a"]), int(arguments["b"])
        except ValueError:
            return 1
        print(a + b)
        return 0
"""
import inspect
from enum import Enum
from typing import NamedTuple

from rich.text import Text

from .arguments import parse
from .faults import *
from .switches import Switch, PREFIX, HELP_TAG, RESERVED_TAGS
from .utils import *
from .utils import SpecType


class Outcome(Enum):
    COMPLETED = "completed"
    HELP = "help"
    REJECTED = "rejected"


class Result(NamedTuple):
    """
    Tagged result of one command execution.

    - COMPLETED: the handler ran; status holds its return value.
    - HELP: the help switch was given; the handler did not run.
    - REJECTED: tokenizing or validation failed; fault says why.
    """
    outcome: Outcome
    status: int = 0
    fault: CommandException | None = None

    @classmethod
    def completed(cls, status, /):
        return cls(Outcome.COMPLETED, status)

    @classmethod
    def helped(cls):
        return cls(Outcome.HELP)

    @classmethod
    def rejected(cls, fault, /):
        return cls(Outcome.REJECTED, fault=fault)


def _process_source(cls, metadata):
    """
    Validate the handler and derive verb/descr defaults from it.

    - handler must be callable.
    - verb defaults to the handler's __name__; descr to its docstring.
    """
    if not callable(handler := metadata["handler"]):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")

    metadata["verb"] = coalesce(metadata["verb"], getattr(handler, "__name__", Unset))
    if metadata["descr"] is Unset:
        metadata["descr"] = inspect.getdoc(handler) or Unset


def _process_strings(cls, metadata):
    """
    Normalize the scalar string fields.

    - verb: must be a string without whitespace; lower-cased. The empty string is
      allowed (default commands have no verb) but the dispatcher refuses to
      register it as a regular command.
    - descr, notes: str | Text | Unset; strings are trimmed and cannot be empty.
      Unset resolves to None.
    """
    if not isinstance(verb := metadata["verb"], str):
        raise TypeError(f"{cls.__typename__} 'verb' must be a string")
    verb = verb.strip()
    if any(character.isspace() for character in verb):
        raise ValueError(f"{cls.__typename__} 'verb' cannot contain whitespace")
    metadata["verb"] = verb.lower()

    for name in ("descr", "notes"):
        if not isinstance(value := metadata[name], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(value)


def _process_switches(cls, metadata):
    """
    Build the tag → Switch mapping.

    Errors
    - TypeError: a member is not a Switch.
    - ValueError: a reserved tag (help) is used, or a tag appears twice.
    """
    switches = {}
    for switch in metadata["switches"]:
        if not isinstance(switch, Switch):
            raise TypeError(f"{cls.__typename__} 'switches' must contain only switches")
        if switch.tag in RESERVED_TAGS:
            raise ValueError(
                f"{cls.__typename__} switch '{PREFIX}{switch.tag}' is reserved for the built-in help"
            )
        if switch.tag in switches:
            raise ValueError(f"{cls.__typename__} switch '{PREFIX}{switch.tag}' is already in use")
        switches[switch.tag] = switch
    metadata["switches"] = switches


class Command(metaclass=SpecType):
    """
    Immutable declaration of one invocable command.

    Fields (read-only)
    - verb: lower-cased invocation keyword ('' for a verb-less default command).
    - descr: one-line description shown by help (defaults to the handler docstring).
    - switches: mapping tag → Switch, in declaration order.
    - notes: free-text usage notes about the trailing arguments.
    - handler: callable receiving Arguments and returning an int status.

    Calling a command (command(arguments)) runs the handler directly, bypassing
    tokenizing and validation.
    """

    __introspectable__ = (
        "verb",
        "descr",
        "switches",
        "notes",
        "handler",
    )

    __displayable__ = (
        "verb",
        "descr",
        "switches",
        "notes",
    )

    def __init__(self, handler, /, verb=Unset, switches=(), descr=Unset, notes=Unset):
        metadata = {
            "handler": handler,
            "verb": verb,
            "switches": switches,
            "descr": descr,
            "notes": notes,
        }
        _process_source(type(self), metadata)
        _process_strings(type(self), metadata)
        _process_switches(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __call__(self, arguments, /):
        return self._handler(arguments)

    def validate(self, arguments, /):
        """
        Check parsed arguments against the declared switches.

        Returns the first fault found (MissingRequiredSwitchError, then
        MissingSwitchValueError) or None when the arguments are acceptable.
        """
        ordered = sorted(self._switches.values(), key=lambda switch: switch.tag)

        for switch in ordered:
            if switch.required and switch.tag not in arguments:
                return MissingRequiredSwitchError(
                    "the %s command requires the %r switch" % (self._verb or "default", switch.name),
                    title="missing required switch",
                    code=FaultCode.MISSING_REQUIRED_SWITCH,
                    tag=switch.tag,
                    verb=self._verb or None,
                    hint="add '%s <value>'" % switch.name if not switch.boolean else "add '%s'" % switch.name,
                )

        for switch in ordered:
            if switch.boolean or switch.tag not in arguments:
                continue
            if arguments[switch.tag] is None:
                return MissingSwitchValueError(
                    "no value found for the %r switch" % switch.name,
                    title="missing switch value",
                    code=FaultCode.MISSING_SWITCH_VALUE,
                    tag=switch.tag,
                    verb=self._verb or None,
                    hint="put the value right after it: '%s <value>'" % switch.name,
                )

        return None

    def execute(self, tokens, /, *, index=1):
        """
        Run the full pipeline over the switch tokens of this command.

        Parameters
        - tokens: Iterable[str], the input after the verb.
        - index: 1-based position of the first token in the full line (for messages).

        Returns
        - Result; see Outcome for the three shapes.

        Raises
        - TypeError when the handler returns something other than an int or None.
          Whatever the handler itself raises propagates as well; the dispatcher is
          the boundary that converts such faults into a failure status.
        """
        arguments, fault = parse(tokens, self, index=index)
        if fault is not None:
            return Result.rejected(fault)

        if HELP_TAG in arguments:
            return Result.helped()

        if (fault := self.validate(arguments)) is not None:
            return Result.rejected(fault)

        status = self(arguments)
        if status is None:
            status = 0
        elif not isinstance(status, int) or isinstance(status, bool):
            raise TypeError(
                f"{type(self).__typename__} {self._verb!r} handler must return an int, not {type(status).__name__}"
            )
        return Result.completed(status)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct: cmd = command(handler, verb="add", switches=[...])
    - Decorator:
        @command(verb="add", switches=[...])
        def add(arguments): ...

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Outcome",
    "Result",
    "Command",
    "command",
)

"""
Switchyard dispatcher: select a command for an input line, run it, fold the result.

What this module provides
- Dispatcher: registry of commands (plus an optional verb-less default command),
  error-code table, help renderer and logger for one application.
- invoke(object, prompt): one-shot runner returning the status.
- repl(dispatcher, stream): read-evaluate loop over input lines.
- SUCCESS / FAILURE / USAGE: the statuses the dispatcher produces on its own.

Selection (Dispatcher.execute)
1. a bare '-h' or '-?' anywhere in the line shows help, nothing else runs.
2. with a default command, an empty line or a first token that is not a known
   verb sends the whole line to the default command.
3. otherwise the first token must be a registered verb (case-insensitive) and
   the rest of the line goes to that command.
4. the command's Result is folded into a status:
   • completed: the handler status; non-zero statuses are looked up in the
     error table (a miss is only reported in debug mode).
   • help: the help action's status.
   • rejected: the fault is reported, help is shown, USAGE is returned.
5. any unexpected exception is logged as fatal and turned into FAILURE; the
   dispatcher never lets it escape.

Lifecycle
- commands, the default command, error codes and the help override are registered
  during setup. The first execute() seals the registry; registering afterwards
  raises RuntimeError, so a running dispatcher only ever reads its registry.
"""
import difflib
import os.path
import sys
from collections.abc import Iterable, Mapping

from rich.console import Group
from rich.table import Table
from rich.text import Text

from .commands import Command, Outcome, command
from .faults import *
from .logger import Logger
from .switches import PREFIX, HELP_TAG
from .utils import *
from .utils import SpecType

SUCCESS = 0
FAILURE = 1
USAGE = 2

HELP_TOKENS = frozenset({PREFIX + HELP_TAG, PREFIX + "?"})


def _process_strings(cls, metadata):
    """
    Normalize the application metadata strings (name, descr, synopsis, version).

    - each must be str | Text | Unset; strings are trimmed and cannot be empty.
    - Unset resolves to None, except name which defaults to the program file name.
    """
    for name in ("name", "descr", "synopsis", "version"):
        if not isinstance(value := metadata[name], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(value)

    if metadata["name"] is None:
        metadata["name"] = os.path.basename(sys.argv[0]) or "switchyard"


def _sanitize_error(cls, code, message):
    if not isinstance(code, int) or isinstance(code, bool):
        raise TypeError(f"{cls.__typename__} error codes must be integers")
    elif code == SUCCESS:
        raise ValueError(f"{cls.__typename__} error code {SUCCESS} means success and cannot be described")
    if not isinstance(message, str | Text):
        raise TypeError(f"{cls.__typename__} error messages must be strings")
    elif isinstance(message, str) and not (message := message.strip()):
        raise ValueError(f"{cls.__typename__} error messages cannot be empty")
    return code, message


def _tokenize(line):
    """
    Normalize a line into a list of tokens.

    - Unset: sys.argv[1:].
    - str: split on whitespace (no quoting rules).
    - Iterable[str]: each item trimmed; blank items dropped.
    """
    if line is Unset:
        line = sys.argv[1:]
    elif isinstance(line, str):
        return line.split()
    elif not isinstance(line, Iterable):
        raise TypeError("execute() argument must be a string or an iterable of strings")

    tokens = []
    for item in line:
        if not isinstance(item, str):
            raise TypeError("execute() argument must be a string or an iterable of strings")
        if item := item.strip():
            tokens.append(item)
    return tokens


class Dispatcher(metaclass=SpecType):
    """
    Command registry and router for one application.

    Fields (read-only)
    - name, descr, synopsis, version: application metadata shown by the help page.
    - commands: mapping verb → Command.
    - default: the verb-less default Command, or None.
    - errors: mapping status → diagnostic message.
    - logger: the Logger every diagnostic goes through.
    """

    __introspectable__ = (
        "name",
        "descr",
        "synopsis",
        "version",
        "commands",
        "default",
        "errors",
        "logger",
    )

    __displayable__ = (
        "name",
        "version",
        "commands",
        "default",
        "errors",
    )

    __palette__ = {
        "section": "bold #FFFFFF",
        "program-name": "bold #FF4D94",
        "verb": "bold #36C5F0",
        "default-verb": "bold italic #36C5F0",
        "switch": "bold #00E6FF",
        "required": "#FFD600",
        "description": "#9CA3AF",
        "notes": "italic #A3A3A3",
    }

    def __init__(
            self,
            name=Unset,
            /,
            descr=Unset,
            synopsis=Unset,
            version=Unset,
            errors=(),
            *,
            logger=Unset,
            debug=False,
            colorful=False,
            timestamps=False,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "synopsis": synopsis,
            "version": version,
        }
        _process_strings(type(self), metadata)

        if not isinstance(logger, Logger | Unset):
            raise TypeError(f"{type(self).__typename__} 'logger' must be a logger")
        if not isinstance(errors, Mapping | Iterable):
            raise TypeError(f"{type(self).__typename__} 'errors' must be a mapping")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._logger = coalesce(logger, Logger(
            str(self._name), debug=debug, colorful=colorful, timestamps=timestamps
        ))
        self._commands = {}
        self._default = None
        self._errors = dict(_sanitize_error(type(self), *pair) for pair in dict(errors).items())
        self._help = Unset
        self._sealed = False

    def _unsealed(self, operation):
        if self._sealed:
            raise RuntimeError(f"{type(self).__typename__} cannot {operation} after the first execution")

    def register(self, command, /, *, default=False):
        """
        Register a command under its verb, or as the default command.

        Rules
        - command must be a Command.
        - regular commands need a non-empty verb, unique among registered verbs.
        - at most one default command; its verb is ignored for routing.

        Returns
        - the same command, so the call can be chained or used as a decorator.
        """
        self._unsealed("register commands")
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} can only register commands")

        if default:
            if self._default is not None:
                raise ValueError(f"{type(self).__typename__} default command is already registered")
            self._default = command
            return command

        if not command.verb:
            raise ValueError(f"{type(self).__typename__} cannot register a command without a verb")
        if command.verb in self._commands:
            raise ValueError(f"{type(self).__typename__} command verb {command.verb!r} is already in use")
        self._commands[command.verb] = command
        return command

    def command(self, source=Unset, /, *args, default=False, **kwargs):
        """
        Create a command and register it here.

        Supports the same modes as switchyard.commands.command(...):
        - direct: dispatcher.command(handler, verb="add", switches=[...])
        - decorator: @dispatcher.command(verb="add", switches=[...])
        """
        @rename("command")
        def wrapper(source, /):
            return self.register(command(source, *args, **kwargs), default=default)

        return wrapper(source) if source is not Unset else wrapper

    def error(self, code, message, /):
        """
        Describe a handler status; the message is shown whenever a command returns it.
        """
        self._unsealed("describe error codes")
        code, message = _sanitize_error(type(self), code, message)
        self._errors[code] = message

    def helper(self, helper, /):
        """
        Replace the built-in help page with a callable returning an int status (or None).

        The override can be set only once. Returns the same callable, enabling
        decorator-style usage: @dispatcher.helper
        """
        self._unsealed("override the help action")
        if not callable(helper):
            raise TypeError(f"{type(self).__typename__} helper must be callable")
        if self._help is not Unset:
            raise TypeError(f"{type(self).__typename__} helper cannot be overridden")
        self._help = helper
        return helper

    def help(self):
        """
        Run the help action and return its status.
        """
        status = self._helper() if self._help is Unset else self._help()
        if status is None:
            return SUCCESS
        if not isinstance(status, int) or isinstance(status, bool):
            raise TypeError(
                f"{type(self).__typename__} helper must return an int, not {type(status).__name__}"
            )
        return status

    def _helper(self):
        """
        Render the built-in help page: NAME, SYNOPSIS, DESCRIPTION and COMMANDS.

        The default command comes first, then every command in registration order,
        each with its switches and usage notes.
        """
        colorful = self._logger.colorful
        styles = self.__palette__

        def text(fragment, style=""):
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles.get(style, "") if colorful else "")

        def section(title, *body):
            return Group(text(title, "section"), *body, Text(""))

        def describe(command, label, style):
            heading = Text.assemble(text(label, style))
            if command.descr:
                heading.append_text(Text.assemble(" - ", text(command.descr, "description")))

            table = Table.grid(padding=(0, 2))
            table.add_column(no_wrap=True)
            table.add_column()
            for switch in command.switches.values():
                descr = text(switch.descr or "", "description")
                if switch.required:
                    descr = Text.assemble(descr, " ", text("(required)", "required"))
                table.add_row(Text.assemble("    ", text(switch.name, "switch")), descr)

            renders = [heading]
            if command.switches:
                renders.append(table)
            if command.notes:
                renders.append(Text.assemble("    ", text(command.notes, "notes")))
            return Group(*renders, Text(""))

        name = text(self._name, "program-name")
        if self._version:
            name = Text.assemble(name, " version ", text(self._version))

        renders = [section("NAME", name)]
        if self._synopsis:
            renders.append(section("SYNOPSIS", text(self._synopsis)))
        if self._descr:
            renders.append(section("DESCRIPTION", text(self._descr, "description")))

        commands = []
        if self._default is not None:
            commands.append(describe(self._default, self._default.verb or "(default)", "default-verb"))
        for verb, command in self._commands.items():
            commands.append(describe(command, verb, "verb"))
        if commands:
            renders.append(Group(text("COMMANDS", "section"), *commands))

        self._logger.render(Group(*renders))
        return SUCCESS

    def _reject(self, fault):
        self._logger.error(fault)
        self.help()
        return USAGE

    def _fold(self, command, result):
        match result.outcome:
            case Outcome.HELP:
                return self.help()
            case Outcome.REJECTED:
                return self._reject(result.fault)
            case Outcome.COMPLETED:
                if status := result.status:
                    try:
                        self._logger.error(self._errors[status])
                    except KeyError:
                        self._logger.debug(UnregisteredErrorCodeWarning(
                            "%s returned status %d which has no registered description" % (
                                command.verb or "the default command", status
                            ),
                            title="unregistered error code",
                            code=FaultCode.UNREGISTERED_ERROR_CODE,
                            verb=command.verb or None,
                            status=status,
                            hint="describe it with %s.error(%d, ...)" % (type(self).__typename__, status),
                        ))
                return result.status
        raise RuntimeError("unexpected outcome")

    def _dispatch(self, tokens):
        if any(token in HELP_TOKENS for token in tokens):
            return self.help()

        if self._default is not None and (not tokens or tokens[0].lower() not in self._commands):
            return self._fold(self._default, self._default.execute(tokens))

        if not tokens:
            return self._reject(MissingCommandError(
                "no command found",
                title="missing command",
                code=FaultCode.MISSING_COMMAND,
                hint="give one of: %s" % ", ".join(self._commands) if self._commands else None,
            ))

        try:
            command = self._commands[verb := tokens[0].lower()]
        except KeyError:
            suggestions = difflib.get_close_matches(verb, self._commands.keys(), 3)
            try:
                hint = "did you mean %r? run '%s%s' to see available commands" % (suggestions[0], PREFIX, HELP_TAG)
            except IndexError:
                hint = "run '%s%s' to see available commands" % (PREFIX, HELP_TAG)
            return self._reject(UnknownCommandError(
                "unknown command %r at first position" % tokens[0],
                title="unknown command",
                code=FaultCode.UNKNOWN_COMMAND,
                input=tokens[0],
                index=1,
                suggestions=suggestions,
                hint=hint,
            ))

        return self._fold(command, command.execute(tokens[1:], index=2))

    def execute(self, line=Unset, /):
        """
        Dispatch one input line and return its status.

        Parameters
        - line:
          • Unset: sys.argv[1:].
          • str: split on whitespace.
          • Iterable[str]: pre-tokenized; items are trimmed, blanks dropped.

        Returns
        - int: the handler status, SUCCESS/help status, USAGE after a rejected
          line, or FAILURE after an unexpected exception (logged as fatal).
        """
        self._sealed = True
        try:
            return self._dispatch(_tokenize(line))
        except Exception as exception:
            self._logger.fatal(exception)
            return FAILURE

    def __invoke__(self, prompt=Unset):
        return self.execute(prompt)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for dispatchers, commands or plain handlers.

    Behavior
    - an object implementing __invoke__ (a Dispatcher) runs the prompt directly.
    - a Command or a plain callable is registered as the default command of a
      fresh Dispatcher, which then runs the prompt.

    Returns
    - int: the status of the run.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if isinstance(object, Command):
        dispatcher = Dispatcher()
        dispatcher.register(object, default=True)
        return dispatcher.__invoke__(prompt)

    if callable(object):
        return invoke(command(object, verb=""), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


def repl(dispatcher, stream=Unset, /):
    """
    Execute lines from a stream until an empty line or end of input.

    Parameters
    - dispatcher: the Dispatcher (or any object with __invoke__) to feed.
    - stream: iterable of lines (default: sys.stdin).

    Returns
    - int: the status of the last executed line (SUCCESS when none ran).
    """
    status = SUCCESS
    for line in coalesce(stream, sys.stdin):
        if not (line := line.strip()):
            break
        status = invoke(dispatcher, line)
    return status


__all__ = (
    "SUCCESS",
    "FAILURE",
    "USAGE",
    "HELP_TOKENS",
    "Dispatcher",
    "invoke",
    "repl",
)

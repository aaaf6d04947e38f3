"""
Switchyard console logger.

A Logger is an explicit object owned by a Dispatcher: there is no module-level
output state. It writes through two rich consoles (stdout for regular lines and
help, stderr for diagnostics) that can be injected, which is how the tests
capture output.

Channels
- line: regular output, optionally timestamped.
- error: user-facing diagnostics. Faults render themselves (see switchyard.faults)
  with the program name and color settings merged in.
- debug: developer diagnostics, printed only when debug mode is on.
- fatal: unexpected faults caught by the dispatcher. always a single line;
  the traceback is added in debug mode only.
- render: any rich renderable on stdout (help pages).
"""
import copy
import datetime
from collections import defaultdict

from rich.console import Console
from rich.text import Text
from rich.traceback import Traceback

from .faults import *
from .utils import *


class Logger:
    """
    Output sink for a dispatcher.

    Parameters
    - name: program name used as the diagnostic prefix.
    - debug: print debug/fatal details (default False).
    - colorful: style output with the palette (default False).
    - timestamps: prefix line/error output with the current date and time.
    - styles: mapping overriding palette entries.
    - stdout, stderr: rich consoles to write to (default: new consoles on the real streams).
    """

    __palette__ = {
        "timestamp": "dim #9CA3AF",
        "error": "bold #FF4DA6",
        "debug": "dim #A3A3A3",
    }

    def __init__(
            self,
            name=Unset,
            /,
            *,
            debug=False,
            colorful=False,
            timestamps=False,
            styles=Unset,
            stdout=Unset,
            stderr=Unset,
    ):
        if not isinstance(name, str | Unset):
            raise TypeError("logger 'name' must be a string")
        for channel in (stdout, stderr):
            if not isinstance(channel, Console | Unset):
                raise TypeError("logger channels must be rich consoles")

        self.name = coalesce(name, "switchyard")
        self.debugging = bool(debug)
        self.colorful = bool(colorful)
        self.timestamps = bool(timestamps)
        self.styles = defaultdict(str, self.__palette__ | dict(coalesce(styles, {})))
        self.stdout = coalesce(stdout, Console())
        self.stderr = coalesce(stderr, Console(stderr=True))

    def _text(self, fragment, style=""):
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), self.styles[style] if self.colorful else "")

    def _stamp(self, text, timestamp):
        if not coalesce(timestamp, self.timestamps):
            return text
        now = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return Text.assemble(self._text(f"[{now}] ", "timestamp"), text)

    def _fault(self, fault):
        # faults carry their own palette; merge the logger's rendering settings in
        return copy.replace(fault, prog=self.name, colorful=self.colorful)

    def line(self, message="", /, *, timestamp=Unset):
        self.stdout.print(self._stamp(self._text(message), timestamp), highlight=False)

    def error(self, message, /, *, timestamp=Unset):
        if isinstance(message, CommandException | CommandWarning):
            text = self._fault(message).__rich__()
        else:
            text = Text.assemble(self._text(f"{self.name}: error: ", "error"), self._text(message))
        self.stderr.print(self._stamp(text, timestamp), highlight=False)

    def debug(self, message, /):
        if not self.debugging:
            return
        if isinstance(message, CommandException | CommandWarning):
            text = self._fault(message).__rich__()
        else:
            text = Text.assemble(self._text(f"{self.name}: debug: ", "debug"), self._text(message, "debug"))
        self.stderr.print(text, highlight=False)

    def fatal(self, exception, /):
        fault = FatalFaultError(
            "unexpected %s: %s" % (type(exception).__name__, exception),
            title="fatal fault",
            code=FaultCode.FATAL_FAULT,
            hint=None if self.debugging else "run in debug mode to see the traceback",
            exception=exception,
        )
        self.stderr.print(self._fault(fault).__rich__(), highlight=False)
        if self.debugging:
            self.stderr.print(Traceback.from_exception(type(exception), exception, exception.__traceback__))

    def render(self, renderable, /):
        self.stdout.print(renderable, highlight=False)


__all__ = (
    "Logger",
)

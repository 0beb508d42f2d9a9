"""
Slimshell faults (recoverable notices and fatal errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
- ShellFault: base type carrying a message + options that knows how to render
  itself as a one-line notice through rich.
- trigger(): central entry point to surface any fault.

UX goals
- One line per fault, no tracebacks and no internal diagnostics.
- Recoverable faults (unmatched command, cancelled prompt) keep the loop alive.
- Fatal faults (a handler that blew up) stop the loop; hosts running with
  shell=False get the exception raised instead of printed.

Integration
- The shell builds a fault where something goes wrong and calls
  trigger(fault, console=..., colorful=..., shell=..., title=...).
- Styles can be overridden with a __styles__ mapping in __main__, and codes can
  be relabelled with a __codes__ mapping in __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

console = Console()


class FaultCode(IntEnum):
    """
    canonical fault codes used across the shell (stable identifiers).

    grouping
    - routing (111xx): UNMATCHED_COMMAND, HANDLER_ERROR
    - resolution (112xx): CANCELLED_RESOLUTION
    """
    # --- routing (11xxx) ---
    UNMATCHED_COMMAND    = 11101
    HANDLER_ERROR        = 11131

    # --- argument resolution (11xxx) ---
    CANCELLED_RESOLUTION = 11201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ShellFault(Exception):
    """
    base type of every fault surfaced by the shell.

    options (all optional)
    - console: rich Console to print to (module console by default).
    - colorful: style the notice.
    - shell: when False, fatal faults are raised instead of printed.
    - title: shell title, shown in the header of fatal faults.
    """
    __faultcode__ = None
    __default__ = Unset
    __style__ = "notice"
    fatal = False

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, type(self).__default__)
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return type(self).__faultcode__

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "notice": "cyan",
            "fault": "bold red",
            "code": "bold #00E5FF",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        message = Text("  " + str(self), styler(type(self).__style__))
        if not self.fatal:
            return message

        header = Text.assemble(
            "  [ ",
            str(self.options.get("title", "slimshell")),
            " — ",
            (self.code.normalize(), styler("code")) if self.code else "",
            " ] ",
        )
        return Text.assemble(header, Text(str(self), styler(type(self).__style__)))

    def __trigger__(self):
        if self.fatal and not self.options.get("shell", True):
            raise self
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class UnmatchedCommandError(ShellFault):
    __faultcode__ = FaultCode.UNMATCHED_COMMAND
    __default__ = "wut?"


class CancelledResolutionError(ShellFault):
    __faultcode__ = FaultCode.CANCELLED_RESOLUTION
    __default__ = "Cancelled"


class HandlerError(ShellFault):
    """
    a handler raised (or returned something that is not a response).

    the original exception is chained as __cause__.
    """
    __faultcode__ = FaultCode.HANDLER_ERROR
    __default__ = "command failed"
    __style__ = "fault"
    fatal = True


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ShellFault).
    - options are merged into the fault via __replace__(**options) before triggering.
    - recoverable faults are printed; fatal faults are printed in shell mode and
      raised otherwise.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "ShellFault",
    "UnmatchedCommandError",
    "CancelledResolutionError",
    "HandlerError",
    "trigger",
)

"""
Commandflags faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the library
  reports. Codes are grouped by domain (resolution vs. flag parsing) to keep
  logs/searches predictable.
- CommandException: base type that carries a message + immutable options and knows
  how to render itself with rich.
- FlagSetError / HelpRequested: failures raised by FlagSet.parse().
- ResolutionError: the single, kind-tagged failure returned by resolve(); consumers
  switch on `error.kind` instead of relying on a class hierarchy.
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).

Integration
- FlagSet.parse() raises FlagSetError; resolve() catches it and returns a
  ResolutionError(kind=FLAG_ERROR) whose message is the node's rendered help.
- invoke() hands a returned ResolutionError to trigger(); in shell mode it is printed
  to stderr via rich and the process exits with status 1.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - resolution (1110x): FLAG_ERROR, MISSING_COMMAND, INVALID_COMMAND
    - flag parsing (1111x): BAD_FLAG_SYNTAX, UNKNOWN_FLAG, HELP_REQUESTED,
      MISSING_FLAG_VALUE, INVALID_FLAG_VALUE

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- resolution errors (1110x) ---
    FLAG_ERROR                  = 11101
    MISSING_COMMAND             = 11102
    INVALID_COMMAND             = 11103

    # --- flag parsing errors (1111x) ---
    BAD_FLAG_SYNTAX             = 11111
    UNKNOWN_FLAG                = 11112
    HELP_REQUESTED              = 11113
    MISSING_FLAG_VALUE          = 11114
    INVALID_FLAG_VALUE          = 11115

    def normalize(self):
        """
        label shown in fault headers: __main__.__codes__[self] when the host defines
        it, otherwise the numeric value.
        """
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))

    @property
    def title(self):
        """
        short lowercased title used in rendered headers (e.g., 'missing command').
        """
        return self.name.lower().replace("_", " ")


class CommandException(Exception):
    """
    base fault: a message plus immutable, free-form options.

    common options
    - code: FaultCode identifying the failure.
    - hint: optional one-line suggestion shown under the message.
    - prog: program name shown in the rendered header.
    - shell, colorful, fancy: rendering/surfacing switches used by __trigger__.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message is not Unset else ()))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            "prog-name": "bold white",
            "code": "bold cyan",
            "error-title": "bold red",
            "error-message": "default",
            "hint-arrow": "dim green",
            "hint": "italic green",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            return Text(str(fragment or ""), styles[style] if colorful else "")

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), "prog-name")

        header = Text.assemble(
            "[ ",
            *((prog, " — ") if prog else ()),
            text(self.code.normalize() if self.code is not None else "", "code"),
            " | ",
            text(self.code.title.title() if self.code is not None else "error", "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class FlagSetError(CommandException):
    """
    raised by FlagSet.parse() when the leading flags of a token vector are rejected.

    options: code, flagset (the FlagSet name), token (the offending token), and,
    when the flag is known, flag (the Flag spec).
    """

    @property
    def token(self):
        return self.options.get("token")

    @property
    def flag(self):
        return self.options.get("flag")


class HelpRequested(FlagSetError):
    """
    raised when -h/-help (or --h/--help) is given but not registered on the flag set.
    """


class ResolutionError(CommandException):
    """
    failure produced at exactly one node while resolving a command path.

    tagged variant
    - kind: FaultCode.FLAG_ERROR | FaultCode.MISSING_COMMAND | FaultCode.INVALID_COMMAND
    - message: human-readable text embedding the offending node's rendered help
    - node: the CommandNode where the failure originated (non-owning)
    - arguments: the argument slice handed to that node
    - cause: the underlying FlagSetError for FLAG_ERROR (never part of the message)

    ancestors never rewrite it: the same object travels up every recursive call.
    """

    @property
    def kind(self):
        return self.options["code"]

    @property
    def node(self):
        return self.options.get("node")

    @property
    def arguments(self):
        return self.options.get("arguments", ())

    @property
    def cause(self):
        return self.options.get("cause")


def trigger(fault, /, **options):
    """
    surface a fault, after merging runtime options into a copy of it.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into a copy of the fault via __replace__(**options) before triggering.
    - in shell mode the fault is printed to stderr and the process exits with status 1;
      otherwise the fault is raised.
    """
    for method in ("__replace__", "__trigger__"):
        if not callable(getattr(fault, method, None)):
            raise TypeError(f"trigger() argument must provide a {method} method")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "FlagSetError",
    "HelpRequested",
    "ResolutionError",
    "trigger",
)

r"""
Commandflags flag primitive: typed option flags and per-command flag sets.

Overview
- FlagKind: explicit kind tag carried by every flag (boolean, integer, float, string,
  other). Help rendering infers the value label from it (INT, FLOAT, STRING, VALUE)
  instead of inspecting Python types at runtime.
- Flag: one named, typed option with a default, a current value, and usage text.
- FlagSet: an ordered collection of flags owned by a single command node. It parses
  the leading flags of a token vector and keeps the positional remainder.

Parsing rules (FlagSet.parse)
- Flags are recognised only as a contiguous prefix; the first non-flag token and
  everything after it are positionals. A lone "-" is a positional. "--" is consumed
  and ends flag parsing.
- "-name" and "--name" are equivalent. Values are given as "-name=value" or
  "-name value".
- Boolean flags never consume the next token: "-verbose" means True, while
  "-verbose=false" assigns explicitly (1, t, T, TRUE, true, True, 0, f, F, FALSE,
  false, False).
- Integers accept base prefixes (0x, 0o, 0b), a bare leading 0 for octal, and
  underscores. Floats use float(), strings are kept verbatim, and OTHER flags run their own converter.

Failures raise FlagSetError (see commandflags.faults) with one of the codes
BAD_FLAG_SYNTAX, UNKNOWN_FLAG, HELP_REQUESTED, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE.

Quick example:
    >>> flags = FlagSet("deploy")
    >>> verbose = flags.boolean("verbose", False, "enable verbose output")
    >>> cpu = flags.float("c", 1.0, "cpu share")
    >>> flags.parse(["-verbose", "--c", "2.5", "app", "rev"])
    >>> verbose.value, cpu.value, flags.args
    (True, 2.5, ('app', 'rev'))

Public API
- Enums: FlagKind
- Classes: Flag, FlagSet
"""
import builtins
import re
from enum import IntEnum

from .faults import FaultCode, FlagSetError, HelpRequested
from .utils import *


class FlagKind(IntEnum):
    """
    Kind of value a flag carries.

    Each kind knows its help label (see label) and its default "zero" value.
    """
    BOOLEAN = 1
    INTEGER = 2
    FLOAT = 3
    STRING = 4
    OTHER = 5

    @property
    def label(self):
        """
        Placeholder shown after the flag name in help output ("" for booleans).
        """
        return {
            FlagKind.BOOLEAN: "",
            FlagKind.INTEGER: "INT",
            FlagKind.FLOAT: "FLOAT",
            FlagKind.STRING: "STRING",
        }.get(self, "VALUE")


def _integer(text, /):
    """
    Convert an integer literal with Go's base rules: 0x, 0o and 0b prefixes, and a
    bare leading zero for octal ("010" is 8).
    """
    digits = text.lstrip("+-")
    if len(digits) > 1 and digits[0] == "0" and (digits[1].isdigit() or digits[1] == "_"):
        return int(text, 8)
    return int(text, 0)


def _boolean(text, /):
    """
    Convert a textual boolean into a bool (same spellings as Go's strconv.ParseBool).
    """
    try:
        return {
            "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
            "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
        }[text]
    except KeyError:
        raise ValueError("invalid boolean syntax") from None


# Converters and zero values for every built-in kind (OTHER brings its own converter).
_converters = {
    FlagKind.BOOLEAN: _boolean,
    FlagKind.INTEGER: _integer,
    FlagKind.FLOAT: float,
    FlagKind.STRING: str,
}
_zeros = {
    FlagKind.BOOLEAN: False,
    FlagKind.INTEGER: 0,
    FlagKind.FLOAT: 0.0,
    FlagKind.STRING: "",
    FlagKind.OTHER: None,
}


def _sanitize_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize flag metadata in place.

    Responsibilities
    - name: required, non-empty after trimming, must match r"[^\W\d][\w-]*"
      (bare name; dashes are added on the command line and in help).
    - kind: must be a FlagKind member.
    - type: only allowed (and required) for FlagKind.OTHER; must be callable.
      Built-in kinds use the module converters.
    - default: Unset becomes the kind's zero value. Otherwise it must match the kind:
      bool for BOOLEAN, int (not bool) for INTEGER, int or float for FLOAT (stored as
      float), str for STRING; anything for OTHER.
    - usage: Unset becomes None; a provided string must be non-empty after trimming.

    Raises
    - TypeError: wrong types for any field.
    - ValueError: empty or malformed strings.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W\d][\w-]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a bare option name without dashes (unicodes are allowed)")
    metadata["name"] = name

    if not isinstance(kind := metadata["kind"], FlagKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a flag kind")

    if kind is FlagKind.OTHER:
        if not callable(metadata["type"]):
            raise TypeError(f"{cls.__typename__} 'type' must be callable")
    elif metadata["type"] is not Unset:
        raise TypeError(f"{cls.__typename__} 'type' is only allowed for {FlagKind.OTHER.name.lower()} flags")
    else:
        metadata["type"] = _converters[kind]

    default = coalesce(metadata["default"], _zeros[kind])
    match kind:
        case FlagKind.BOOLEAN if not isinstance(default, bool):
            raise TypeError(f"boolean {cls.__typename__} 'default' must be a bool")
        case FlagKind.INTEGER if not isinstance(default, int) or isinstance(default, bool):
            raise TypeError(f"integer {cls.__typename__} 'default' must be an int")
        case FlagKind.FLOAT if not isinstance(default, int | float) or isinstance(default, bool):
            raise TypeError(f"float {cls.__typename__} 'default' must be a number")
        case FlagKind.FLOAT:
            default = builtins.float(default)
        case FlagKind.STRING if not isinstance(default, str):
            raise TypeError(f"string {cls.__typename__} 'default' must be a string")
    metadata["default"] = default

    if not isinstance(usage := metadata["usage"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'usage' must be a string")
    elif isinstance(usage, str) and not (usage := usage.strip()):
        raise ValueError(f"{cls.__typename__} 'usage' cannot be empty")
    metadata["usage"] = coalesce(usage)


class Flag(metaclass=IntrospectableType):
    """
    Named, typed option specification with a current value.

    Highlights
    - name: bare option name; accepted on the command line as -name or --name.
    - kind: FlagKind tag used for conversion and for the help label.
    - default/value: value starts at default; FlagSet.parse() assigns converted
      values through set(), and reset() restores the default.
    - usage: one-line help text (or None).
    - type: converter from the command-line text to the value.
    - specified: True when the last parse of the owning flag set assigned this flag.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    """

    __introspectable__ = (
        "name",
        "kind",
        "default",
        "value",
        "usage",
        "type",
        "specified",
    )

    __displayable__ = (
        "name",
        "kind",
        "default",
        "value",
        "usage",
    )

    def __new__(cls, name, /, kind=FlagKind.STRING, default=Unset, usage=Unset, *, type=Unset):
        """
        Construct a Flag spec with the provided metadata.

        Parameters
        - name: str
          Bare option name (e.g., "verbose", "c", "dry-run").
        - kind: FlagKind
          Kind of the value; defaults to FlagKind.STRING.
        - default: Any
          Initial value; defaults to the kind's zero value (False, 0, 0.0, "", None).
        - usage: Unset | str
          Short help text. If Unset, becomes None.
        - type: Callable[[str], Any] (keyword-only)
          Converter for FlagKind.OTHER flags; rejected for the other kinds.
        """
        metadata = {
            "name": name,
            "kind": kind,
            "default": default,
            "usage": usage,
            "type": type,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = self._default
        self._specified = False
        return self

    def set(self, text, /):
        """
        Convert command-line text and store it as the current value.

        Raises
        - whatever the converter raises; the value is left unchanged. FlagSet.parse()
          wraps it in an INVALID_FLAG_VALUE fault.
        """
        if not isinstance(text, str):
            raise TypeError(f"{type(self).__typename__} value must be set from a string")
        self._value = self._type(text)
        self._specified = True

    def reset(self):
        """
        Restore the default value and clear the specified marker.
        """
        self._value = self._default
        self._specified = False


class FlagSet(metaclass=IntrospectableType):
    """
    Ordered collection of flags owned by one command node.

    Responsibilities
    - Registration: boolean()/integer()/float()/string()/value() or add(flag).
      Flags keep their registration order; redefining a name raises ValueError.
    - Parsing: parse(args) assigns leading flags and keeps the positional remainder
      in args.
    - Introspection: iteration yields Flag objects in registration order; len(), in,
      [name], lookup(name) and values() expose the registered flags.

    Properties
    - name: display name of the set (usually the owning command's name).
    - flags: read-only mapping name -> Flag.
    - args: positionals left by the last parse (empty before any parse).
    - parsed: True once parse() has succeeded.
    """

    __introspectable__ = (
        "name",
        "flags",
        "args",
        "parsed",
    )

    def __new__(cls, name, /):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        self = super().__new__(cls)
        self._name = name
        self._flags = {}
        self._args = []
        self._parsed = False
        return self

    def add(self, flag, /):
        """
        Register an existing Flag; returns it for chaining.
        """
        if not isinstance(flag, Flag):
            raise TypeError(f"{type(self).__typename__} can only register flags")
        if self._flags.setdefault(flag.name, flag) is not flag:
            raise ValueError(f"{type(self).__typename__} {self.name!r} flag redefined: {flag.name!r}")
        return flag

    def boolean(self, name, default=False, usage=Unset, /):
        return self.add(Flag(name, FlagKind.BOOLEAN, default, usage))

    def integer(self, name, default=0, usage=Unset, /):
        return self.add(Flag(name, FlagKind.INTEGER, default, usage))

    def float(self, name, default=0.0, usage=Unset, /):
        return self.add(Flag(name, FlagKind.FLOAT, default, usage))

    def string(self, name, default="", usage=Unset, /):
        return self.add(Flag(name, FlagKind.STRING, default, usage))

    def value(self, name, type, default=None, usage=Unset, /):
        """
        Register a flag with a custom converter (rendered with the VALUE label).
        """
        return self.add(Flag(name, FlagKind.OTHER, default, usage, type=type))

    def lookup(self, name, /):
        return self._flags.get(name)

    def values(self):
        """
        Snapshot of the current values, keyed by flag name (registration order).
        """
        return {name: flag.value for name, flag in self._flags.items()}

    def reset(self):
        """
        Restore every flag to its default and forget the last parse.
        """
        for flag in self._flags.values():
            flag.reset()
        self._args = []
        self._parsed = False

    def parse(self, args, /):
        """
        Parse the leading flags of `args` and keep the positional remainder.

        Behavior
        - Walks tokens left to right while they look like flags (see module docs).
        - Converts and assigns each flag's value as soon as it is read, so flags
          before a failing token keep their new values.
        - On success, args holds the remaining positionals and parsed is True.

        Raises
        - TypeError: when an item of `args` is not a string.
        - FlagSetError: BAD_FLAG_SYNTAX, UNKNOWN_FLAG, MISSING_FLAG_VALUE or
          INVALID_FLAG_VALUE; HelpRequested (HELP_REQUESTED) for an unregistered
          -h/-help.
        """
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError(f"{type(self).__typename__} arguments must be strings")

        for flag in self._flags.values():
            flag._specified = False
        self._args = []
        self._parsed = False

        index = 0
        while index < len(tokens):
            token = tokens[index]
            if len(token) < 2 or not token.startswith("-"):
                break
            if token == "--":
                index += 1
                break

            input = token[2:] if token.startswith("--") else token[1:]
            if not input or input[0] in "-=":
                raise FlagSetError(
                    "bad flag syntax: %s" % token,
                    code=FaultCode.BAD_FLAG_SYNTAX,
                    flagset=self.name,
                    token=token,
                )
            index += 1

            name, inline, value = input.partition("=")
            try:
                flag = self._flags[name]
            except KeyError:
                if name in ("h", "help"):
                    raise HelpRequested(
                        "help requested",
                        code=FaultCode.HELP_REQUESTED,
                        flagset=self.name,
                        token=token,
                    ) from None
                raise FlagSetError(
                    "flag provided but not defined: -%s" % name,
                    code=FaultCode.UNKNOWN_FLAG,
                    flagset=self.name,
                    token=token,
                ) from None

            if not inline:
                if flag.kind is FlagKind.BOOLEAN:
                    value = "true"
                elif index < len(tokens):
                    value = tokens[index]
                    index += 1
                else:
                    raise FlagSetError(
                        "flag needs an argument: -%s" % name,
                        code=FaultCode.MISSING_FLAG_VALUE,
                        flagset=self.name,
                        token=token,
                        flag=flag,
                    )

            try:
                flag.set(value)
            except Exception as error:
                raise FlagSetError(
                    "invalid value %r for flag -%s: %s" % (value, name, error),
                    code=FaultCode.INVALID_FLAG_VALUE,
                    flagset=self.name,
                    token=token,
                    flag=flag,
                ) from error

        self._args = tokens[index:]
        self._parsed = True

    def __iter__(self):
        return iter(self._flags.values())

    def __len__(self):
        return len(self._flags)

    def __contains__(self, name, /):
        if isinstance(name, Flag):
            return self._flags.get(name.name) is name
        return name in self._flags

    def __getitem__(self, name, /):
        return self._flags[name]


__all__ = (
    "FlagKind",
    "Flag",
    "FlagSet",
)

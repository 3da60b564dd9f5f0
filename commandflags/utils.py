"""
Commandflags utilities shared by the flag, fault, help and command layers.

Contents
- Unset: falsy singleton meaning "argument not given", so None stays a real value.
- coalesce(value, default): swap Unset for a default, keep every other value.
- rename(name): decorator pinning __name__/__qualname__ on generated functions.
- mirror(name): read-only property over "_name" that hands out immutable views.
- IntrospectableType: metaclass used by Flag, FlagSet and CommandNode. It turns the
  names in __introspectable__ into mirrored properties and derives __typename__,
  __repr__ and __rich_repr__ from them.

Example
    >>> coalesce(Unset, 80), coalesce(None, 80)
    (80, None)
"""
import functools
import operator
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance. It is falsy, prints as "Unset", can take part
    in `X | Unset` unions for isinstance checks, and cannot be subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, otherwise object itself (None, 0 and "" included).
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator giving the wrapped function a fixed __name__ and __qualname__.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _frozen(value):
    # Immutable view of container values; scalars pass through.
    if isinstance(value, Mapping):
        return MappingProxyType(value)
    if isinstance(value, Set):
        return frozenset(value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        return tuple(value)
    return value


def mirror(name, /):
    """
    Build a read-only property exposing self._<name>.

    Lists and other sequences come back as tuples, dicts as MappingProxyType and
    sets as frozensets, so callers cannot mutate the backing field through it.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _frozen(getattr(self, "_" + name))

    return property(getter)


class IntrospectableType(type):
    """
    Metaclass for the public value classes.

    Class attributes read at class creation
    - __introspectable__: names exposed as mirrored read-only properties.
    - __displayable__: subset shown by repr(); defaults to __introspectable__.

    Adds __typename__ ("CommandNode" -> "command-node"), which validation
    messages use, and a repr of the form typename(field=value, ...).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        properties = {field: mirror(field) for field in namespace.get("__introspectable__", ())}
        typename = "-".join(re.findall(r"[A-Z]?[^A-Z]+|[A-Z]+(?![^A-Z])", name)).lower()
        self = super().__new__(cls, name, bases, {**namespace, **properties, "__typename__": typename}, **options)

        @rename("__rich_repr__")
        def __rich_repr__(self):
            shown = coalesce(type(self).__displayable__, type(self).__introspectable__)
            return ((field, getattr(self, field)) for field in shown)

        @rename("__repr__")
        def __repr__(self):
            pairs = map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            return "%s(%s)" % (type(self).__typename__, ", ".join(pairs))

        self.__rich_repr__ = __rich_repr__
        self.__repr__ = __repr__
        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",
    "IntrospectableType",

    # Constants
    "Unset",
)

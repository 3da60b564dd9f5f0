"""
Commandflags command layer: build a command tree and resolve argument vectors against it.

What this module provides
- CommandNode: one named command owning its FlagSet, optional description strings
  (short, long, help) and named child commands.
- resolve(node, args): walk the tree level by level, parsing each level's flags and
  dispatching on the first positional, and return the resolved path plus an error.
- command(name, parent, ...): create a node and optionally mount it under a parent.
- invoke(node, prompt): process entry point; resolves sys.argv (or a prompt) and
  surfaces failures through faults.trigger().

Resolution contract
- Each level parses only the leading flags of its own slice; there is no flag
  inheritance between levels.
- A leaf returns its name followed by the remaining positionals, verbatim.
- A node with sub-commands always needs one more positional naming a child.
- Failures stop resolution at the failing node. The returned ResolutionError is
  produced there once and handed up unchanged; the path always runs from the
  starting node down to the failing node.

Quick start
    from commandflags import CommandNode, FlagSet, resolve

    root = CommandNode("root")
    verbose = root.flags.boolean("verbose", False, "enable verbose output")
    deploy = root.command("deploy", short="deploy an app")
    deploy.command("status", short="get the status of deployments for an app")
    deploy.command("destroy", short="destroy hung deployment for an app")

    path, error = resolve(root, ["--verbose", "deploy", "status", "extra"])
    # path == ["root", "deploy", "status", "extra"], error is None, verbose.value is True

See also
- commandflags.flags for the flag primitive and its parsing rules.
- commandflags.helps for the help text embedded in resolution errors.
"""
import logging
import re
import shlex
import sys
from collections.abc import Iterable, Mapping

from .faults import *
from .flags import FlagSet
from .helps import render
from .utils import *

logger = logging.getLogger(__name__)


def _process_name(cls, metadata):
    """
    Validate the dispatch name: a single non-empty token that does not look like a flag.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\s-]\S*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a single word not starting with '-'")
    metadata["name"] = name


def _process_strings(cls, metadata):
    """
    Normalize the optional description strings (short, long, help).

    - Unset becomes None.
    - Strings are trimmed; empty or whitespace-only strings are rejected.
    """
    for name in (
            "short",
            "long",
            "help",
    ):
        if not isinstance(object := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(object)


def _process_flags(cls, metadata):
    """
    Default to an empty FlagSet named after the node; otherwise require a FlagSet.
    """
    if (flags := metadata["flags"]) is Unset:
        metadata["flags"] = FlagSet(metadata["name"])
    elif not isinstance(flags, FlagSet):
        raise TypeError(f"{cls.__typename__} 'flags' must be a flag set")


def _process_subcommands(cls, metadata):
    """
    Turn an iterable of nodes (or a name -> node mapping) into a list of children.

    Mapping keys must equal the child's own name. Children must be unattached and
    carry distinct names, so a failed construction leaves every child untouched.
    """
    if isinstance(object := metadata["subcommands"], Mapping):
        for name, child in object.items():
            if not isinstance(child, cls):
                raise TypeError(f"{cls.__typename__} 'subcommands' must contain only command nodes")
            elif name != child.name:
                raise ValueError(f"{cls.__typename__} 'subcommands' key {name!r} does not match {child.name!r}")
        object = object.values()
    elif not isinstance(object, Iterable) or isinstance(object, str):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of command nodes")
    metadata["subcommands"] = list(object)
    seen = set()
    for child in metadata["subcommands"]:
        if not isinstance(child, cls):
            raise TypeError(f"{cls.__typename__} 'subcommands' must contain only command nodes")
        elif child._attached:
            raise ValueError(f"{cls.__typename__} {child.name!r} is already attached to a parent")
        elif child.name in seen:
            raise ValueError(f"{cls.__typename__} sub-command name {child.name!r} is already in use")
        seen.add(child.name)


def _attach_to_parent(self, parent):
    """
    Register self under parent, enforcing unique names and single ownership.
    """
    if self._attached:
        raise ValueError(f"{type(self).__typename__} {self.name!r} is already attached to a parent")
    elif self is parent:
        raise ValueError(f"{type(self).__typename__} {self.name!r} cannot be its own sub-command")
    elif parent._subcommands.setdefault(self.name, self) is not self:
        raise ValueError(f"{type(self).__typename__} sub-command name {self.name!r} is already in use")
    self._attached = True


class CommandNode(metaclass=IntrospectableType):
    """
    One named command in a tree of commands.

    Properties
    - name: dispatch and display name, unique among siblings.
    - flags: FlagSet owned by this node; only this node's level of the arguments
      is parsed against it.
    - subcommands: read-only mapping name -> child CommandNode.
    - short, long, help: optional description strings (None when absent). short is
      shown in the parent's sub-command list, long (or short) as this node's
      description, help as a closing note.
    - leaf: True when the node has no sub-commands.

    Construction
        CommandNode(name, flags=..., subcommands=..., short=..., long=..., help=...)
    subcommands accepts an iterable of nodes or a mapping keyed by child name.
    Children can also be added later with command() or attach().
    """

    __introspectable__ = (
        "name",
        "flags",
        "subcommands",
        "short",
        "long",
        "help",
    )

    __displayable__ = (
        "name",
        "short",
        "long",
        "help",
    )

    def __new__(
            cls,
            name,
            /,
            flags=Unset,
            subcommands=(),
            short=Unset,
            long=Unset,
            help=Unset,
    ):
        metadata = {
            "name": name,
            "flags": flags,
            "subcommands": subcommands,
            "short": short,
            "long": long,
            "help": help,
        }
        _process_name(cls, metadata)
        _process_strings(cls, metadata)
        _process_flags(cls, metadata)
        _process_subcommands(cls, metadata)

        self = super().__new__(cls)
        children = metadata.pop("subcommands")
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._subcommands = {}
        self._attached = False
        for child in children:
            _attach_to_parent(child, self)
        return self

    @property
    def leaf(self):
        return not self._subcommands

    def attach(self, child, /):
        """
        Mount an existing, unattached node as a sub-command; returns the child.
        """
        if not isinstance(child, CommandNode):
            raise TypeError(f"{type(self).__typename__} can only attach command nodes")
        _attach_to_parent(child, self)
        return child

    def command(self, name, /, *args, **kwargs):
        """
        Create a sub-command under this node and return it.

        Thin wrapper around the top-level command(...) factory with parent=self.
        """
        return command(name, self, *args, **kwargs)

    def resolve(self, args, /):
        """
        Shortcut for resolve(self, args).
        """
        return resolve(self, args)

    def render(self, width=None, /, **options):
        """
        Shortcut for helps.render(self, width, ...).
        """
        return render(self, width, **options)


def _resolve(node, args):
    logger.debug("resolving %r with %r", node.name, args)
    try:
        node.flags.parse(args)
    except FlagSetError as error:
        logger.debug("flags rejected at %r: %s", node.name, error)
        return [node.name], ResolutionError(
            render(node),
            code=FaultCode.FLAG_ERROR,
            node=node,
            arguments=tuple(args),
            cause=error,
            hint=error.message,
        )

    remaining = list(node.flags.args)
    if node.leaf:
        logger.debug("resolved leaf %r with positionals %r", node.name, remaining)
        return [node.name, *remaining], None

    if not remaining:
        logger.debug("missing sub-command at %r", node.name)
        return [node.name], ResolutionError(
            "Missing COMMAND:\n" + render(node),
            code=FaultCode.MISSING_COMMAND,
            node=node,
            arguments=tuple(args),
            hint=f"expected one of: {', '.join(sorted(node.subcommands))}",
        )

    head, *rest = remaining
    if (child := node.subcommands.get(head)) is None:
        logger.debug("invalid sub-command %r at %r", head, node.name)
        return [node.name], ResolutionError(
            "Invalid COMMAND: " + head + "\n" + render(node),
            code=FaultCode.INVALID_COMMAND,
            node=node,
            arguments=tuple(args),
            hint=f"expected one of: {', '.join(sorted(node.subcommands))}",
        )

    path, error = _resolve(child, rest)
    return [node.name, *path], error


def resolve(node, args, /):
    """
    Resolve an argument vector against a command tree.

    Parameters
    - node: CommandNode where resolution starts (usually the root).
    - args: Iterable[str] holding the arguments after the program name.

    Returns
    - (path, error): path is the list of node names from node down to the last
      node reached (on success at a leaf, followed by its leftover positionals);
      error is None or a ResolutionError whose kind is FLAG_ERROR,
      MISSING_COMMAND or INVALID_COMMAND.

    Side effects
    - The flag set of every visited node is parsed in place; nodes off the path
      are untouched.

    Raises
    - TypeError: when node is not a CommandNode or args holds a non-string.
    """
    if not isinstance(node, CommandNode):
        raise TypeError("resolve() first argument must be a command node")
    if isinstance(args, str) or not isinstance(args, Iterable):
        raise TypeError("resolve() second argument must be an iterable of strings")
    args = list(args)
    if not all(isinstance(arg, str) for arg in args):
        raise TypeError("resolve() second argument must be an iterable of strings")
    return _resolve(node, args)


def command(name, parent=Unset, /, *args, **kwargs):
    """
    Create a CommandNode and, when parent is given, mount it there.

    Parameters
    - name: str
    - parent: CommandNode | Unset
    - *args, **kwargs: forwarded to CommandNode (flags, subcommands, short, long, help).
    """
    child = CommandNode(name, *args, **kwargs)
    if parent is not Unset:
        if not isinstance(parent, CommandNode):
            raise TypeError("command() 'parent' must be a command node")
        parent.attach(child)
    return child


def invoke(node, prompt=Unset, /, *, shell=True, colorful=False, fancy=False):
    """
    Resolve a prompt against a command tree and surface failures.

    Parameters
    - node: CommandNode (the root).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).
    - shell: print failures to stderr and exit with status 1 (True) or raise them (False).
    - colorful, fancy: rendering switches for the printed fault.

    Returns
    - The resolved path on success.
    """
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() second argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() second argument must be a string or an iterable of strings")

    path, error = resolve(node, tokens)
    if error is not None:
        trigger(error, shell=shell, colorful=colorful, fancy=fancy, prog=node.name)
    return path


__all__ = (
    "CommandNode",
    "resolve",
    "command",
    "invoke",
)

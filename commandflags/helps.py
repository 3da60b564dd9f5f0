"""
Commandflags help renderer: column-aligned, word-wrapped usage text for one node.

What this module provides
- RenderConfig: immutable rendering settings (indent, width, gutter, colorful).
- wrap(text, width): whitespace word-wrap that never splits a token.
- helper(node, width=None, config=...): the help text as a rich Text (styled when
  config.colorful is set).
- render(node, width=None, config=...): the same help as a plain string; this is
  what resolve() embeds in its errors.

Layout (blocks separated by one blank line, no trailing newline)
    usage: deploy [flags] COMMAND

        long (or short) description, wrapped to width - indent

    flags:
        -verbose    enable verbose output
        -c FLOAT    cpu share, wrapped with continuation lines aligned on
                    the usage column

    sub-commands:
        destroy    destroy hung deployment for an app
        status     get the status of deployments for an app

        help note, wrapped and indented like the description

Column rules
- Flags keep their registration order. The usage column starts at the widest
  "-name LABEL" cell plus the gutter.
- Sub-commands are sorted by name. The description column starts at
  indent + widest name + gutter.
- Each block computes its own column, so flag labels and sub-command names never
  push each other around.

Rendering is pure: it reads the node's name, descriptions, flags and immediate
children, and never mutates anything.
"""
import textwrap
from collections import defaultdict, namedtuple

from rich.text import Text

from .utils import *


class RenderConfig(namedtuple("RenderConfig", ("indent", "width", "gutter", "colorful"))):
    """
    Immutable help rendering settings.

    Fields
    - indent: spaces before descriptions and list items (default 4).
    - width: default total line width when render() gets no explicit width (default 80).
    - gutter: spaces between a label column and its text column (default 2).
    - colorful: apply the style palette in helper() (default False; render() is always plain).

    Use config._replace(...) to derive variants.
    """
    __slots__ = ()

    def __new__(cls, indent=4, width=80, gutter=2, colorful=False):
        for field, value in (("indent", indent), ("width", width), ("gutter", gutter)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"render config {field!r} must be an integer")
        if indent < 0:
            raise ValueError("render config 'indent' cannot be negative")
        if gutter < 0:
            raise ValueError("render config 'gutter' cannot be negative")
        if width < 1:
            raise ValueError("render config 'width' must be a positive integer")
        return super().__new__(cls, indent, width, gutter, bool(colorful))


def wrap(text, width, /):
    """
    Word-wrap text into lines no longer than width.

    Rules
    - Runs of whitespace (including newlines and tabs) collapse to single spaces.
    - Lines break only at whitespace; a token longer than width sits alone on its
      own line, unbroken.
    - A width below 1 is treated as 1. Empty or blank text yields no lines.
    """
    if not isinstance(text, str):
        raise TypeError("wrap() first argument must be a string")
    return textwrap.wrap(
        " ".join(text.split()),
        max(width, 1),
        break_long_words=False,
        break_on_hyphens=False,
    )


def _palette():
    """
    Default help palette merged with the host's __styles__ (from __main__).
    """
    return defaultdict(str, {
        # header and description
        "usage-label": "bold cyan",
        "program-name": "bold magenta",
        "usage-section": "cyan",
        "description-section": "italic",
        "help-section": "dim",

        # flag and sub-command blocks
        "group-label": "bold",
        "flag-name": "bold green",
        "metavar": "yellow",
        "argument-description": "default",
        "children": "bold cyan",
        "children-description": "default",
    } | getattr(__import__("__main__"), "__styles__", {}))


def helper(node, width=None, /, config=Unset):
    """
    Build the help text of a command node as a rich Text.

    Parameters
    - node: CommandNode (anything exposing name, short, long, help, flags and subcommands)
    - width: int | None
      Total line width; None uses config.width.
    - config: RenderConfig | Unset
      Rendering settings; Unset uses RenderConfig().

    Returns
    - Text: styled only when config.colorful is True; .plain is identical either way.
    """
    config = coalesce(config, RenderConfig())
    if not isinstance(config, RenderConfig):
        raise TypeError("helper() 'config' must be a render config")
    width = config.width if width is None else width
    if not isinstance(width, int) or isinstance(width, bool):
        raise TypeError("helper() 'width' must be an integer")
    elif width < 1:
        raise ValueError("helper() 'width' must be a positive integer")

    styles = _palette()
    indent = " " * config.indent

    def text(fragment, style=""):
        # Plain Text in non-colorful mode; palette style otherwise.
        return Text(fragment, styles[style] if config.colorful else "")

    def paragraph(body, style):
        return Text("\n").join(
            Text(indent) + text(line, style) for line in wrap(body, width - config.indent)
        )

    def hanging(item, body, column, style):
        # Append wrapped body to item: first line after padding, the rest aligned on column.
        lines = wrap(body, width - column)
        item.append(" " * (column - len(item))).append(text(lines[0], style))
        for line in lines[1:]:
            item.append("\n").append(" " * column).append(text(line, style))
        return item

    blocks = []

    header = Text.assemble(text("usage", "usage-label"), ": ", text(node.name, "program-name"))
    if len(node.flags):
        header.append(" ").append(text("[flags]", "usage-section"))
    if node.subcommands:
        header.append(" ").append(text("COMMAND", "usage-section"))
    blocks.append(header)

    if descr := node.long or node.short:
        blocks.append(paragraph(descr, "description-section"))

    if len(node.flags):
        section = [text("flags", "group-label") + ":"]
        items = []
        for flag in node.flags:
            item = Text(indent) + text("-" + flag.name, "flag-name")
            if label := flag.kind.label:
                item.append(" ").append(text(label, "metavar"))
            items.append((item, flag.usage))
        column = max(len(item) for item, _ in items) + config.gutter
        for item, usage in items:
            section.append(hanging(item, usage, column, "argument-description") if usage else item)
        blocks.append(Text("\n").join(section))

    if node.subcommands:
        section = [text("sub-commands", "group-label") + ":"]
        names = sorted(node.subcommands)
        column = config.indent + max(map(len, names)) + config.gutter
        for name in names:
            item = Text(indent) + text(name, "children")
            if short := node.subcommands[name].short:
                item = hanging(item, short, column, "children-description")
            section.append(item)
        blocks.append(Text("\n").join(section))

    if node.help:
        blocks.append(paragraph(node.help, "help-section"))

    return Text("\n\n").join(blocks)


def render(node, width=None, /, config=Unset):
    """
    Render the help text of a command node as a plain string.

    Total function over any well-formed node: absent descriptions, flags or
    sub-commands simply omit their block. Calling it twice with the same inputs
    yields identical strings.
    """
    return helper(node, width, config).plain


__all__ = (
    "RenderConfig",
    "wrap",
    "helper",
    "render",
)

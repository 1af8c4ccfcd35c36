"""
Usage synopsis and help rendering.

Both renderings read the same Level the matcher binds against, so what is
documented is exactly what is accepted. Output is plain rich Text; styles are
applied only when colorful is requested.

Layout

    [description]
    Usage: PROGRAM [CHAIN...] [--flag] [--opt OPT] --req REQ POS [MULTI [MULTI ...]]

    Positional arguments:
      POS                    help text [default: x, env: NAME]

    Options:
      --opt OPT, -o OPT      help text
      --version              display version and exit
      --help, -h             display this help and exit

    Commands:
      name                   help text

    [epilog]

Help text starts at COLUMN; an entry too wide for it moves its help text to the
next line, indented to COLUMN.
"""
import enum
from collections import defaultdict

from rich.text import Text

from .fields import FieldKind

COLUMN = 25


def _styles():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan signature label
        "program-name": "bold #FF4D94",  # magenta-pink program
        "command-name": "bold #36C5F0",  # sky-blue subcommands
        "group-label": "bold #FFFFFF",  # white section headers
        "flag-name": "bold #22C55E",  # green flags
        "metavar": "bold #FFD600",  # amber value labels
        "argument-description": "#9CA3AF",  # muted gray help
        "description-section": "italic #A3A3A3",
        "epilog-section": "#737373",
    } | getattr(__import__("__main__"), "__styles__", {}))


class _Painter:
    """
    Turn fragments into Text, styled only when colorful.
    """

    def __init__(self, colorful):
        self.colorful = colorful
        self.styles = _styles()

    def __call__(self, fragment, style=""):
        if isinstance(fragment, Text):
            return fragment.copy() if self.colorful else Text(fragment.plain)
        return Text(str(fragment), self.styles[style] if self.colorful else "")


def _format_default(value):
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, list | tuple):
        return " ".join(map(str, value))
    if isinstance(value, dict):
        return " ".join(f"{key}={item}" for key, item in value.items())
    return str(value)


def _flag(descriptor, paint, *, synopsis=False):
    """
    "--long", "--long META", or with its alias "--long META, -s META".
    """
    def spelled(prefix, name):
        text = Text.assemble(paint(prefix + name, "flag-name"))
        if descriptor.kind is not FieldKind.BOOLEAN:
            text.append(" ").append_text(paint(descriptor.metavar, "metavar"))
        return text

    text = spelled("--", descriptor.long)
    if descriptor.short and not synopsis:
        text.append(", ").append_text(spelled("-", descriptor.short))
    return text


def _positional(descriptor, paint):
    metavar = paint(descriptor.metavar, "metavar")
    if descriptor.kind is FieldKind.POSITIONAL_MULTI:
        metavar = Text.assemble(metavar, " [", metavar.copy(), " ...]")
    return metavar


def _synopsis_items(level, paint):
    for descriptor in level.flags:
        if descriptor.hidden:
            continue
        item = _flag(descriptor, paint, synopsis=True)
        yield item if descriptor.required else Text.assemble("[", item, "]")

    for descriptor in level.positionals:
        if descriptor.hidden:
            continue
        item = _positional(descriptor, paint)
        yield item if descriptor.required else Text.assemble("[", item, "]")


def _usage(level, program, chain, paint):
    leaf = level.descend(chain)[-1]
    text = Text.assemble(paint("Usage", "usage-label"), ": ", paint(program, "program-name"))
    for name in chain:
        text.append(" ").append_text(paint(name, "command-name"))
    for item in _synopsis_items(leaf, paint):
        text.append(" ").append_text(item)
    return leaf, text


def usage(level, program, chain=(), /, *, colorful=False):
    """
    Render the one-line synopsis of the level selected by chain.
    """
    return _usage(level, program, tuple(chain), _Painter(colorful))[1]


def _suffix(descriptor, prefix):
    parts = []
    if descriptor.kind is not FieldKind.SUBCOMMAND and descriptor.has_default():
        if default := descriptor.initial():
            parts.append(f"default: {_format_default(default)}")
    if (name := descriptor.envvar(prefix)) is not None:
        parts.append(f"env: {name}")
    return f"[{', '.join(parts)}]" if parts else ""


def _entry(left, help, paint):
    """
    One body line: two-space indent, entry, help text aligned on COLUMN.
    """
    line = Text("  ").append_text(left)
    if not help:
        return line
    if len(line) + 2 < COLUMN:
        line.append(" " * (COLUMN - len(line)))
    else:
        line.append("\n" + " " * COLUMN)
    return line.append_text(paint(help, "argument-description"))


def _described(descriptor, prefix):
    help = descriptor.help or ""
    if suffix := _suffix(descriptor, prefix):
        help = Text.assemble(help, " ", suffix) if help else suffix
    return help


def help(level, program, chain=(), /, *, description=None, epilog=None, version=None, prefix="", colorful=False):
    """
    Render the full help of the level selected by chain.

    - description / epilog: optional paragraphs around the body.
    - version: when set, the body lists --version.
    - prefix: environment prefix applied to derived variable names.
    """
    paint = _Painter(colorful)
    chain = tuple(chain)
    levels = level.descend(chain)
    leaf, synopsis = _usage(level, program, chain, paint)

    lines = []
    if description:
        lines.append(paint(description, "description-section"))
    lines.append(synopsis)

    if positionals := [x for x in leaf.positionals if not x.hidden]:
        lines.extend((Text(), paint("Positional arguments", "group-label").append(":")))
        for descriptor in positionals:
            lines.append(_entry(paint(descriptor.metavar, "metavar"), _described(descriptor, prefix), paint))

    lines.extend((Text(), paint("Options", "group-label").append(":")))
    for descriptor in leaf.flags:
        if not descriptor.hidden:
            lines.append(_entry(_flag(descriptor, paint), _described(descriptor, prefix), paint))
    if version and not any(x.lookup("--version") for x in levels):
        lines.append(_entry(paint("--version", "flag-name"), "display version and exit", paint))
    lines.append(_entry(
        Text.assemble(paint("--help", "flag-name"), ", ", paint("-h", "flag-name")),
        "display this help and exit",
        paint,
    ))

    if commands := [x for x in leaf.commands if not x.hidden]:
        lines.extend((Text(), paint("Commands", "group-label").append(":")))
        for descriptor in commands:
            names = Text(", ").join(paint(name, "command-name") for name in descriptor.names)
            lines.append(_entry(names, descriptor.help, paint))

    if epilog:
        lines.extend((Text(), paint(epilog, "epilog-section")))

    return Text("\n").join(lines)


__all__ = (
    "COLUMN",
    "usage",
    "help",
)

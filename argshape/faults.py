"""
Argshape faults (parse errors, exit signals) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- ShapeError: programmer misconfiguration detected while describing a shape.
- ParseFault: base type carrying message + read-only options; knows how to
  render itself through rich and how to surface itself (raise or print+exit).
  • ParseError and its subclasses: user errors, non-zero exit status.
  • ParseExit (HelpRequested, VersionRequested): not errors, exit status 0.
- trigger(): central entry point to surface any fault with runtime options.

Rendering contract
- Errors render as the usage synopsis of the resolved level followed by one
  line "error: <message>"; never a traceback or internal state.
- Exit signals render the help/version text they were given.

Integration
- The matcher and the precedence resolver raise bare faults with context
  (code, input, chain, ...). The parser enriches them with the rendered usage
  and either re-raises them (library form) or prints them and calls the
  injected exit callback (shell form) via trigger(fault, **options).
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - matching (211xx): UNKNOWN_FLAG, MISSING_VALUE, AMBIGUOUS_SUBCOMMAND
    - values (212xx): CONVERSION
    - completeness (213xx): MISSING_REQUIRED
    - exits (220xx): HELP, VERSION

    normalize() lets the host application remap codes to its own labels.
    """
    # --- matching errors ---
    UNKNOWN_FLAG         = 21101
    MISSING_VALUE        = 21102
    AMBIGUOUS_SUBCOMMAND = 21111

    # --- value errors ---
    CONVERSION           = 21201

    # --- completeness errors ---
    MISSING_REQUIRED     = 21301

    # --- exits ---
    HELP                 = 22001
    VERSION              = 22002

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ShapeError(TypeError):
    """
    A configuration shape cannot be turned into descriptors.

    Raised eagerly while describing a shape: colliding names, misplaced or
    repeated multi-value positionals, required fields with defaults, invalid
    subcommand fields. This is a programming bug, not a runtime condition.
    """


def _styles():
    return defaultdict(str, {
        "error-label": "bold #FF4DA6",  # friendly pinky label
        "error-message": "#C8C8D0",  # soft light gray message
    } | getattr(__import__("__main__"), "__styles__", {}))


class ParseFault(Exception):
    """
    Base of everything a parse can surface to the user.

    options (all optional, merged through __replace__/trigger)
    - code: FaultCode
    - chain: tuple of subcommand names resolved when the fault happened
    - usage: str | Text rendered above the message
    - colorful: bool
    - shell: bool, print and exit instead of raising
    - console: rich Console receiving the rendering in shell mode
    - exit: callable receiving the exit status in shell mode
    """
    status = 1

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def chain(self):
        return tuple(self.options.get("chain", ()))

    def __rich__(self):
        raise NotImplementedError

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        self.options["console"].print(self, soft_wrap=True, highlight=False, markup=False)
        self.options["exit"](self.status)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseError(ParseFault):
    """
    A user error: the token list does not fit the configuration shape.
    """

    def __rich__(self):
        styles = _styles()

        def styler(style):
            return styles[style] if self.options.get("colorful", False) else ""

        line = Text.assemble(
            Text("error", styler("error-label")),
            ": ",
            Text(str(self.message), styler("error-message")),
        )
        if usage := self.options.get("usage"):
            return Group(usage if isinstance(usage, Text) else Text(str(usage)), line)
        return line


class UnknownFlagError(ParseError):
    @property
    def input(self):
        return self.options.get("input")


class MissingValueError(ParseError):
    @property
    def input(self):
        return self.options.get("input")


class ConversionError(ParseError):
    """
    A literal could not be converted to the field's semantic type.

    Carries the flag or positional name (input), the offending literal and the
    target type's name (typename).
    """

    @property
    def input(self):
        return self.options.get("input")

    @property
    def literal(self):
        return self.options.get("literal")

    @property
    def typename(self):
        return self.options.get("typename")


class MissingRequiredError(ParseError):
    @property
    def input(self):
        return self.options.get("input")


class AmbiguousSubcommandError(ParseError):
    @property
    def input(self):
        return self.options.get("input")


class ParseExit(ParseFault):
    """
    Not an error: the user asked for output that ends the run (help, version).

    The rendered text is passed in the "text" option.
    """
    status = 0

    def __rich__(self):
        text = self.options.get("text", "")
        return text if isinstance(text, Text) else Text(str(text))


class HelpRequested(ParseExit): ...
class VersionRequested(ParseExit): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseFault).
    - options are merged into a copy of the fault via copy.replace before triggering.
    - with shell=False the enriched copy is raised; with shell=True it is printed
      on options["console"] and options["exit"] is called with the fault status.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ShapeError",
    "ParseFault",
    "ParseError",
    "UnknownFlagError",
    "MissingValueError",
    "ConversionError",
    "MissingRequiredError",
    "AmbiguousSubcommandError",
    "ParseExit",
    "HelpRequested",
    "VersionRequested",
    "trigger",
)

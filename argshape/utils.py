"""
Argshape utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the declaration, descriptor, matching and
  rendering layers so they agree on naming and "not provided" semantics.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with
    copies for containers to discourage accidental mutation of public state.

- kebab(name) / envize(name)
  • Case conversions from a Python attribute name to a long flag name
    ("dry_run" → "dry-run") and to an environment variable name ("dry_run" → "DRY_RUN").

Stability and contract
- Names in __all__ are re-exported for advanced users; the rest is internal.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> kebab("DataSet_Name")
    'data-set-name'
    >>> envize("data-set")
    'DATA_SET'
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object, or default when object is the Unset sentinel.

    Only Unset is replaced: None, 0, "" and empty containers are real values
    and pass through untouched.

    Examples
    - coalesce(3, 0)           -> 3
    - coalesce(Unset, ".")     -> "."
    - coalesce(None, ".")      -> None
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    Give a generated callable a readable __name__/__qualname__.

    - rename(function, "name") renames function and returns it.
    - @rename("name") does the same as a decorator.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return lambda function: rename(function, name)

    if len(parameters) != 2:
        raise TypeError(f"rename() takes 1 or 2 arguments but {len(parameters)} were given")

    function, name = parameters
    if not builtins.callable(function):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"rename() cannot rename {function!r}") from None
    return function


def _snapshot(value):
    """
    Copy a container so the caller gets a value it cannot use to mutate ours.
    """
    match value:
        case str():
            return value
        case Sequence():
            return tuple(value)
        case Mapping():
            return dict(value)
        case Set():
            return frozenset(value)
    return value


def mirror(name, /):
    """
    Read-only property returning a snapshot of the private attribute "_<name>".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _snapshot(getattr(self, f"_{name}"))

    return property(getter)


@functools.cache
def kebab(name, /):
    """
    Convert a Python attribute name into a long flag name.

    Underscores become hyphens, camel-case humps are split and everything is
    lowercased; leading/trailing separators are dropped.

    Examples
    - kebab("dry_run")     -> "dry-run"
    - kebab("setUpstream") -> "set-upstream"
    - kebab("IDs")         -> "ids"
    """
    if not isinstance(name, str):
        raise TypeError("kebab() argument must be a string")
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name)
    return re.sub(r"[^0-9A-Za-z]+", "-", name).strip("-").lower()


@functools.cache
def envize(name, /, prefix=""):
    """
    Convert a field or flag name into an environment variable name.

    Runs of non-alphanumeric characters collapse to a single underscore and the
    result is upper-cased; the optional prefix is prepended verbatim.

    Examples
    - envize("dry_run")           -> "DRY_RUN"
    - envize("dry-run", "TOOL_")  -> "TOOL_DRY_RUN"
    """
    if not isinstance(name, str):
        raise TypeError("envize() argument must be a string")
    return prefix + re.sub(r"[^a-zA-Z0-9]+", "_", kebab(name)).strip("_").upper()


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "kebab",
    "envize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)

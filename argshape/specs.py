r"""
Argshape field declarations.

Overview
- Specs
  • Positional: value identified by its position in the token stream.
  • Option: named field (--long / -s); booleans are presence flags, lists and
    dicts collect several values.
  • Subcommand: named branch whose value is a nested configuration shape.

- Field helpers
  • positional(...), option(...), subcommand(...): build the spec and return a
    dataclasses.field carrying it in its metadata under the SPEC key, so a
    configuration shape stays a plain dataclass.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- Shared
  • help: Unset | str (short help), non-empty when provided.
  • hidden: bool (suppresses from usage and help; still parsed).
- Positional/Option
  • metavar: Unset | str (value label in usage/help).
  • env: Unset | True | str (environment fallback; True derives the name).
  • required: bool.
- Option only
  • names: at most one long ("--name") and one short ("-n") alias.
  • separate: bool (repeated occurrences accumulate one value each).
- Subcommand only
  • names: one or more bare words; the first is canonical, the rest are aliases.

Validation highlights
- Long names must match r"--[^\W\d_](-?[^\W_]+)*"; short aliases are a single letter.
- Environment variable names must be shell identifiers.
- help/metavar strings are trimmed; empty strings are rejected.

Quick example:
    >>> @dataclass
    ... class Args:
    ...     input: str = positional(help="file to read")
    ...     verbose: bool = option("-v", help="verbosity level")
    ...     optimize: int = option("-O", default=0, env="OPTIMIZE")
"""
import dataclasses
import functools
import operator
import re

from rich.text import Text

from .utils import *


class _SpecKey:
    """
    Sentinel used as the dataclass field metadata key holding a spec.
    """
    __slots__ = ()

    def __repr__(self):
        return "SPEC"


SPEC = _SpecKey()


class ArgumentType(type):
    """
    Metaclass for declaration specs.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Seal concrete specs (sealed=True) against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - __displayable__ (if set) narrows which properties are shown by
      __rich_repr__; otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(names=('--verbose', '-v'), help='verbosity level', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by every spec.

    - help: optional short description. Unset becomes None; a provided
      string must be non-empty after trimming (rich Text is accepted as-is).
    - hidden: coerced to bool.
    """
    if not isinstance(help := metadata["help"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)
    metadata["hidden"] = bool(metadata["hidden"])


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate metadata for value-bearing specs (Positional, Option).

    - metavar: Unset or a non-empty string after trimming.
    - env: Unset, True (derive the variable name from the field name) or a
      shell identifier naming the variable.
    - required: coerced to bool.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    env = metadata["env"]
    if env is False:
        env = Unset
    if not isinstance(env, str | Unset) and env is not True:
        raise TypeError(f"{cls.__typename__} 'env' must be a string or True")
    if isinstance(env, str) and not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", env := env.strip()):
        raise ValueError(f"{cls.__typename__} 'env' must be a valid environment variable name")
    metadata["env"] = coalesce(env)

    metadata["required"] = bool(metadata["required"])


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate the aliases of an Option.

    - at most one long name matching r"--[^\W\d_](-?[^\W_]+)*"
      (unicode letters allowed, no underscores, no leading digit);
    - at most one short alias made of a dash and a single letter;
    - "--help" and "-h" are reserved for the implicit help flag.

    The names are split into metadata["long"] (without dashes, or None) and
    metadata["short"] (single letter, or None).
    """
    long = short = None
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            if long is not None:
                raise ValueError(f"{cls.__typename__} cannot have more than one long name")
            long = name[2:]
        elif re.fullmatch(r"-[^\W\d_]", name):
            if short is not None:
                raise ValueError(f"{cls.__typename__} cannot have more than one short alias")
            short = name[1:]
        else:
            raise ValueError(f"{cls.__typename__} names must look like '--long-name' or '-s' (got {name!r})")

    if long == "help" or short == "h":
        raise ValueError(f"{cls.__typename__} names '--help' and '-h' are reserved")

    metadata["long"] = long
    metadata["short"] = short
    metadata["separate"] = bool(metadata["separate"])


class Positional(metaclass=ArgumentType, sealed=True):
    """
    Positional field specification.

    Positional fields are filled in declaration order by bare tokens. A
    positional annotated as list[T] is multi-valued: it must be the last
    positional of its level and takes every remaining positional token.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata values.
    """

    __introspectable__ = (
        "metavar",
        "help",
        "env",
        "required",
        "hidden",
    )

    def __new__(
            cls,
            metavar=Unset,
            /,
            help=Unset,
            env=Unset,
            required=False,
            *,
            hidden=False,
    ):
        """
        Construct a Positional spec with the provided metadata.

        Parameters
        - metavar: Unset | str
          Display name in usage and help; defaults to the upper-cased field name.
        - help: Unset | str
          Short description for help. If Unset, becomes None.
        - env: Unset | True | str
          Environment variable consulted when no token fills the field.
        - required: bool
          Only meaningful for multi-valued positionals (at least one value);
          single positionals are always required.
        - hidden: bool
          Suppress from usage and help.
        """
        metadata = {
            "metavar": metavar,
            "help": help,
            "env": env,
            "required": required,
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class Option(metaclass=ArgumentType, sealed=True):
    """
    Named field specification.

    The field's annotation decides how the option consumes tokens:
    - bool: presence flag (--name, or --name=false to switch it off);
    - list[T] / dict[K, V]: multi-valued; by default one occurrence takes every
      following value token, with separate=True each occurrence takes exactly
      one value and occurrences accumulate;
    - anything else: exactly one value (--name value, --name=value, -n value).

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata values.
    """

    __introspectable__ = (
        "long",
        "short",
        "metavar",
        "help",
        "env",
        "required",
        "separate",
        "hidden",
    )

    def __new__(
            cls,
            *names,
            help=Unset,
            metavar=Unset,
            env=Unset,
            required=False,
            separate=False,
            hidden=False,
    ):
        """
        Construct an Option spec with the provided metadata.

        Parameters
        - names: zero to two str
          "--long-name" overrides the long name derived from the field name;
          "-s" adds a short alias.
        - help, metavar, env, required, hidden: see Positional.
        - separate: bool
          For multi-valued options, accumulate one value per occurrence.
        """
        metadata = {
            "names": names,
            "help": help,
            "metavar": metavar,
            "env": env,
            "required": required,
            "separate": separate,
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        del metadata["names"]

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class Subcommand(metaclass=ArgumentType, sealed=True):
    """
    Subcommand field specification.

    The field must be annotated as `SomeDataclass | None` with a None default.
    Selecting the subcommand on the command line (by name or alias) fills the
    field with an instance of SomeDataclass bound from the remaining tokens.
    """

    __introspectable__ = (
        "names",
        "help",
        "hidden",
    )

    def __new__(cls, *names, help=Unset, hidden=False):
        """
        Construct a Subcommand spec.

        Parameters
        - names: zero or more bare words; the first is the canonical name
          (defaults to the kebab-cased field name), the others are aliases.
        - help: Unset | str
        - hidden: bool
        """
        metadata = {
            "help": help,
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)

        sanitized = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif not re.fullmatch(r"[^\W_][\w.-]*", name := name.strip()):
                raise ValueError(f"{cls.__typename__} names must be words not starting with a dash (got {name!r})")
            elif name in sanitized:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            sanitized.append(name)
        metadata["names"] = tuple(sanitized)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


def positional(metavar=Unset, /, *, default=dataclasses.MISSING, default_factory=dataclasses.MISSING, help=Unset,
               env=Unset, required=False, hidden=False, **options):
    """
    Declare a positional dataclass field.

    Usage
        input: str = positional(help="file to read")
        output: list[str] = positional(default_factory=list)

    A list positional collects into an empty list when parsing, but the dataclass
    field only gets a default from default_factory (see option()).

    Remaining keyword options (init, repr, compare, kw_only, ...) are forwarded
    to dataclasses.field.
    """
    spec = Positional(metavar, help=help, env=env, required=required, hidden=hidden)
    return dataclasses.field(default=default, default_factory=default_factory, metadata={SPEC: spec}, **options)


def option(*names, default=dataclasses.MISSING, default_factory=dataclasses.MISSING, help=Unset, metavar=Unset,
           env=Unset, required=False, separate=False, hidden=False, **options):
    """
    Declare a named dataclass field.

    Usage
        verbose: bool = option("-v", help="verbosity level")
        commands: list[str] = option("-c", separate=True, default_factory=list)

    bool fields default to False and list/dict fields to an empty container when
    parsing, but the annotation is unknown here, so the dataclass field itself
    has no default. Declared after a defaulted field, such a field needs
    default=False or default_factory=list (or kw_only=True) to satisfy the
    dataclass field ordering.

    Remaining keyword options are forwarded to dataclasses.field.
    """
    spec = Option(*names, help=help, metavar=metavar, env=env, required=required, separate=separate, hidden=hidden)
    return dataclasses.field(default=default, default_factory=default_factory, metadata={SPEC: spec}, **options)


def subcommand(*names, help=Unset, hidden=False, **options):
    """
    Declare a subcommand dataclass field (annotated `SomeDataclass | None`).

    Usage
        commit: CommitCmd | None = subcommand(help="record changes")
        checkout: CheckoutCmd | None = subcommand("checkout", "co")

    Remaining keyword options are forwarded to dataclasses.field.
    """
    spec = Subcommand(*names, help=help, hidden=hidden)
    return dataclasses.field(default=None, metadata={SPEC: spec}, **options)


__all__ = (
    # Classes (specifications)
    "Positional",
    "Option",
    "Subcommand",

    # Field helpers
    "positional",
    "option",
    "subcommand",

    # Metadata key
    "SPEC",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType

"""
Field descriptor builder.

describe(shape) inspects a dataclass once and returns an immutable Level: the
ordered FieldDescriptors of that configuration level plus, for subcommand
fields, the nested Level of each subcommand. Levels are cached per shape and
never mutated after construction, so the matcher, the precedence resolver and
the usage formatter can share them freely.

Shape rules
- bool fields are presence flags (implicit default False).
- list[T] and dict[K, V] fields are multi-valued (implicit empty default).
- `X | None` fields declared with subcommand() are subcommands.
- undeclared dataclass-typed fields are embedded: their fields join this level
  with a longer path and unprefixed names.
- positional() turns a field into a positional; a positional list must be the
  last positional and there may be only one.
- a scalar field without default is required; required=True together with a
  default is a ShapeError.
"""
import dataclasses
import enum
import functools
import typing
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .converters import unwrap_optional
from .faults import ShapeError
from .specs import SPEC, Option, Positional, Subcommand
from .utils import Unset, envize, kebab

RESERVED_LONG = "help"
RESERVED_SHORT = "h"


class FieldKind(enum.Enum):
    SCALAR = "scalar"
    BOOLEAN = "boolean"
    MULTI = "multi"
    POSITIONAL = "positional"
    POSITIONAL_MULTI = "positional-multi"
    SUBCOMMAND = "subcommand"


@dataclass(frozen=True, eq=False)
class FieldDescriptor:
    """
    Static metadata describing one configurable field or subcommand branch.

    path is relative to the level's shape; it has more than one element for
    fields of embedded dataclasses. For multi-valued kinds, container is list or
    dict and type is the element (value) type; key is the dict key type.

    implicit marks a field required only because it declares no default; an
    existing destination instance already holds a value for it.
    """
    path: tuple[str, ...]
    kind: FieldKind
    type: Any
    container: type | None = None
    key: Any = None
    long: str | None = None
    short: str | None = None
    required: bool = False
    implicit: bool = False
    default: Any = Unset
    factory: Any = Unset
    env: str | None = None
    derived: bool = False
    help: str | None = None
    metavar: str | None = None
    separate: bool = False
    hidden: bool = False
    names: tuple[str, ...] = ()
    level: "Level | None" = None

    @property
    def name(self):
        return self.path[-1]

    @property
    def positional(self):
        return self.kind in (FieldKind.POSITIONAL, FieldKind.POSITIONAL_MULTI)

    @property
    def multi(self):
        return self.kind in (FieldKind.MULTI, FieldKind.POSITIONAL_MULTI)

    @property
    def flag(self):
        return self.kind in (FieldKind.SCALAR, FieldKind.BOOLEAN, FieldKind.MULTI)

    @property
    def display(self):
        """
        How the field is named in messages: --long, METAVAR or the subcommand name.
        """
        if self.kind is FieldKind.SUBCOMMAND:
            return self.names[0]
        if self.positional:
            return self.metavar
        return "--" + self.long

    def has_default(self):
        return self.default is not Unset or self.factory is not Unset

    def initial(self):
        """
        Fresh default value for this field (Unset when the field has none).
        """
        if self.factory is not Unset:
            return self.factory()
        return self.default

    def envvar(self, prefix=""):
        """
        Environment variable consulted for this field, with the parser prefix
        applied to derived names.
        """
        if self.env is None:
            return None
        return prefix + self.env if self.derived else self.env


@dataclass(frozen=True, eq=False)
class Level:
    """
    Immutable descriptor set of one configuration level.

    - fields: every descriptor, in declaration order (subcommands included).
    - positionals / flags / commands: the same descriptors split by role.
    - options: "--long" and "-s" spellings mapped to their descriptor.
    - subcommands: subcommand names and aliases mapped to their descriptor.
    - embedded: paths of embedded dataclasses with their types (outermost first).
    """
    shape: type
    fields: tuple[FieldDescriptor, ...]
    positionals: tuple[FieldDescriptor, ...]
    flags: tuple[FieldDescriptor, ...]
    commands: tuple[FieldDescriptor, ...]
    options: MappingProxyType
    subcommands: MappingProxyType
    embedded: tuple[tuple[tuple[str, ...], type], ...]

    def descend(self, names, /):
        """
        Follow a chain of subcommand names down from this level.

        Returns the list of levels from this one to the deepest, one per name plus this level.
        """
        levels = [level := self]
        for name in names:
            level = level.subcommands[name].level
            levels.append(level)
        return levels

    def lookup(self, spelling, /):
        return self.options.get(spelling)


def _classify(tp):
    """
    Return (kind, type, container, key) for an annotation of a value field.
    """
    tp = unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if tp is list or origin is list:
        args = typing.get_args(tp)
        return FieldKind.MULTI, args[0] if args else str, list, None
    if tp is dict or origin is dict:
        args = typing.get_args(tp)
        key, value = args if len(args) == 2 else (str, str)
        return FieldKind.MULTI, value, dict, key
    if tp is bool:
        return FieldKind.BOOLEAN, bool, None, None
    return FieldKind.SCALAR, tp, None, None


def _subcommand_shape(owner, field, tp):
    inner = unwrap_optional(tp)
    if inner is tp or not (isinstance(inner, type) and dataclasses.is_dataclass(inner)):
        raise ShapeError(f"{owner.__name__}.{field.name}: subcommand fields must be annotated 'SomeDataclass | None'")
    if field.default is not None:
        raise ShapeError(f"{owner.__name__}.{field.name}: subcommand fields must default to None")
    return inner


def _collect(owner, prefix, descriptors, embedded):
    """
    Append the descriptors of owner's fields (recursing into embedded dataclasses).
    """
    try:
        hints = typing.get_type_hints(owner)
    except (NameError, TypeError) as error:
        raise ShapeError(f"{owner.__name__}: cannot resolve field annotations ({error})") from None

    for field in dataclasses.fields(owner):
        if not field.init:
            continue

        spec = field.metadata.get(SPEC)
        tp = hints.get(field.name, field.type)
        path = prefix + (field.name,)
        where = f"{owner.__name__}.{field.name}"

        if isinstance(spec, Subcommand):
            if prefix:
                raise ShapeError(f"{where}: subcommand fields cannot live in embedded dataclasses")
            shape = _subcommand_shape(owner, field, tp)
            descriptors.append(FieldDescriptor(
                path=path,
                kind=FieldKind.SUBCOMMAND,
                type=shape,
                default=None,
                help=spec.help,
                hidden=spec.hidden,
                names=spec.names or (kebab(field.name),),
                level=describe(shape),
            ))
            continue

        if spec is None and isinstance(tp, type) and dataclasses.is_dataclass(tp):
            embedded.append((path, tp))
            _collect(tp, path, descriptors, embedded)
            continue

        spec = spec if spec is not None else Option()
        kind, element, container, key = _classify(tp)

        default = field.default if field.default is not dataclasses.MISSING else Unset
        factory = field.default_factory if field.default_factory is not dataclasses.MISSING else Unset
        declared = default is not Unset or factory is not Unset

        if spec.required and declared:
            raise ShapeError(f"{where}: a required field cannot have a default")

        if isinstance(spec, Positional):
            if container is dict:
                raise ShapeError(f"{where}: positional fields cannot be dicts")
            kind = FieldKind.POSITIONAL_MULTI if kind is FieldKind.MULTI else FieldKind.POSITIONAL
            separate = False
            long = short = None
        else:
            if spec.separate and kind is not FieldKind.MULTI:
                raise ShapeError(f"{where}: only list or dict options can be 'separate'")
            separate = spec.separate
            long = spec.long or kebab(field.name)
            short = spec.short

        required = spec.required or (not declared and kind in (FieldKind.SCALAR, FieldKind.POSITIONAL))

        if not declared:
            if kind is FieldKind.BOOLEAN:
                default = False
            elif container is not None:
                factory = container

        if spec.env is True:
            env, derived = envize(field.name), True
        else:
            env, derived = spec.env, False

        descriptors.append(FieldDescriptor(
            path=path,
            kind=kind,
            type=element,
            container=container,
            key=key,
            long=long,
            short=short,
            required=required,
            implicit=required and not spec.required,
            default=default,
            factory=factory,
            env=env,
            derived=derived,
            help=spec.help,
            metavar=spec.metavar or field.name.upper(),
            separate=separate,
            hidden=spec.hidden,
        ))


def describe(shape, /):
    """
    Build (once per shape) the Level describing a dataclass configuration shape.

    raises
    - ShapeError: when the shape is not a dataclass type, names collide
      (including the reserved --help/-h), positionals are misordered, a required
      field has a default, or a subcommand field is malformed.
    """
    if not (isinstance(shape, type) and dataclasses.is_dataclass(shape)):
        raise ShapeError(f"configuration shape must be a dataclass type, not {shape!r}")
    return _describe(shape)


@functools.cache
def _describe(shape):
    descriptors = []
    embedded = []
    _collect(shape, (), descriptors, embedded)

    options = {}
    subcommands = {}
    positionals = []
    for descriptor in descriptors:
        if descriptor.kind is FieldKind.SUBCOMMAND:
            for name in descriptor.names:
                if name in subcommands:
                    raise ShapeError(f"{shape.__name__}: subcommand name {name!r} is declared twice")
                subcommands[name] = descriptor
        elif descriptor.positional:
            if positionals and positionals[-1].kind is FieldKind.POSITIONAL_MULTI:
                if descriptor.kind is FieldKind.POSITIONAL_MULTI:
                    raise ShapeError(f"{shape.__name__}: only one multi-value positional is allowed")
                raise ShapeError(
                    f"{shape.__name__}: multi-value positional {positionals[-1].display} must be the last positional"
                )
            positionals.append(descriptor)
        else:
            if descriptor.long == RESERVED_LONG or descriptor.short == RESERVED_SHORT:
                raise ShapeError(f"{shape.__name__}.{'.'.join(descriptor.path)}: '--help' and '-h' are reserved")
            for spelling in filter(None, ("--" + descriptor.long, descriptor.short and "-" + descriptor.short)):
                if spelling in options:
                    raise ShapeError(
                        f"{shape.__name__}: {spelling} is declared by both "
                        f"{'.'.join(options[spelling].path)} and {'.'.join(descriptor.path)}"
                    )
                options[spelling] = descriptor

    return Level(
        shape=shape,
        fields=tuple(descriptors),
        positionals=tuple(positionals),
        flags=tuple(descriptor for descriptor in descriptors if descriptor.flag),
        commands=tuple(descriptor for descriptor in descriptors if descriptor.kind is FieldKind.SUBCOMMAND),
        options=MappingProxyType(options),
        subcommands=MappingProxyType(subcommands),
        embedded=tuple(embedded),
    )


__all__ = (
    "FieldKind",
    "FieldDescriptor",
    "Level",
    "describe",
)

"""
Precedence resolution and materialization.

resolve() runs after the matcher, over every level of the resolved chain:
command-line values always win; a field left unbound takes its environment
variable when one is declared and set; otherwise its default stays. Required
fields still unbound at that point fail with MissingRequiredError.

materialize() then writes the bindings into the destination:
- instance mode: the given dataclass instance is mutated in place; its current
  attribute values act as defaults for every unbound field, and subcommand
  fields other than the selected one are reset to None;
- class mode: a fresh instance of the given dataclass is built from the bound
  values plus declared defaults.
"""
import csv
import dataclasses
import logging

from .faults import *
from .fields import FieldKind
from .matcher import collect, convert_field
from .utils import Unset

logger = logging.getLogger(__name__)


def _split(literal):
    """
    Split a multi-value environment variable (comma-separated, csv quoting).
    """
    if not literal.strip():
        return []
    return next(csv.reader([literal], skipinitialspace=True))


def _from_environment(frame, environ, prefix):
    for descriptor in frame.level.fields:
        if descriptor.kind is FieldKind.SUBCOMMAND or descriptor.path in frame.filled:
            continue
        if (name := descriptor.envvar(prefix)) is None or name not in environ:
            continue

        literal = environ[name]
        subject = f"environment variable {name}"
        if descriptor.multi:
            value = collect(descriptor, (convert_field(descriptor, item, subject) for item in _split(literal)))
        else:
            value = convert_field(descriptor, literal, subject)
        frame.bind(descriptor, value)
        logger.debug("bound %s from environment variable %s", ".".join(descriptor.path), name)


def _check_required(frame, prefix, existing):
    for descriptor in frame.level.fields:
        if not descriptor.required or descriptor.path in frame.filled:
            continue
        if existing and descriptor.implicit:
            continue
        message = f"{descriptor.display} is required"
        if (name := descriptor.envvar(prefix)) is not None:
            message += f" (or environment variable {name})"
        raise MissingRequiredError(message, code=FaultCode.MISSING_REQUIRED, input=descriptor.display)


def _existing(state, dest):
    """
    For each frame, whether an existing dataclass instance receives its bindings.

    In instance mode the destination backs the first frame; a selected subcommand
    is backed when the instance above it already holds one of its type.
    """
    owner = None if dest is Unset or isinstance(dest, type) else dest
    flags = [owner is not None]
    for frame in state.frames[1:]:
        if owner is not None:
            for name in frame.selector.path[:-1]:
                owner = getattr(owner, name)
            owner = getattr(owner, frame.selector.name, None)
            if not isinstance(owner, frame.selector.type):
                owner = None
        flags.append(owner is not None)
    return flags


def resolve(state, /, environ, *, prefix="", ignore_env=False, dest=Unset):
    """
    Apply the environment pass and the required check to a matched ParseState.

    dest is the destination materialize() will receive. On levels backed by an
    existing instance, fields required only for lack of a default are not
    checked: the instance's current value stands in for the default.

    raises
    - ConversionError: an environment value does not convert.
    - MissingRequiredError: a required field of the resolved chain is unbound.
    Faults carry the resolved chain in their "chain" option.
    """
    try:
        if not ignore_env:
            for frame in state.frames:
                _from_environment(frame, environ, prefix)
        for frame, existing in zip(state.frames, _existing(state, dest)):
            _check_required(frame, prefix, existing)
    except ParseFault as fault:
        raise fault.__replace__(chain=state.chain) from None
    return state


def _assign(tree, path, value):
    for name in path[:-1]:
        tree = tree[name]
    tree[path[-1]] = value


def _build(frames, index):
    """
    Class mode: construct the shape of frames[index] (and its selected subcommands).
    """
    frame = frames[index]
    level = frame.level
    selected = frames[index + 1].selector if index + 1 < len(frames) else None

    tree = {}
    for path, _ in level.embedded:
        _assign(tree, path, {})

    for descriptor in level.fields:
        if descriptor.kind is FieldKind.SUBCOMMAND:
            value = _build(frames, index + 1) if descriptor is selected else None
        elif descriptor.path in frame.filled:
            value = frame.values[descriptor.path]
        elif (value := descriptor.initial()) is Unset:
            continue
        _assign(tree, descriptor.path, value)

    for path, shape in sorted(level.embedded, key=lambda x: len(x[0]), reverse=True):
        parent = tree
        for name in path[:-1]:
            parent = parent[name]
        parent[path[-1]] = shape(**parent[path[-1]])

    return level.shape(**tree)


def _update(frames, index, target):
    """
    Instance mode: write the bindings of frames[index] into target.
    """
    frame = frames[index]
    selected = frames[index + 1].selector if index + 1 < len(frames) else None

    for descriptor in frame.level.fields:
        owner = target
        for name in descriptor.path[:-1]:
            owner = getattr(owner, name)

        if descriptor.kind is FieldKind.SUBCOMMAND:
            if descriptor is not selected:
                setattr(owner, descriptor.name, None)
                continue
            current = getattr(owner, descriptor.name, None)
            if isinstance(current, descriptor.type):
                _update(frames, index + 1, current)
            else:
                setattr(owner, descriptor.name, _build(frames, index + 1))
        elif descriptor.path in frame.filled:
            setattr(owner, descriptor.name, frame.values[descriptor.path])
    return target


def materialize(state, /, dest):
    """
    Write a resolved ParseState into dest and return the bound configuration.

    - dest is a dataclass type: class mode, a new instance is returned.
    - dest is a dataclass instance: instance mode, dest itself is returned.
    """
    if isinstance(dest, type):
        return _build(state.frames, 0)
    if dataclasses.is_dataclass(dest):
        return _update(state.frames, 0, dest)
    raise TypeError(f"materialize() destination must be a dataclass or a dataclass instance, not {dest!r}")


__all__ = (
    "resolve",
    "materialize",
)

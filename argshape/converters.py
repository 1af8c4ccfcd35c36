"""
Literal-to-value conversion for field types.

Supported scalar types
- str, int, float, complex, bool, decimal.Decimal, pathlib paths
- datetime.date / datetime.time / datetime.datetime (ISO 8601)
- enum.Enum subclasses (by member name, case-insensitively as a fallback,
  then by member value)
- typing.Literal[...] (one of the listed values)
- T | None (converted as T)
- any other class constructible from a single string

Containers (handled by the caller, one element at a time)
- list[T]: every value converts through T
- dict[K, V]: every value is KEY=VALUE, both sides convert

Every failure raises ValueError with a short, user-facing reason; callers wrap
it into a ConversionError naming the flag or positional.
"""
import datetime
import decimal
import enum
import types
import typing

TRUTHY = frozenset(("1", "t", "true", "y", "yes", "on"))
FALSY = frozenset(("0", "f", "false", "n", "no", "off"))


def unwrap_optional(tp, /):
    """
    Return T for `T | None` / `Optional[T]`, otherwise tp unchanged.
    """
    if typing.get_origin(tp) in (typing.Union, types.UnionType):
        members = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return tp


def typename(tp, /):
    """
    Human-friendly name of a field type used in messages.
    """
    tp = unwrap_optional(tp)
    if typing.get_origin(tp) is typing.Literal:
        return "{%s}" % ",".join(map(str, typing.get_args(tp)))
    if (origin := typing.get_origin(tp)) is not None:
        return getattr(origin, "__name__", str(origin))
    return getattr(tp, "__name__", str(tp))


def to_bool(literal, /):
    if (folded := literal.strip().lower()) in TRUTHY:
        return True
    if folded in FALSY:
        return False
    raise ValueError(f"cannot convert {literal!r} to bool")


def _to_enum(tp, literal):
    try:
        return tp[literal]
    except KeyError:
        pass
    for member in tp:
        if member.name.lower() == literal.lower() or str(member.value) == literal:
            return member
    raise ValueError("invalid choice %r (choose from %s)" % (literal, ", ".join(member.name for member in tp)))


def _to_literal(tp, literal):
    for choice in typing.get_args(tp):
        if str(choice) == literal:
            return choice
    raise ValueError("invalid choice %r (choose from %s)" % (literal, ", ".join(map(repr, typing.get_args(tp)))))


def convert(tp, literal, /):
    """
    Convert a single literal into an instance of tp.

    raises
    - ValueError with a user-facing reason when the literal does not fit.
    """
    tp = unwrap_optional(tp)

    if tp is str or tp is typing.Any:
        return literal
    if tp is bool:
        return to_bool(literal)
    if typing.get_origin(tp) is typing.Literal:
        return _to_literal(tp, literal)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return _to_enum(tp, literal)
    if tp in (datetime.date, datetime.time, datetime.datetime):
        try:
            return tp.fromisoformat(literal)
        except ValueError:
            raise ValueError(f"cannot convert {literal!r} to {tp.__name__} (expected ISO 8601)") from None
    if not callable(tp):
        raise TypeError(f"unsupported field type {tp!r}")

    try:
        return tp(literal)
    except (ValueError, TypeError, ArithmeticError, decimal.InvalidOperation):
        raise ValueError(f"cannot convert {literal!r} to {typename(tp)}") from None


def convert_pair(key, value, literal, /):
    """
    Convert a KEY=VALUE literal for a dict[K, V] field into a (key, value) pair.
    """
    head, sep, tail = literal.partition("=")
    if not sep:
        raise ValueError(f"cannot convert {literal!r} to a key=value pair")
    return convert(key, head), convert(value, tail)


__all__ = (
    "unwrap_optional",
    "typename",
    "to_bool",
    "convert",
    "convert_pair",
)

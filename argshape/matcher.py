"""
Token matching and binding.

The Matcher walks the classified tokens once, left to right, and binds each of
them to a descriptor of the resolved level chain:

- flags bind to the deepest level of the chain that declares them (flags of a
  parent stay valid once a subcommand is selected);
- bare tokens fill the positionals of the current level in declaration order,
  then the trailing multi-value positional, and otherwise select a subcommand;
- --help/-h (and --version when enabled) short-circuit with an exit signal.

Everything bound here comes from the command line; the precedence resolver
fills the gaps (environment, defaults) and checks required fields afterwards.
"""
import enum
import logging
from dataclasses import dataclass, field

from .converters import convert, convert_pair, typename
from .faults import *
from .fields import FieldKind
from .tokens import LongFlag, ShortFlag, Positional, Terminator, TokenStream

logger = logging.getLogger(__name__)


class MatchState(enum.Enum):
    AT_TOP_LEVEL = "at-top-level"
    IN_SUBCOMMAND = "in-subcommand"
    DONE = "done"
    FAILED = "failed"


@dataclass(eq=False)
class Frame:
    """
    Bindings of one resolved level.

    - values: field path -> bound value
    - filled: paths bound by a token or an environment variable
    - cursor: index of the next positional waiting for a token
    - selector: the subcommand descriptor (in the parent level) that selected this level
    """
    level: object
    selector: object = None
    values: dict = field(default_factory=dict)
    filled: set = field(default_factory=set)
    cursor: int = 0

    @property
    def name(self):
        return self.selector.names[0] if self.selector is not None else None

    def bind(self, descriptor, value):
        self.values[descriptor.path] = value
        self.filled.add(descriptor.path)


@dataclass(eq=False)
class ParseState:
    """
    Transient state of one parse: the chain of resolved levels and the token cursor.
    """
    frames: list
    state: MatchState = MatchState.AT_TOP_LEVEL
    position: int = 0

    @property
    def chain(self):
        return tuple(frame.name for frame in self.frames[1:])

    @property
    def current(self):
        return self.frames[-1]


def convert_field(descriptor, literal, subject=None):
    """
    Convert one literal for a descriptor (one element for multi-value fields).

    raises
    - ConversionError naming the subject (the descriptor's display name by default).
    """
    subject = subject or descriptor.display
    try:
        if descriptor.container is dict:
            return convert_pair(descriptor.key, descriptor.type, literal)
        return convert(descriptor.type, literal)
    except ValueError as error:
        raise ConversionError(
            f"error processing {subject}: {error}",
            code=FaultCode.CONVERSION,
            input=subject,
            literal=literal,
            typename=typename(descriptor.type),
        ) from None


def collect(descriptor, items):
    """
    Build the container value of a multi-value descriptor from converted items.
    """
    if descriptor.container is dict:
        return dict(items)
    return list(items)


class Matcher:
    """
    Bind a token list against a Level.

    Usage
        state = Matcher(describe(Args)).match(["-v", "input.txt"])

    The matcher is reusable; each match() call works on a fresh ParseState.
    """

    def __init__(self, level, /, *, version=False):
        self.level = level
        self.version = version

    def match(self, argv, /):
        """
        Consume argv and return the resulting ParseState.

        raises
        - UnknownFlagError, MissingValueError, ConversionError, AmbiguousSubcommandError
        - HelpRequested / VersionRequested when the user asked for them
        Every fault carries the resolved subcommand chain in its "chain" option.
        """
        state = ParseState(frames=[Frame(self.level)])
        stream = TokenStream(argv)
        try:
            for token in stream:
                state.position = token.index
                match token:
                    case Terminator():
                        logger.debug("terminator at %d, remaining tokens are positional", token.index)
                    case LongFlag() | ShortFlag():
                        self._flag(state, token, stream)
                    case Positional():
                        self._positional(state, token)
        except ParseFault as fault:
            state.state = MatchState.FAILED
            raise copy_with_chain(fault, state) from None
        state.state = MatchState.DONE
        return state

    def _lookup(self, state, token):
        spelling = str(token)
        for frame in reversed(state.frames):
            if (descriptor := frame.level.lookup(spelling)) is not None:
                return frame, descriptor

        # a flag of a subcommand that is not (or not yet) selected
        for index, frame in enumerate(state.frames):
            selected = state.frames[index + 1].selector if index + 1 < len(state.frames) else None
            for command in frame.level.commands:
                if command is not selected and command.level.lookup(spelling) is not None:
                    raise UnknownFlagError(
                        f"unknown argument {spelling} (declared by subcommand {command.names[0]!r})",
                        code=FaultCode.UNKNOWN_FLAG,
                        input=spelling,
                    )
        raise UnknownFlagError(f"unknown argument {spelling}", code=FaultCode.UNKNOWN_FLAG, input=spelling)

    def _special(self, state, token):
        match token:
            case LongFlag(name="help") | ShortFlag(name="h"):
                logger.debug("help requested for %r", state.chain)
                raise HelpRequested(code=FaultCode.HELP)
            case LongFlag(name="version") if self.version and not any(
                frame.level.lookup("--version") for frame in state.frames
            ):
                raise VersionRequested(code=FaultCode.VERSION)

    def _take(self, token, descriptor, stream):
        """
        Return the value literal of a value-taking flag.
        """
        if token.value is not None:
            return token.value
        if isinstance(token, ShortFlag) and token.bundled:
            raise MissingValueError(
                f"missing value for {token} (only the last flag of a bundle can take a value)",
                code=FaultCode.MISSING_VALUE,
                input=str(token),
            )
        following = stream.peek()
        if isinstance(following, Positional) and not following.escaped:
            return next(stream).text
        raise MissingValueError(f"missing value for {token}", code=FaultCode.MISSING_VALUE, input=str(token))

    def _flag(self, state, token, stream):
        self._special(state, token)
        frame, descriptor = self._lookup(state, token)

        match descriptor.kind:
            case FieldKind.BOOLEAN:
                value = True if token.value is None else convert_field(descriptor, token.value)
                frame.bind(descriptor, value)

            case FieldKind.SCALAR:
                frame.bind(descriptor, convert_field(descriptor, self._take(token, descriptor, stream)))

            case FieldKind.MULTI if descriptor.separate:
                item = convert_field(descriptor, self._take(token, descriptor, stream))
                if descriptor.path in frame.filled:
                    value = frame.values[descriptor.path]
                else:
                    value = descriptor.container()
                if descriptor.container is dict:
                    value[item[0]] = item[1]
                else:
                    value.append(item)
                frame.bind(descriptor, value)

            case FieldKind.MULTI:
                if isinstance(token, ShortFlag) and token.bundled:
                    self._take(token, descriptor, stream)
                literals = [token.value] if token.value is not None else []
                while isinstance(following := stream.peek(), Positional) and not following.escaped:
                    literals.append(next(stream).text)
                frame.bind(descriptor, collect(descriptor, (convert_field(descriptor, x) for x in literals)))

        logger.debug("bound %s to %s", token, ".".join(descriptor.path))

    def _positional(self, state, token):
        frame = state.current
        level = frame.level
        selects = not token.escaped and token.text in level.subcommands

        while frame.cursor < len(level.positionals):
            descriptor = level.positionals[frame.cursor]
            if descriptor.kind is FieldKind.POSITIONAL:
                frame.cursor += 1
                frame.bind(descriptor, convert_field(descriptor, token.text))
                logger.debug("bound %r to positional %s", token.text, descriptor.display)
                return
            if selects:
                break
            value = frame.values[descriptor.path] if descriptor.path in frame.filled else []
            value.append(convert_field(descriptor, token.text))
            frame.bind(descriptor, value)
            return

        if selects:
            selector = level.subcommands[token.text]
            state.frames.append(Frame(selector.level, selector))
            state.state = MatchState.IN_SUBCOMMAND
            logger.debug("selected subcommand %r (chain %r)", selector.names[0], state.chain)
            return

        if level.subcommands:
            raise AmbiguousSubcommandError(
                f"invalid subcommand: {token.text}",
                code=FaultCode.AMBIGUOUS_SUBCOMMAND,
                input=token.text,
            )
        raise AmbiguousSubcommandError(
            f"too many positional arguments at {token.text!r}",
            code=FaultCode.AMBIGUOUS_SUBCOMMAND,
            input=token.text,
        )


def copy_with_chain(fault, state):
    """
    Return fault enriched with the chain and token position of the state.
    """
    return fault.__replace__(chain=state.chain, index=state.position)


__all__ = (
    "MatchState",
    "Frame",
    "ParseState",
    "Matcher",
    "convert_field",
    "collect",
)

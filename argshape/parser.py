"""
Argshape parser facade.

Overview
- Parser(shape, ...): binds a dataclass shape once (describe() runs eagerly, so
  shape errors surface at construction) and parses token lists against it.
  • parse(): library form. Returns the bound configuration or raises the
    enriched ParseFault (ParseError subclasses, HelpRequested, VersionRequested).
  • must_parse(): shell form. Prints help/version on stdout, errors on stderr,
    then hands the exit status to the injected exit callable (sys.exit by
    default). Returns the configuration on success, None if exit returned.
  • usage() / help(): the renderings used by the two forms.
- parse(dest, ...) / must_parse(dest, ...): one-shot helpers building a Parser.

Destination
- a dataclass type: a new instance is returned (class mode);
- a dataclass instance: it is filled in place and returned (instance mode); its
  current attribute values act as defaults.

Token sources
- Unset: sys.argv[1:]
- str: split with shlex.split
- Iterable[str]: used as is

Host hooks (looked up in __main__)
- __prog__: program name used in usage lines.
- __styles__: style overrides for colorful output.
- __codes__: fault code labels (see FaultCode.normalize).
"""
import logging
import os
import shlex
import sys
from collections.abc import Iterable, Mapping

from rich.console import Console

from .faults import *
from .fields import describe
from .matcher import Matcher
from .precedence import materialize, resolve
from .usage import help as render_help, usage as render_usage
from .utils import Unset, coalesce, kebab

logger = logging.getLogger(__name__)


def _tokens(argv):
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argv must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argv must be a string or an iterable of strings")


class Parser:
    """
    Declarative parser bound to one configuration shape.

    Options
    - program: name shown in usage lines (default: __main__.__prog__, then the
      basename of sys.argv[0]).
    - description / epilog: paragraphs around the help body.
    - version: version string; enables --version.
    - env_prefix: prefix for environment variable names derived with env=True.
    - ignore_env: skip the environment pass entirely.
    - colorful: style usage, help and errors.
    - stdout / stderr: rich Consoles receiving shell-form output.
    - exit: callable receiving the exit status in shell form.
    """

    def __init__(
            self,
            shape,
            /,
            *,
            program=Unset,
            description=Unset,
            epilog=Unset,
            version=Unset,
            env_prefix="",
            ignore_env=False,
            colorful=False,
            stdout=Unset,
            stderr=Unset,
            exit=Unset,
    ):
        self._shape = shape if isinstance(shape, type) else type(shape)
        self._level = describe(self._shape)

        if not isinstance(env_prefix, str):
            raise TypeError("Parser() 'env_prefix' must be a string")
        if not isinstance(version, str | Unset):
            raise TypeError("Parser() 'version' must be a string")
        if exit is not Unset and not callable(exit):
            raise TypeError("Parser() 'exit' must be callable")

        self._program = program
        self._description = coalesce(description)
        self._epilog = coalesce(epilog)
        self._version = coalesce(version)
        self._env_prefix = env_prefix
        self._ignore_env = bool(ignore_env)
        self._colorful = bool(colorful)
        self._stdout = Console() if stdout is Unset else stdout
        self._stderr = Console(stderr=True) if stderr is Unset else stderr
        self._exit = coalesce(exit, sys.exit)

    def __repr__(self):
        return f"Parser({self._shape.__qualname__}, program={self.program!r})"

    @property
    def shape(self):
        return self._shape

    @property
    def level(self):
        return self._level

    @property
    def program(self):
        if self._program is not Unset:
            return self._program
        if (program := getattr(__import__("__main__"), "__prog__", None)) is not None:
            return program
        if sys.argv and sys.argv[0]:
            return os.path.basename(sys.argv[0])
        return kebab(self._shape.__name__)

    def usage(self, chain=(), /):
        """
        Synopsis of the level selected by the chain of subcommand names.
        """
        return render_usage(self._level, self.program, chain, colorful=self._colorful)

    def help(self, chain=(), /):
        """
        Full help of the level selected by the chain of subcommand names.
        """
        return render_help(
            self._level,
            self.program,
            chain,
            description=self._description,
            epilog=self._epilog,
            version=self._version,
            prefix=self._env_prefix,
            colorful=self._colorful,
        )

    def _run(self, argv, environ, dest):
        tokens = _tokens(argv)
        environ = coalesce(environ, os.environ)
        if not isinstance(environ, Mapping):
            raise TypeError("parse() environ must be a mapping")

        logger.debug("parsing %r into %s", tokens, self._shape.__qualname__)
        state = Matcher(self._level, version=self._version is not None).match(tokens)
        resolve(state, environ, prefix=self._env_prefix, ignore_env=self._ignore_env, dest=dest)
        return materialize(state, dest)

    def _context(self, fault):
        """
        Rendering options for a fault raised while parsing.
        """
        if isinstance(fault, HelpRequested):
            return {"text": self.help(fault.chain)}
        if isinstance(fault, VersionRequested):
            return {"text": self._version}
        return {"usage": self.usage(fault.chain), "colorful": self._colorful}

    def _destination(self, dest):
        dest = coalesce(dest, self._shape)
        if isinstance(dest, type):
            if dest is not self._shape:
                raise TypeError(f"parse() destination must be {self._shape.__qualname__} or an instance of it")
        elif type(dest) is not self._shape:
            raise TypeError(f"parse() destination must be {self._shape.__qualname__} or an instance of it")
        elif type(dest).__dataclass_params__.frozen:
            raise TypeError("parse() cannot fill a frozen dataclass instance; pass the class instead")
        return dest

    def parse(self, argv=Unset, environ=Unset, /, *, dest=Unset):
        """
        Parse argv (and environ) into dest (library form).

        raises
        - ParseError subclasses with the usage of the resolved level attached.
        - HelpRequested / VersionRequested carrying the text to display.
        """
        dest = self._destination(dest)
        try:
            return self._run(argv, environ, dest)
        except ParseFault as fault:
            trigger(fault, **self._context(fault))

    def must_parse(self, argv=Unset, environ=Unset, /, *, dest=Unset):
        """
        Parse argv (and environ) into dest (shell form).

        Prints help/version on stdout and errors on stderr, then calls the exit
        callable with 0 (help, version) or 1 (errors). Returns None when that
        callable returns.
        """
        dest = self._destination(dest)
        try:
            return self._run(argv, environ, dest)
        except ParseFault as fault:
            logger.debug("surfacing %s (code %s)", type(fault).__name__, fault.code)
            trigger(
                fault,
                shell=True,
                console=self._stdout if isinstance(fault, ParseExit) else self._stderr,
                exit=self._exit,
                **self._context(fault),
            )
        return None


def parse(dest, argv=Unset, environ=Unset, /, **options):
    """
    Parse into a dataclass type or instance with a one-shot Parser (library form).

    Options are forwarded to Parser.
    """
    return Parser(dest, **options).parse(argv, environ, dest=dest)


def must_parse(dest, argv=Unset, environ=Unset, /, **options):
    """
    Parse into a dataclass type or instance with a one-shot Parser (shell form).
    """
    return Parser(dest, **options).must_parse(argv, environ, dest=dest)


__all__ = (
    "Parser",
    "parse",
    "must_parse",
)

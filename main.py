import logging
import os
from dataclasses import dataclass, field

from rich.logging import RichHandler
from rich.pretty import pprint

from argshape import *

__prog__ = "vcs"


@dataclass
class Remote:
    url: str = option(help="remote url", env=True, default="origin")
    timeout: float = option("-t", help="network timeout in seconds", default=30.0)


@dataclass
class Commit:
    message: str = option("-m", help="commit message")
    all: bool = option("-a", help="stage modified files first")
    paths: list[str] = positional("PATH", default_factory=list, help="files to commit")


@dataclass
class Checkout:
    branch: str = positional(help="branch to switch to")
    force: bool = option("-f", help="discard local changes")


@dataclass
class Args:
    verbose: bool = option("-v", help="print debug logs")
    remote: Remote = field(default_factory=Remote)
    commit: Commit | None = subcommand(help="record changes")
    checkout: Checkout | None = subcommand("checkout", "co", help="switch branches")


if __name__ == '__main__':
    logging.basicConfig(
        level=os.environ.get("VCS_LOG", "WARNING"),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    args = must_parse(Args, env_prefix="VCS_", version="vcs 0.0.0", description="a tiny version control front-end")
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    pprint(args)

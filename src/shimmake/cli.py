"""Command-line entry point for shim-make."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence

from . import operations
from .config import ShimConfig, load_config
from .context import Context
from .errors import ShimMakeError, UsageError
from .host import Host
from .host import detect as detect_host
from .runner import CommandRunner, LocalRunner, MultipassRunner

logger = logging.getLogger(__name__)

DESCRIPTION = "Fetch, patch, build and install rhboot/shim for use with OpenCore."

EPILOG = """\
commands:
  setup                 prepare the build environment (idempotent)
  clean                 run 'make clean' in the shim source tree
  make [options...]     build shim; options are passed to make
  install [esp-root]    install into the output root, then copy to an ESP
  mount [path]          mount the VM build directory locally with sshfs

To debug shim (e.g. within OVMF) build with: shim-make make OPTIMIZATIONS="-O0"
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="shim-make",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("-r", dest="output_root", metavar="PATH", help="output root (default: ~/shim_root)")
    parser.add_argument("-s", dest="source_root", metavar="PATH", help="shim source root (default: ~/shim_source)")
    parser.add_argument("-c", "--config", metavar="FILE", help="HCL file with configuration overrides")
    parser.add_argument("--echo", action="store_true", help="log every external command")
    parser.add_argument("-n", "--dry-run", action="store_true", help="report changes without making them")
    parser.add_argument("command", nargs="?", metavar="COMMAND", help="setup, clean, make, install or mount")
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def make_runners(host: Host, config: ShimConfig, *, echo: bool = False) -> tuple[CommandRunner, CommandRunner]:
    """Return (build runner, host runner) for this host."""
    host_runner = LocalRunner(echo=echo)
    if host.needs_vm:
        return MultipassRunner(config.instance, echo=echo), host_runner
    return host_runner, host_runner


def _no_args(command: str, args: Sequence[str]) -> None:
    if args:
        raise UsageError(f"{command} takes no arguments")


def _optional_arg(command: str, args: Sequence[str]) -> str | None:
    if len(args) > 1:
        raise UsageError(f"{command} takes at most one argument")
    return args[0] if args else None


def _setup(ctx: Context[ShimConfig], args: Sequence[str]) -> None:
    _no_args("setup", args)
    operations.setup(ctx)


def _clean(ctx: Context[ShimConfig], args: Sequence[str]) -> None:
    _no_args("clean", args)
    operations.clean(ctx)


def _make(ctx: Context[ShimConfig], args: Sequence[str]) -> None:
    operations.make(ctx, args)


def _install(ctx: Context[ShimConfig], args: Sequence[str]) -> None:
    operations.install(ctx, _optional_arg("install", args))


def _mount(ctx: Context[ShimConfig], args: Sequence[str]) -> None:
    operations.mount(ctx, _optional_arg("mount", args))


COMMANDS: dict[str, Callable[[Context[ShimConfig], Sequence[str]], None]] = {
    "setup": _setup,
    "clean": _clean,
    "make": _make,
    "install": _install,
    "mount": _mount,
}


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = build_parser()

    try:
        opts = parser.parse_args(argv)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        logger.error("error: %s", exc)
        return 1

    if opts.echo:
        logging.getLogger().setLevel(logging.DEBUG)

    if opts.command is None:
        parser.print_help(sys.stderr)
        return 1

    handler = COMMANDS.get(opts.command)
    if handler is None:
        logger.error("error: unrecognized command: %s", opts.command)
        return 1

    try:
        config = load_config(opts.config, output_root=opts.output_root, source_root=opts.source_root)
        host = detect_host()
        runner, host_runner = make_runners(host, config, echo=opts.echo)
        ctx = Context(config, host=host, runner=runner, host_runner=host_runner, dry_run=opts.dry_run)
        handler(ctx, opts.args)
    except ShimMakeError as exc:
        logger.error("error: %s", exc)
        return 1

    return 0

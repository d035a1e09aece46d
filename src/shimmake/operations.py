"""The shim-make operations: setup, clean, make, install and mount."""

from __future__ import annotations

import logging
import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from . import hcl, multipass
from .config import ShimConfig
from .context import Context
from .errors import CommandError, ConfigError, PreconditionError, ShimMakeError
from .lock import advisory_lock
from .requirements import Directory
from .strategy import Absent, Present
from .workspace import Workspace

logger = logging.getLogger(__name__)

SETUP_DOCUMENT = "setup.hcl"


def _run(ctx: Context[ShimConfig], argv: Sequence[str], *, cwd: Path) -> None:
    """Run a build command on the execution target, unless this is a dry run."""
    if ctx.dry_run:
        logger.info("[DRY RUN] Would run %s", shlex.join(argv))
        return
    ctx.runner.run(argv, cwd=cwd)


def _require_source(config: ShimConfig) -> None:
    if not (config.source_root / "Makefile").is_file():
        raise PreconditionError(f"No shim source tree at {config.source_root}; run setup first")


def setup(ctx: Context[ShimConfig]) -> None:
    """Bring the build environment up, skipping every step already done."""
    config = ctx.target
    ws = Workspace()
    ws.load(hcl.load_resource(SETUP_DOCUMENT, context={"config": config, "host": ctx.host}))
    if "setup" not in ws:
        raise ConfigError(f"{SETUP_DOCUMENT} declares no 'setup' project")
    logger.debug("Loaded %r", ws)
    with advisory_lock(config.output_root):
        ws["setup"].build(ctx)
    logger.info("Setup complete")


def clean(ctx: Context[ShimConfig]) -> None:
    config = ctx.target
    _require_source(config)
    logger.info("Cleaning...")
    _run(ctx, ["make", "clean"], cwd=config.source_root)


def make(ctx: Context[ShimConfig], args: Sequence[str] = ()) -> None:
    """Build shim; `args` are passed to make after the fixed overrides."""
    config = ctx.target
    _require_source(config)
    logger.info("Making...")
    argv = [
        "make",
        f"DEFAULT_LOADER={config.default_loader}",
        f"OVERRIDE_SECURITY_POLICY={config.security_policy}",
        *args,
    ]
    _run(ctx, argv, cwd=config.source_root)


def install(ctx: Context[ShimConfig], esp: str | None = None) -> None:
    """Install the build into the output root and optionally onto an ESP.

    All preconditions are checked before anything is removed.
    """
    config = ctx.target
    _require_source(config)
    if not config.output_root.is_dir():
        raise PreconditionError(f"Output root {config.output_root} does not exist; run setup first")

    destination = None
    if esp is not None:
        destination = Path(esp).expanduser() / "EFI" / config.efi_dir
        if not destination.is_dir():
            raise PreconditionError(f"ESP directory {destination} does not exist")

    logger.info("Installing...")
    with advisory_lock(config.output_root):
        Absent(Directory(path=str(config.output_root / "usr")))(ctx)
        _run(
            ctx,
            [
                "make",
                "install",
                f"DESTDIR={config.output_root}",
                f"EFIDIR={config.efi_dir}",
                f"OSLABEL={config.os_label}",
            ],
            cwd=config.source_root,
        )

    if destination is not None:
        _copy_to_esp(ctx, destination)


def _copy_to_esp(ctx: Context[ShimConfig], destination: Path) -> None:
    config = ctx.target
    artifacts = config.output_root / "boot" / "efi" / "EFI" / config.efi_dir
    logger.info("Installing to ESP %s...", destination)
    if ctx.dry_run:
        logger.info("[DRY RUN] Would copy %s/* to %s", artifacts, destination)
        return

    files = sorted(p for p in artifacts.iterdir() if p.is_file()) if artifacts.is_dir() else []
    if not files:
        raise PreconditionError(f"No installed artifacts in {artifacts}")
    for file in files:
        logger.debug("Copying %s to %s", file, destination)
        try:
            shutil.copy2(file, destination / file.name)
        except OSError as exc:
            raise ShimMakeError(f"Failed to copy {file} to {destination}: {exc.strerror}") from exc


def _is_mounted(ctx: Context[ShimConfig], path: Path) -> bool:
    table = ctx.host_runner.run(["mount"], capture=True).stdout
    return any(f" on {path} " in line for line in table.splitlines())


def mount(ctx: Context[ShimConfig], path: str | None = None) -> None:
    """Mount the VM's build directory onto this machine with sshfs."""
    config = ctx.target
    if not ctx.host.needs_vm:
        raise PreconditionError(f"mount needs a multipass VM; host is {ctx.host.system}")
    if not ctx.host_runner.which("sshfs"):
        raise PreconditionError("sshfs is not installed")

    mount_point = (Path(path).expanduser() if path is not None else config.mount_point).resolve()
    Present(Directory(path=str(mount_point)))(ctx)
    if _is_mounted(ctx, mount_point):
        raise PreconditionError(f"{mount_point} is already mounted")
    if mount_point.is_dir() and any(mount_point.iterdir()):
        raise PreconditionError(f"{mount_point} is not empty")

    details = multipass.info(ctx.host_runner, config.instance)
    if details is None:
        raise PreconditionError(f"multipass instance {config.instance} does not exist; run setup first")
    address = multipass.ipv4(details)
    if address is None:
        raise PreconditionError(f"Cannot find IP address of multipass instance {config.instance}")

    argv = ["sshfs", f"{config.remote_user}@{address}:{config.remote_dir}", str(mount_point)]
    if config.identity_file is not None:
        argv += ["-o", f"IdentityFile={config.identity_file}"]

    if ctx.dry_run:
        logger.info("[DRY RUN] Would run %s", shlex.join(argv))
        return

    logger.info("Mounting %s:%s on %s...", config.instance, config.remote_dir, mount_point)
    try:
        ctx.host_runner.run(argv)
    except CommandError:
        logger.warning("Mount failed; unmounting %s", mount_point)
        _unmount(ctx, mount_point)
        raise


def _unmount(ctx: Context[ShimConfig], mount_point: Path) -> None:
    """Best-effort cleanup after a failed mount."""
    try:
        ctx.host_runner.run(["umount", str(mount_point)], check=False)
    except CommandError as exc:
        logger.debug("Cleanup unmount failed: %s", exc)

#!/usr/bin/env python3
"""
next2d command-line builder.

Examples:
  next2d-builder --platform web --env prd
  next2d-builder --platform windows --env prd
  next2d-builder --platform steam:macos --env stage
  next2d-builder --preview --platform macos --env dev
  next2d-builder --preview --platform ios --env dev
  next2d-builder --build --platform android --env prd
  next2d-builder --dry-run --platform linux --env prd
"""

from __future__ import annotations

import argparse
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from next2d_build import process_utils
from next2d_build.config_loader import BuildContext, BuildRequest, load_config
from next2d_build.desktop_packager import ElectronPackager
from next2d_build.errors import Next2DBuildError, SubprocessFailure, UsageError
from next2d_build.mobile_bridge import CapacitorBridge
from next2d_build.platform_spec import PLATFORM_TOKENS, PlatformKind, resolve_platform
from next2d_build.process_utils import DryRunner, cmd_args_to_str, runInherited
from next2d_build.toolchain import ToolchainPaths, check_node_version, resolve_toolchain_paths
from next2d_build.web_build import build_web


class BuildStage(Enum):
    PARSE_ARGS = "parse args"
    CHECK_TOOLCHAIN = "check toolchain"
    LOAD_CONFIG = "load config"
    BUILD_WEB = "build web"
    PACKAGE_DESKTOP = "package desktop"
    BRIDGE_MOBILE = "bridge mobile"
    DONE = "done"
    FAILED = "failed"


class CliContext:
    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)
        self.stage = BuildStage.PARSE_ARGS

    def enter(self, stage: BuildStage) -> None:
        self.stage = stage

    def trace(self, *args: object) -> None:
        self.console.print("".join(str(item) for item in args), markup=False)

    def success(self, message: str) -> None:
        self.console.print(message, style="green", markup=False)

    def warn(self, message: str) -> None:
        self.console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(message, style="red", markup=False)


class BuildArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


HELP_TEXT = (
    "`--platform` can be specified for macOS, Windows, Linux, iOS, Android, and Web",
    "(steam:windows, steam:macos and steam:linux build Steam-branded desktop apps).",
    "It is not case sensitive.",
)


def echo_help(ctx: CliContext) -> None:
    ctx.trace()
    for line in HELP_TEXT:
        ctx.success(line)
    ctx.trace()
    ctx.trace("For build example:")
    ctx.trace("npx @next2d/builder --platform web --env prd")
    ctx.trace()
    ctx.trace("For preview example:")
    ctx.trace("npx @next2d/builder --preview --platform web --env prd")
    ctx.trace()
    ctx.trace("Options: --platform <", "|".join(PLATFORM_TOKENS), "> --env <name>")
    ctx.trace("         [--preview] [--open] [--build] [--dry-run] [--show-commands] [--project <dir>]")
    ctx.trace()


def build_parser() -> argparse.ArgumentParser:
    parser = BuildArgumentParser(
        prog="next2d-builder",
        description="next2d project builder (web, Electron desktop, Capacitor mobile).",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("--platform", default="", help="Target platform")
    parser.add_argument("--env", dest="environment", default="", help="Environment label, e.g. prd")
    parser.add_argument("--preview", action="store_true", help="Run without producing a package")
    parser.add_argument("--open", action="store_true", help="Open the native IDE project (mobile)")
    parser.add_argument("--build", action="store_true", help="Run the native build (mobile)")
    parser.add_argument("--help", "--h", dest="help", action="store_true", help="Show usage")
    parser.add_argument("--dry-run", action="store_true", help="Show plan and skip build commands")
    parser.add_argument("--show-commands", action="store_true", help="Echo commands before running them")
    parser.add_argument("--project", default="", help="Project directory (default: current directory)")
    return parser


def check_environment_label(environment: str) -> None:
    """The label is used as one directory name under <outDir>/<platform>."""
    path = Path(environment)
    if environment in (".", "..") or "/" in environment or "\\" in environment or path.is_absolute() or path.drive:
        raise UsageError(f"Invalid `--env` value '{environment}': use a plain name such as prd.")


def parse_request(argv: Sequence[str]) -> tuple[BuildRequest, argparse.Namespace]:
    args, _unknown = build_parser().parse_known_args(list(argv))

    if args.help:
        raise UsageError("")

    platform = args.platform.strip().lower()
    environment = args.environment.strip()
    if not platform or not environment:
        raise UsageError("Both `--platform` and `--env` are required.")

    if platform not in PLATFORM_TOKENS:
        raise UsageError(f"Unknown platform '{args.platform}'.")

    check_environment_label(environment)

    request = BuildRequest(
        platform_token=platform,
        environment=environment,
        preview=args.preview,
        build=args.build,
        open=args.open,
        dry_run=args.dry_run,
    )
    return request, args


def run_pipeline(
    ctx: CliContext,
    request: BuildRequest,
    project_root: Path,
    paths: ToolchainPaths,
    runner=runInherited,
) -> BuildContext:
    spec = resolve_platform(request.platform_token)

    ctx.enter(BuildStage.LOAD_CONFIG)
    build = load_config(ctx, request, spec, project_root)
    ctx.trace("Platform: ", spec.token, "  Environment: ", build.environment)
    ctx.trace("Build dir: ", build.build_dir)

    # packaging/bridge config is validated before the bundler is spawned
    step, step_stage = None, None
    if spec.kind is PlatformKind.DESKTOP:
        step, step_stage = ElectronPackager(ctx, build, paths, runner), BuildStage.PACKAGE_DESKTOP
    elif spec.kind is PlatformKind.MOBILE:
        step, step_stage = CapacitorBridge(ctx, build, paths, runner), BuildStage.BRIDGE_MOBILE
    if step is not None:
        step.prepare()

    ctx.enter(BuildStage.BUILD_WEB)
    build_web(ctx, build, paths, runner)

    if step is not None:
        ctx.enter(step_stage)
        step.run()
    else:
        ctx.success("build done.")

    ctx.enter(BuildStage.DONE)
    return build


def command_build(ctx: CliContext, request: BuildRequest, project_root: Path) -> int:
    paths = resolve_toolchain_paths(project_root)

    runner = runInherited
    if request.dry_run:
        runner = DryRunner(ctx)
    else:
        ctx.enter(BuildStage.CHECK_TOOLCHAIN)
        version = check_node_version(paths)
        ctx.trace("Node ", version)

    run_pipeline(ctx, request, project_root, paths, runner)
    return 0


def report_failure(ctx: CliContext, exc: Next2DBuildError) -> None:
    failed_stage = ctx.stage
    ctx.enter(BuildStage.FAILED)
    ctx.error(f"Build failed ({failed_stage.value}): {exc}")
    if isinstance(exc, SubprocessFailure) and exc.command:
        ctx.error(f"  command: {cmd_args_to_str(exc.command)}")


def main(argv: Optional[Sequence[str]] = None, ctx: Optional[CliContext] = None) -> int:
    ctx = ctx or CliContext()
    if argv is None:
        argv = sys.argv[1:]

    try:
        request, args = parse_request(argv)
    except UsageError as exc:
        if str(exc):
            ctx.error(str(exc))
        echo_help(ctx)
        return 1

    process_utils.SHOW_COMMAND = args.show_commands
    project_root = Path(args.project or ".").expanduser().resolve()

    try:
        return command_build(ctx, request, project_root)
    except KeyboardInterrupt:
        ctx.error("Interrupted")
        return 130
    except Next2DBuildError as exc:
        report_failure(ctx, exc)
        return 1
    except OSError as exc:
        ctx.enter(BuildStage.FAILED)
        ctx.error(f"Build failed: {type(exc).__name__}: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

from next2d_build.errors import SubprocessFailure
from next2d_build.process_utils import runInherited


def bundler_command(build, paths):
    return [paths.VITE, "--outDir", str(build.build_dir), "build"]


def build_web(parent, build, paths, runner=runInherited):
    cmd = bundler_command(build, paths)
    parent.trace("Bundle ", build.platform.token, " (", build.environment, ") -> ", build.build_dir)

    try:
        code = runner(cmd[0], cmd[1:], cwd=str(build.project_root), env=build.env)
    except OSError as exc:
        parent.error(f"Failed to start bundler {cmd[0]}: {exc}")
        raise SubprocessFailure("bundler", 127, cmd) from exc

    if code != 0:
        raise SubprocessFailure("bundler", code, cmd)

    parent.success("`HTML` and `JavaScript` files are written out.")
    parent.trace()
    return True

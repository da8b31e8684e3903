import subprocess


SHOW_COMMAND = False


def cmd_args_to_str(cmd_args):
    return " ".join([arg if " " not in arg else f'"{arg}"' for arg in cmd_args])


def runProcess(command, args=None, cwd=None, env=None):
    """Run a command to completion and capture its output."""
    if args is None:
        args = []

    cmd = [str(command)] + [str(arg) for arg in args]
    if SHOW_COMMAND:
        print("Execute -> ", cmd_args_to_str(cmd))

    proc = subprocess.Popen(
        cmd,
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    stdout, stderr = proc.communicate()
    return proc.returncode, stdout, stderr


def runInherited(command, args=None, cwd=None, env=None):
    """Run a command with the parent's stdio and return its exit code.

    The child writes straight to the terminal so bundler and packager
    progress shows up live.
    """
    if args is None:
        args = []

    cmd = [str(command)] + [str(arg) for arg in args]
    if SHOW_COMMAND:
        print("Execute -> ", cmd_args_to_str(cmd), flush=True)

    return subprocess.call(cmd, cwd=cwd, env=env)


class DryRunner:
    """Stand-in for runInherited that only reports the command."""

    def __init__(self, parent):
        self.parent = parent
        self.commands = []

    def __call__(self, command, args=None, cwd=None, env=None):
        cmd = [str(command)] + [str(arg) for arg in (args or [])]
        self.commands.append(cmd)
        self.parent.trace("Would run: ", cmd_args_to_str(cmd))
        return 0

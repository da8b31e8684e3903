import os
import re
import shutil
from dataclasses import dataclass

from next2d_build.errors import ToolchainError
from next2d_build.process_utils import runProcess


RECOMMENDED_NODE_MAJOR = 18


@dataclass(frozen=True)
class ToolchainPaths:
    NODE: str
    NPX: str
    VITE: str
    ELECTRON: str
    ELECTRON_BUILDER: str


def _version_key(value):
    parts = re.findall(r"\d+", value)
    if not parts:
        return (0,)
    return tuple(int(part) for part in parts)


def _local_bin(project_root, name):
    bin_root = os.path.join(str(project_root), "node_modules", ".bin")
    names = [name]
    if os.name == "nt":
        names.insert(0, name + ".cmd")
    for candidate in names:
        path = os.path.join(bin_root, candidate)
        if os.path.isfile(path):
            return path
    return None


def _pick_tool(env_key, project_root, name, local=True):
    value = os.environ.get(env_key, "").strip()
    if value:
        return value
    if local:
        found = _local_bin(project_root, name)
        if found:
            return found
    return shutil.which(name) or os.path.join(str(project_root), "node_modules", ".bin", name)


def resolve_toolchain_paths(project_root):
    return ToolchainPaths(
        NODE=_pick_tool("NEXT2D_NODE", project_root, "node", local=False),
        NPX=_pick_tool("NEXT2D_NPX", project_root, "npx", local=False),
        VITE=_pick_tool("NEXT2D_VITE", project_root, "vite"),
        ELECTRON=_pick_tool("NEXT2D_ELECTRON", project_root, "electron"),
        ELECTRON_BUILDER=_pick_tool("NEXT2D_ELECTRON_BUILDER", project_root, "electron-builder"),
    )


def check_node_version(paths, minimum=RECOMMENDED_NODE_MAJOR):
    try:
        code, out, err = runProcess(paths.NODE, ["--version"])
    except OSError as exc:
        raise ToolchainError(f"Node.js not found ({paths.NODE}): {exc}") from exc

    if code != 0:
        raise ToolchainError(f"`{paths.NODE} --version` failed: {err.decode('utf-8', 'replace').strip()}")

    version = out.decode("utf-8", "replace").strip().lstrip("v")
    if _version_key(version)[0] < minimum:
        raise ToolchainError(
            f"You are running Node Version:{version}. "
            f"next2d builds require Node {minimum} or higher. "
            "Please update your version of Node."
        )
    return version

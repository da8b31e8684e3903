"""Project configuration for a build: manifest, bundler config, output layout.

Everything a later step needs is collected into a frozen ``BuildContext``
that is handed from step to step.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from next2d_build.errors import ConfigMissingError
from next2d_build.fs_utils import createFolderTree, load_json, write_json
from next2d_build.platform_spec import PlatformSpec


BUNDLER_CONFIG_NAMES = (
    "vite.config.ts",
    "vite.config.mts",
    "vite.config.js",
    "vite.config.mjs",
)
DEFAULT_OUT_DIR = "dist"

ENV_ENVIRONMENT = "NEXT2D_EBUILD_ENVIRONMENT"
ENV_PLATFORM = "NEXT2D_TARGET_PLATFORM"

_BUILD_BLOCK = re.compile(r"""\bbuild['"]?\s*:\s*\{""")
_OUT_DIR = re.compile(r"""\boutDir['"]?\s*:\s*(['"`])([^'"`]+)\1""")


@dataclass(frozen=True)
class BuildRequest:
    platform_token: str
    environment: str
    preview: bool = False
    build: bool = False
    open: bool = False
    dry_run: bool = False


@dataclass(frozen=True)
class BuildContext:
    project_root: Path
    request: BuildRequest
    platform: PlatformSpec
    out_dir: str
    build_dir: Path
    bundler_config: Path
    env: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def environment(self) -> str:
        return self.request.environment

    @property
    def relative_build_dir(self) -> str:
        """Build dir relative to the project root, with a trailing slash."""
        return f"{self.out_dir}/{self.platform.platform_dir}/{self.environment}/"


def read_manifest(project_root: Path) -> dict:
    manifest_path = project_root / "package.json"
    if not manifest_path.exists():
        raise ConfigMissingError(f"The file `package.json` could not be found in {project_root}.")
    try:
        return load_json(manifest_path)
    except (OSError, ValueError) as exc:
        raise ConfigMissingError(f"Invalid `package.json`: {exc}") from exc


def ensure_module_manifest(parent, project_root: Path) -> bool:
    """Make package.json declare ``"type": "module"``. Returns True if rewritten."""
    manifest = read_manifest(project_root)
    if manifest.get("type") == "module":
        return False

    manifest["type"] = "module"
    write_json(project_root / "package.json", manifest)
    parent.trace("Set `type: module` in package.json")
    return True


def find_bundler_config(project_root: Path) -> Path:
    for name in BUNDLER_CONFIG_NAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    raise ConfigMissingError(
        f"The file `{BUNDLER_CONFIG_NAMES[0]}` could not be found in {project_root}."
    )


def read_out_dir(config_path: Path) -> str:
    try:
        source = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigMissingError(f"Failed to read {config_path.name}: {exc}") from exc

    block = _BUILD_BLOCK.search(source)
    if block:
        match = _OUT_DIR.search(source, block.end())
    else:
        match = _OUT_DIR.search(source)
    if not match:
        return DEFAULT_OUT_DIR

    value = match.group(2).strip().rstrip("/")
    if value.startswith("./"):
        value = value[2:]
    return value or DEFAULT_OUT_DIR


def child_environment(request: BuildRequest, spec: PlatformSpec) -> Dict[str, str]:
    env = dict(os.environ)
    env[ENV_ENVIRONMENT] = request.environment
    env[ENV_PLATFORM] = spec.token
    return env


def compute_build_dir(project_root: Path, out_dir: str, spec: PlatformSpec, environment: str) -> Path:
    return project_root / out_dir / spec.platform_dir / environment


def load_config(parent, request: BuildRequest, spec: PlatformSpec, project_root: Path) -> BuildContext:
    project_root = Path(project_root).resolve()

    if not request.dry_run:
        ensure_module_manifest(parent, project_root)
    else:
        read_manifest(project_root)

    bundler_config = find_bundler_config(project_root)
    out_dir = read_out_dir(bundler_config)
    build_dir = compute_build_dir(project_root, out_dir, spec, request.environment)

    if not request.dry_run and createFolderTree(str(build_dir)):
        parent.success(f"create build dir: {build_dir}")

    return BuildContext(
        project_root=project_root,
        request=request,
        platform=spec,
        out_dir=out_dir,
        build_dir=build_dir,
        bundler_config=bundler_config,
        env=child_environment(request, spec),
    )

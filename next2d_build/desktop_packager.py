import copy
import json
from pathlib import Path

from next2d_build.errors import ConfigMissingError, PackagingFailure, SubprocessFailure
from next2d_build.fs_utils import load_json, remove_file, write_json
from next2d_build.platform_spec import PlatformFamily, PlatformKind
from next2d_build.process_utils import runInherited


PACKAGING_CONFIG_NAME = "electron.build.json"
INDEX_POINTER_NAME = "electron.index.json"
ELECTRON_ENTRY = "electron.js"

# family -> (own section, default target, sections to strip, electron-builder flag)
DESKTOP_DEFAULTS = {
    PlatformFamily.WINDOWS: ("win", "portable", ("mac", "linux"), "--win"),
    PlatformFamily.MACOS: ("mac", "dmg", ("win", "linux"), "--mac"),
    PlatformFamily.LINUX: ("linux", "deb", ("win", "mac"), "--linux"),
}


def load_packaging_config(project_root: Path) -> dict:
    config_path = project_root / PACKAGING_CONFIG_NAME
    if not config_path.exists():
        raise ConfigMissingError(f"The file `{PACKAGING_CONFIG_NAME}` could not be found.")
    try:
        config = load_json(config_path)
    except (OSError, ValueError) as exc:
        raise ConfigMissingError(f"Invalid `{PACKAGING_CONFIG_NAME}`: {exc}") from exc

    if not str(config.get("appId") or "").strip():
        raise ConfigMissingError(
            f"`appId` is not set. Please set `appId` in `{PACKAGING_CONFIG_NAME}`."
        )
    return config


def apply_platform_defaults(config: dict, build) -> dict:
    """Return a copy of config narrowed to the build's desktop family."""
    family = build.platform.family
    if family not in DESKTOP_DEFAULTS:
        raise ValueError(f"{build.platform.token} is not a desktop platform")

    config = copy.deepcopy(config)
    section, target, strip, _ = DESKTOP_DEFAULTS[family]

    if section not in config:
        config[section] = {"target": target}
    for name in strip:
        config.pop(name, None)

    directories = config.get("directories")
    if not isinstance(directories, dict):
        directories = {}
    base = str(directories.get("output") or build.out_dir).rstrip("/")
    directories["output"] = f"{base}/{build.platform.platform_dir}/build"
    config["directories"] = directories

    files = config.get("files")
    if files is None:
        files = []
    elif not isinstance(files, list):
        files = [files]
    if build.relative_build_dir not in files:
        files.append(build.relative_build_dir)
    config["files"] = files

    return config


def generate_packaging_config(build) -> dict:
    return apply_platform_defaults(load_packaging_config(build.project_root), build)


class ElectronPackager:
    def __init__(self, parent, build, paths, runner=runInherited):
        if build.platform.kind is not PlatformKind.DESKTOP:
            raise ValueError(f"{build.platform.token} is not a desktop platform")
        self.parent = parent
        self.build = build
        self.paths = paths
        self.runner = runner
        self.dry_run = build.request.dry_run

        root = build.project_root
        self.manifest_path = root / "package.json"
        self.pointer_path = root / INDEX_POINTER_NAME
        self.generated_config_path = root / f"electron-builder.{build.platform.family.value}.json"
        self._manifest_backup = None
        self.config = None

    def prepare(self):
        """Validate electron.build.json before anything is spawned."""
        self.config = generate_packaging_config(self.build)
        return self.config

    def index_html_path(self) -> str:
        return "./" + self.build.relative_build_dir + "index.html"

    def write_index_pointer(self):
        if self.dry_run:
            self.parent.trace("Would write ", self.pointer_path)
            return
        write_json(self.pointer_path, {"path": self.index_html_path()})

    def use_commonjs_manifest(self):
        """Electron loads electron.js as CommonJS; package.json is restored in cleanup()."""
        if self.dry_run:
            return
        raw = self.manifest_path.read_text(encoding="utf-8")
        manifest = json.loads(raw)
        self._manifest_backup = raw
        manifest["type"] = "commonjs"
        write_json(self.manifest_path, manifest)

    def cleanup(self):
        if self.dry_run:
            return
        remove_file(self.parent, self.pointer_path)
        remove_file(self.parent, self.generated_config_path)
        if self._manifest_backup is not None:
            self.manifest_path.write_text(self._manifest_backup, encoding="utf-8")
            self._manifest_backup = None

    def preview(self):
        cmd = [self.paths.ELECTRON, str(self.build.project_root / ELECTRON_ENTRY)]
        self.parent.success("Start the `Electron` preview.")
        code = self._run(cmd, "electron", SubprocessFailure)
        if code != 0:
            raise SubprocessFailure("electron", code, cmd)
        return True

    def package(self, config):
        _, _, _, flag = DESKTOP_DEFAULTS[self.build.platform.family]
        if not self.dry_run:
            write_json(self.generated_config_path, config)

        cmd = [
            self.paths.ELECTRON_BUILDER,
            "--projectDir",
            str(self.build.project_root),
            "--config",
            str(self.generated_config_path),
            flag,
            "--publish",
            "never",
        ]
        self.parent.success("Start the `Electron` build process.")
        code = self._run(cmd, "electron-builder", PackagingFailure)
        if code != 0:
            raise PackagingFailure("electron-builder", code, cmd)

        self.parent.success("Finished building `Electron`.")
        self.parent.trace("Output: ", config["directories"]["output"])
        return True

    def run(self):
        request = self.build.request
        if request.open or request.build:
            self.parent.trace("--open/--build are ignored for desktop targets")

        config = self.config if self.config is not None else self.prepare()

        self.write_index_pointer()
        try:
            self.use_commonjs_manifest()
            if request.preview:
                return self.preview()
            return self.package(config)
        finally:
            self.cleanup()

    def _run(self, cmd, step, failure):
        try:
            return self.runner(cmd[0], cmd[1:], cwd=str(self.build.project_root), env=self.build.env)
        except OSError as exc:
            self.parent.error(f"Failed to start {step} ({cmd[0]}): {exc}")
            raise failure(step, 127, cmd) from exc

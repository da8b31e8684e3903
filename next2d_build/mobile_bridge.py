from next2d_build.errors import ConfigMissingError, SubprocessFailure
from next2d_build.fs_utils import load_json, write_json
from next2d_build.platform_spec import PlatformKind
from next2d_build.process_utils import runInherited


BRIDGE_CONFIG_NAME = "capacitor.config.json"


class CapacitorBridge:
    def __init__(self, parent, build, paths, runner=runInherited):
        if build.platform.kind is not PlatformKind.MOBILE:
            raise ValueError(f"{build.platform.token} is not a mobile platform")
        self.parent = parent
        self.build = build
        self.paths = paths
        self.runner = runner
        self.family = build.platform.family.value
        self.config_path = build.project_root / BRIDGE_CONFIG_NAME
        self.native_dir = build.project_root / self.family

    def load_bridge_config(self):
        if not self.config_path.exists():
            raise ConfigMissingError(f"The file `{BRIDGE_CONFIG_NAME}` could not be found.")
        try:
            return load_json(self.config_path)
        except (OSError, ValueError) as exc:
            raise ConfigMissingError(f"Invalid `{BRIDGE_CONFIG_NAME}`: {exc}") from exc

    def cap(self, action):
        cmd = [self.paths.NPX, "cap", action, self.family]
        try:
            code = self.runner(cmd[0], cmd[1:], cwd=str(self.build.project_root), env=self.build.env)
        except OSError as exc:
            self.parent.error(f"Failed to start {cmd[0]}: {exc}")
            raise SubprocessFailure(f"cap {action}", 127, cmd) from exc
        if code != 0:
            raise SubprocessFailure(f"cap {action}", code, cmd)

    def generate_native_project(self):
        if self.native_dir.exists():
            return False
        self.cap("add")
        self.parent.success(f"Successfully generated {self.family} project.")
        self.parent.trace()
        return True

    def prepare(self):
        """Check capacitor.config.json before anything is spawned."""
        self.load_bridge_config()

    def point_web_dir(self):
        config = self.load_bridge_config()
        config["webDir"] = self.build.relative_build_dir
        if self.build.request.dry_run:
            self.parent.trace("Would set webDir=", config["webDir"], " in ", self.config_path)
            return config
        write_json(self.config_path, config)
        self.parent.trace("webDir -> ", config["webDir"])
        return config

    def run(self):
        request = self.build.request
        self.prepare()

        self.generate_native_project()
        self.point_web_dir()

        if request.preview:
            self.cap("run")
        elif request.open:
            self.cap("sync")
            self.cap("open")
        elif request.build:
            self.cap("sync")
            self.cap("build")
        else:
            self.parent.trace("Native project ready: ", self.native_dir)
            return True

        self.parent.success(f"Finished `{self.family}` native step.")
        return True

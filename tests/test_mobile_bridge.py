"""Tests for the Capacitor bridge step."""

import json

import pytest

from conftest import RecordingRunner
from next2d_build.config_loader import BuildRequest, load_config
from next2d_build.errors import ConfigMissingError, SubprocessFailure
from next2d_build.mobile_bridge import BRIDGE_CONFIG_NAME, CapacitorBridge
from next2d_build.platform_spec import resolve_platform


def _build(ctx, project, token="ios", env="dev", **flags):
    request = BuildRequest(platform_token=token, environment=env, **flags)
    return load_config(ctx, request, resolve_platform(token), project)


def _web_dir(project):
    return json.loads((project / BRIDGE_CONFIG_NAME).read_text(encoding="utf-8"))["webDir"]


class TestCapacitorBridge:
    def test_preview_order(self, ctx, capacitor_project, paths):
        events = []

        def hook(cmd):
            events.append((" ".join(cmd[1:3]), _web_dir(capacitor_project)))
            if cmd[2] == "add":
                (capacitor_project / "ios").mkdir()

        build = _build(ctx, capacitor_project, "ios", preview=True)
        runner = RecordingRunner(hook=hook)
        CapacitorBridge(ctx, build, paths, runner).run()

        assert runner.commands == [["npx", "cap", "add", "ios"], ["npx", "cap", "run", "ios"]]
        assert events == [("cap add", "www"), ("cap run", "dist/ios/dev/")]

    def test_existing_native_project_is_reused(self, ctx, capacitor_project, paths):
        (capacitor_project / "android").mkdir()
        build = _build(ctx, capacitor_project, "android", "prd", preview=True)
        runner = RecordingRunner()
        CapacitorBridge(ctx, build, paths, runner).run()
        assert runner.commands == [["npx", "cap", "run", "android"]]

    def test_open_syncs_first(self, ctx, capacitor_project, paths):
        (capacitor_project / "ios").mkdir()
        build = _build(ctx, capacitor_project, "ios", open=True)
        runner = RecordingRunner()
        CapacitorBridge(ctx, build, paths, runner).run()
        assert runner.commands == [["npx", "cap", "sync", "ios"], ["npx", "cap", "open", "ios"]]

    def test_build_syncs_first(self, ctx, capacitor_project, paths):
        (capacitor_project / "android").mkdir()
        build = _build(ctx, capacitor_project, "android", build=True)
        runner = RecordingRunner()
        CapacitorBridge(ctx, build, paths, runner).run()
        assert runner.commands == [
            ["npx", "cap", "sync", "android"],
            ["npx", "cap", "build", "android"],
        ]

    def test_no_flags_only_rewrites_web_dir(self, ctx, capacitor_project, paths):
        (capacitor_project / "android").mkdir()
        build = _build(ctx, capacitor_project, "android", "stage")
        runner = RecordingRunner()
        CapacitorBridge(ctx, build, paths, runner).run()
        assert runner.commands == []
        config = json.loads((capacitor_project / BRIDGE_CONFIG_NAME).read_text(encoding="utf-8"))
        assert config == {"appId": "com.example.sample", "appName": "Sample", "webDir": "dist/android/stage/"}

    def test_scaffold_failure_stops(self, ctx, capacitor_project, paths):
        build = _build(ctx, capacitor_project, "ios", preview=True)
        runner = RecordingRunner(codes={"cap add": 1})
        with pytest.raises(SubprocessFailure) as info:
            CapacitorBridge(ctx, build, paths, runner).run()
        assert info.value.step == "cap add"
        assert runner.commands == [["npx", "cap", "add", "ios"]]
        assert _web_dir(capacitor_project) == "www"

    def test_web_dir_written_over_scaffolded_config(self, ctx, capacitor_project, paths):
        def hook(cmd):
            if cmd[2] == "add":
                (capacitor_project / "ios").mkdir()
                config = json.loads((capacitor_project / BRIDGE_CONFIG_NAME).read_text(encoding="utf-8"))
                config["plugins"] = {"SplashScreen": {"launchShowDuration": 0}}
                (capacitor_project / BRIDGE_CONFIG_NAME).write_text(json.dumps(config), encoding="utf-8")

        build = _build(ctx, capacitor_project, "ios")
        CapacitorBridge(ctx, build, paths, RecordingRunner(hook=hook)).run()

        config = json.loads((capacitor_project / BRIDGE_CONFIG_NAME).read_text(encoding="utf-8"))
        assert config["plugins"] == {"SplashScreen": {"launchShowDuration": 0}}
        assert config["webDir"] == "dist/ios/dev/"

    def test_prepare_checks_config(self, ctx, project, paths):
        build = _build(ctx, project, "android")
        with pytest.raises(ConfigMissingError):
            CapacitorBridge(ctx, build, paths, RecordingRunner()).prepare()

    def test_missing_bridge_config(self, ctx, project, paths):
        build = _build(ctx, project, "ios", preview=True)
        runner = RecordingRunner()
        with pytest.raises(ConfigMissingError):
            CapacitorBridge(ctx, build, paths, runner).run()
        assert runner.commands == []

    def test_rejects_desktop(self, ctx, capacitor_project, paths):
        build = _build(ctx, capacitor_project, "windows")
        with pytest.raises(ValueError):
            CapacitorBridge(ctx, build, paths, RecordingRunner())

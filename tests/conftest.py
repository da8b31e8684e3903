"""Shared test fixtures for the next2d builder."""

import io
import json

import pytest
from rich.console import Console

from next2d_build.toolchain import ToolchainPaths
from next2d_builder_cli import CliContext


class RecordingRunner:
    """Records every command instead of spawning it.

    ``codes`` maps a substring of the command line to the exit code to
    return; ``hook`` is called with each command before it returns.
    """

    def __init__(self, codes=None, hook=None):
        self.calls = []
        self.codes = codes or {}
        self.hook = hook

    def __call__(self, command, args=None, cwd=None, env=None):
        cmd = [str(command)] + [str(arg) for arg in (args or [])]
        self.calls.append({"cmd": cmd, "cwd": cwd, "env": env})
        if self.hook:
            self.hook(cmd)
        line = " ".join(cmd)
        for key, code in self.codes.items():
            if key in line:
                return code
        return 0

    @property
    def commands(self):
        return [call["cmd"] for call in self.calls]


def write_json(path, data):
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def ctx():
    out = io.StringIO()
    err = io.StringIO()
    context = CliContext(
        console=Console(file=out, highlight=False, width=200),
        err_console=Console(file=err, highlight=False, width=200),
    )
    context.out = out
    context.err = err
    return context


@pytest.fixture
def paths():
    return ToolchainPaths(
        NODE="node",
        NPX="npx",
        VITE="vite",
        ELECTRON="electron",
        ELECTRON_BUILDER="electron-builder",
    )


@pytest.fixture
def project(tmp_path):
    """A minimal next2d project: manifest plus Vite config."""
    write_json(tmp_path / "package.json", {"name": "sample-game", "version": "1.0.0"})
    (tmp_path / "vite.config.ts").write_text(
        'import { defineConfig } from "vite";\n'
        "export default defineConfig({\n"
        '    "build": {\n'
        '        "outDir": "dist"\n'
        "    }\n"
        "});\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def electron_project(project):
    write_json(
        project / "electron.build.json",
        {
            "appId": "com.example.sample",
            "productName": "Sample",
            "win": {"target": "nsis"},
            "mac": {"category": "public.app-category.games"},
            "linux": {"target": "AppImage"},
        },
    )
    (project / "electron.js").write_text("// electron entry\n", encoding="utf-8")
    return project


@pytest.fixture
def capacitor_project(project):
    write_json(
        project / "capacitor.config.json",
        {"appId": "com.example.sample", "appName": "Sample", "webDir": "www"},
    )
    return project

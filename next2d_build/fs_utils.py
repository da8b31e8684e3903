import json
import os
from pathlib import Path


def createFolderTree(maindir):
    """Create maindir and its parents. Returns True when something was created."""
    if os.path.isdir(maindir):
        return False
    os.makedirs(maindir, exist_ok=True)
    return True


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid JSON object in {path}")
    return data


def write_json(path: Path, data: dict) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, ensure_ascii=False)
        handle.write("\n")


def remove_file(parent, path: Path) -> bool:
    if not path.exists():
        return False
    try:
        path.unlink()
        return True
    except OSError as exc:
        parent.warn(f"Failed remove {path}: {type(exc).__name__} {exc}")
        return False

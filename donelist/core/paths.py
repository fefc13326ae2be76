from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_path, user_data_path, user_log_path

APP_NAME = "donelist"
APP_AUTHOR = "donelist"
SETTINGS_FILENAME = "settings.json"


@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    settings_file: Path
    data_dir: Path
    logs_dir: Path


def resolve_paths(data_dir: Path | None = None) -> AppPaths:
    """Work out where settings, task data and logs live.

    ``data_dir`` overrides every location; config and logs then sit beside
    the task data so a single directory holds the whole profile.
    """
    if data_dir is not None:
        root = Path(data_dir).expanduser()
        config_dir = root
        data_root = root
        logs_dir = root / "logs"
    else:
        config_dir = Path(user_config_path(APP_NAME, APP_AUTHOR))
        data_root = Path(user_data_path(APP_NAME, APP_AUTHOR))
        logs_dir = Path(user_log_path(APP_NAME, APP_AUTHOR))
    return AppPaths(
        config_dir=config_dir,
        settings_file=config_dir / SETTINGS_FILENAME,
        data_dir=data_root,
        logs_dir=logs_dir,
    )


def prepare_paths(data_dir: Path | None = None) -> AppPaths:
    paths = resolve_paths(data_dir)
    for directory in (paths.config_dir, paths.data_dir, paths.logs_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return paths

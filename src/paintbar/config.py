from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_root": "~/.local/share/paintbar",
    "canvas": {
        "width": 800,
        "height": 600,
        "min_width": 300,
        "min_height": 200,
        "max_width": 4096,
        "max_height": 4096,
        "square": False,
        "responsive": True,
        "transparent": False,
        "checker_size": 10,
        "resize_debounce_ms": 100,
        "container_padding": 40,
    },
    "history": {
        "max_undo_steps": 50,
    },
    "brush": {
        "color": "#000000",
        "line_width": 5,
        "max_recent_colors": 10,
    },
    "input": {
        "move_throttle_ms": 16,
    },
    "palette": [
        "#000000",
        "#ffffff",
        "#808080",
        "#c0c0c0",
        "#800000",
        "#ff0000",
        "#808000",
        "#ffff00",
        "#008000",
        "#00ff00",
        "#008080",
        "#00ffff",
        "#000080",
        "#0000ff",
        "#800080",
        "#ff00ff",
    ],
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    env_path = os.environ.get("PAINTBAR_CONFIG")
    paths = []
    if env_path:
        paths.append(Path(env_path))
    paths.extend([
        Path("config.yaml"),
        Path("~/.config/paintbar/config.yaml").expanduser(),
    ])
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if path.exists():
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            if isinstance(data, dict):
                config = _deep_merge(config, data)
            break
    return config


def coerce_int(value: object, default: int, *, minimum: int = 0) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, number)


def section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name)
    if isinstance(value, dict):
        return value
    return dict(DEFAULT_CONFIG.get(name, {}))

"""Configuration loader for fencediv.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_NAME = "fencediv.toml"
DEFAULT_SETTINGS_PATH = Path(".fencediv") / "styles.yaml"


@dataclass
class SettingsConfig:
    """Where style settings are persisted."""
    path: Path = DEFAULT_SETTINGS_PATH


@dataclass
class RenderConfig:
    """Rendering options."""
    live_preview: bool = True


@dataclass
class WatchConfig:
    """Watch mode options."""
    debounce_ms: int = 150


@dataclass
class ServeConfig:
    """Local JSON API options."""
    host: str = "127.0.0.1"
    port: int = 8766


@dataclass
class FencedDivConfig:
    """Complete fencediv configuration."""
    settings: SettingsConfig
    render: RenderConfig
    watch: WatchConfig
    serve: ServeConfig


def load_config(config_path: Path | None = None, doc_path: Path | None = None) -> FencedDivConfig:
    """
    Load configuration from fencediv.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/fencediv.toml
    3. fencediv.toml next to the document being processed

    Args:
        config_path: Explicit path to config file
        doc_path: Document path for fallback search

    Returns:
        FencedDivConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if doc_path:
        search_paths.append(doc_path.parent / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    settings_data = toml_data.get("settings", {})
    settings_config = SettingsConfig(
        path=Path(settings_data.get("path", DEFAULT_SETTINGS_PATH))
    )

    render_data = toml_data.get("render", {})
    render_config = RenderConfig(
        live_preview=bool(render_data.get("live_preview", True))
    )

    watch_data = toml_data.get("watch", {})
    watch_config = WatchConfig(
        debounce_ms=int(watch_data.get("debounce_ms", 150))
    )

    serve_data = toml_data.get("serve", {})
    serve_config = ServeConfig(
        host=serve_data.get("host", "127.0.0.1"),
        port=int(serve_data.get("port", 8766)),
    )

    return FencedDivConfig(
        settings=settings_config,
        render=render_config,
        watch=watch_config,
        serve=serve_config,
    )

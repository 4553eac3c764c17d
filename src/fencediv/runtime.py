"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.html_renderer import HtmlRenderer
from .adapters.idgen import HexId
from .adapters.yaml_codec import YamlSettingsCodec
from .config import FencedDivConfig, load_config
from .core.model import Range
from .editor import EditorSession
from .settings import FencedDivSettings


@dataclass
class Runtime:
    """Container for all wired components."""
    settings: FencedDivSettings
    settings_path: Path
    codec: YamlSettingsCodec
    renderer: HtmlRenderer
    idgen: HexId
    config: FencedDivConfig

    def save_settings(self) -> None:
        self.codec.save(self.settings, self.settings_path)

    def open_session(self, text: str, selection: list[Range] | None = None) -> EditorSession:
        return EditorSession(
            text,
            self.renderer,
            selection=selection if selection is not None else [Range(0, 0)],
            live_preview=self.config.render.live_preview,
        )


def build_runtime(
    settings_path: Path | None = None,
    config_path: Path | None = None,
    doc_path: Path | None = None,
) -> Runtime:
    """Build and wire all components."""
    config = load_config(config_path=config_path, doc_path=doc_path)

    # CLI args take precedence over config values
    if settings_path is None:
        settings_path = config.settings.path

    codec = YamlSettingsCodec()
    settings = codec.load(settings_path)
    renderer = HtmlRenderer(settings)

    return Runtime(
        settings=settings,
        settings_path=settings_path,
        codec=codec,
        renderer=renderer,
        idgen=HexId(),
        config=config,
    )

import io
from pathlib import Path

import yaml

from ..settings import FencedDivSettings


class YamlSettingsCodec:
    """Read and write style settings as a YAML document."""

    def decode(self, text: str) -> FencedDivSettings:
        data = yaml.safe_load(io.StringIO(text)) or {}
        if not isinstance(data, dict):
            raise ValueError("Settings file must contain a mapping")
        return FencedDivSettings.from_serialized(data)

    def encode(self, settings: FencedDivSettings) -> str:
        buf = io.StringIO()
        yaml.safe_dump(settings.to_serializable(), buf, sort_keys=False, allow_unicode=True)
        return buf.getvalue()

    def load(self, path: Path) -> FencedDivSettings:
        if not path.exists():
            return FencedDivSettings()
        return self.decode(path.read_text(encoding="utf-8"))

    def save(self, settings: FencedDivSettings, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.encode(settings), encoding="utf-8")

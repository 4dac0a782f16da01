from __future__ import annotations

import json
import mimetypes
from datetime import datetime
from pathlib import Path
from typing import Mapping

from .image.normalizer import decode_data_uri

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp", "image/heic": ".heic"}


class ArtifactWriter:
    """Writes generated images (plus a JSON sidecar) into one output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def default_stem(self, mode: str) -> str:
        return f"luxelens_{mode.lower()}_{datetime.now().strftime('%Y%m%d-%H%M%S')}"

    def write(self, data_uri: str, stem: str, meta: Mapping[str, object] | None = None) -> Path:
        mime_type, content = decode_data_uri(data_uri)
        extension = _EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type) or ".png"
        path = self.output_dir / f"{stem}{extension}"
        path.write_bytes(content)
        if meta is not None:
            sidecar = dict(meta)
            sidecar["mime_type"] = mime_type
            path.with_suffix(".json").write_text(
                json.dumps(sidecar, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        return path

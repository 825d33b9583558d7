from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal, TypedDict

import yaml

from commoner.models.module_file import CompiledModule

logger = logging.getLogger(__name__)


class ModuleRow(TypedDict):
    path: str
    identifier: str
    expose: str | None
    required: list[str]
    commoner_enabled: bool
    used_helpers: list[str]


class MetadataLoader:
    """Persist compile metadata so the asset pipeline can order its inputs.

    One row is written per compiled module, in the order given.
    """

    def __init__(
        self, output_path: str | Path, fmt: Literal["yaml", "json"] | None = None
    ) -> None:
        self.output_path: Path = Path(output_path)
        self.fmt: Literal["yaml", "json"] = fmt or (
            "json" if self.output_path.suffix == ".json" else "yaml"
        )

    def _to_serializable(self, modules: list[CompiledModule]) -> list[ModuleRow]:
        return [
            {
                "path": str(compiled.module.path),
                "identifier": compiled.module.identifier,
                "expose": compiled.module.expose,
                "required": list(compiled.metadata.required),
                "commoner_enabled": compiled.metadata.commoner_enabled,
                "used_helpers": sorted(compiled.metadata.used_helpers),
            }
            for compiled in modules
        ]

    def load(self, modules: list[CompiledModule]) -> None:
        if self.output_path.parent and not self.output_path.parent.exists():
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        payload = {"modules": self._to_serializable(modules)}

        try:
            with self.output_path.open("w", encoding="utf-8") as f:
                if self.fmt == "json":
                    json.dump(payload, f, indent=2)
                else:
                    yaml.safe_dump(
                        payload,
                        f,
                        allow_unicode=True,
                        sort_keys=False,
                        default_flow_style=False,
                    )
        except OSError:
            logger.exception("Failed to write metadata to %s", self.output_path)
            raise

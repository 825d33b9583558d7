from __future__ import annotations

import logging
from pathlib import Path

import yaml

from commoner.models.options import CommonerOptions

logger = logging.getLogger(__name__)


class OptionsLoader:
    """Read project-wide options from a YAML file.

    Recognised keys are ``extensions``, ``globals`` and ``module_directories``.
    """

    def __init__(self, config_path: str | Path) -> None:
        self.config_path: Path = Path(config_path)

    def load(self) -> CommonerOptions:
        try:
            with self.config_path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except OSError:
            logger.exception("Failed to read options from %s", self.config_path)
            raise

        if raw is None:
            return CommonerOptions()
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a mapping in {self.config_path}")
        if "basedir" in raw:
            raise ValueError("basedir is computed per file and cannot be configured")
        return CommonerOptions.model_validate(raw)

"""
GO Similarity Settings
======================
Runtime configuration for ontology loading and default scoring options.

Module: gosim/config/settings.py

Purpose:
    - Read defaults from environment variables
    - Persist/restore configuration as YAML
    - Provide one process-wide settings instance

Dependencies:
    - yaml: Configuration file I/O
    - pathlib: File path handling

Environment:
    GO_OBO_PATH              Cache path of the OBO file
    GO_OBO_URL               Download source
    GO_AUTO_DOWNLOAD_OBO     Anything but "false" enables auto download
    GO_OBO_MAX_REDIRECTS     Redirect limit for the download
    GO_OBO_DOWNLOAD_TIMEOUT  Total download timeout in seconds
    GO_VALIDATE_ACYCLIC      Reject cyclic ontologies at load time

Called by:
    - gosim/ontology/loader.py
    - gosim/services/go_sim_job.py
    - scripts/run_go_similarity.py

Version: 1.0.0
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, asdict, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_OBO_URL = "https://purl.obolibrary.org/obo/go/go-basic.obo"
DEFAULT_OBO_PATH = Path("data") / "go-basic.obo"


def _as_bool(value: Optional[str], fallback: bool) -> bool:
    if value is None or value == "":
        return fallback
    return str(value).lower() != "false"


def _as_number(value: Optional[str], fallback: Union[int, float]) -> Union[int, float]:
    if value is None or value == "":
        return fallback
    try:
        return type(fallback)(value)
    except (TypeError, ValueError):
        return fallback


# =============================================================================
# Settings
# =============================================================================
@dataclass
class GoSimSettings:
    """GO similarity engine configuration"""
    # Ontology source
    obo_path: str = str(DEFAULT_OBO_PATH)
    obo_url: str = DEFAULT_OBO_URL
    auto_download: bool = True
    max_redirects: int = 5
    download_timeout: float = 600.0

    # Graph validation
    validate_acyclic: bool = True

    # Scoring defaults
    default_method: str = "wang"
    default_aggregation: str = "bma"
    default_threshold: float = 0.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GoSimSettings":
        """Build settings from environment variables, falling back to defaults"""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            obo_path=env.get("GO_OBO_PATH") or defaults.obo_path,
            obo_url=env.get("GO_OBO_URL") or defaults.obo_url,
            auto_download=_as_bool(env.get("GO_AUTO_DOWNLOAD_OBO"), defaults.auto_download),
            max_redirects=int(_as_number(env.get("GO_OBO_MAX_REDIRECTS"), defaults.max_redirects)),
            download_timeout=float(_as_number(env.get("GO_OBO_DOWNLOAD_TIMEOUT"), defaults.download_timeout)),
            validate_acyclic=_as_bool(env.get("GO_VALIDATE_ACYCLIC"), defaults.validate_acyclic),
        )

    @property
    def obo_file(self) -> Path:
        return Path(self.obo_path).expanduser().resolve()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update(self, values: Mapping[str, Any]) -> None:
        """Apply known keys, ignoring the rest"""
        known = {f.name for f in fields(self)}
        for key, value in values.items():
            if key in known:
                setattr(self, key, value)
            else:
                logger.warning(f"Ignoring unknown setting: {key}")

    # =========================================================================
    # Persistence
    # =========================================================================
    def save_to_yaml(self, path: Union[str, Path]) -> None:
        """Save current configuration to YAML file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        config = {
            "version": "1.0",
            "updated_at": datetime.now().isoformat(),
            "gosim": self.to_dict(),
        }

        with open(path, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {path}")

    def load_from_yaml(self, path: Union[str, Path]) -> None:
        """Load configuration from YAML file"""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            config = yaml.safe_load(f) or {}

        self.update(config.get("gosim", {}))

        logger.info(f"Configuration loaded from {path}")


# =============================================================================
# Singleton instance for global access
# =============================================================================
_default_settings: Optional[GoSimSettings] = None


def get_settings() -> GoSimSettings:
    """Get the process-wide settings, reading the environment on first use"""
    global _default_settings
    if _default_settings is None:
        _default_settings = GoSimSettings.from_env()
    return _default_settings


def reset_settings() -> None:
    """Drop the process-wide settings (mainly for tests)"""
    global _default_settings
    _default_settings = None

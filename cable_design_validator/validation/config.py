from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "design_validation.yml"
CONFIG_PATH_ENV = "DESIGN_VALIDATION_CONFIG"

RECORD_LOOKUP_MODES = ("canned", "disabled")


@dataclass(frozen=True)
class DesignValidationConfig:
    model: str = "gemini-2.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    api_url_env: str = "GEMINI_API_URL"
    api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_s: float = 60.0
    record_lookup: str = "canned"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @property
    def record_lookup_enabled(self) -> bool:
        return self.record_lookup == "canned"

    def resolve_api_key(self) -> Optional[str]:
        return os.getenv(self.api_key_env) or None

    def resolve_api_base_url(self) -> str:
        return os.getenv(self.api_url_env) or self.api_base_url


def load_design_validation_config(path: Path) -> DesignValidationConfig:
    data = yaml.safe_load(path.read_text()) if path.exists() else {}
    data = data or {}
    defaults = DesignValidationConfig()
    record_lookup = str(data.get("record_lookup", defaults.record_lookup))
    if record_lookup not in RECORD_LOOKUP_MODES:
        raise ValueError(
            f"record_lookup must be one of {RECORD_LOOKUP_MODES}, got {record_lookup!r}"
        )
    return DesignValidationConfig(
        model=data.get("model", defaults.model),
        api_key_env=data.get("api_key_env", defaults.api_key_env),
        api_url_env=data.get("api_url_env", defaults.api_url_env),
        api_base_url=data.get("api_base_url", defaults.api_base_url),
        timeout_s=float(data.get("timeout_s", defaults.timeout_s)),
        record_lookup=record_lookup,
        cors_origins=list(data.get("cors_origins") or defaults.cors_origins),
    )


@lru_cache
def get_design_validation_config(path: Optional[Path] = None) -> DesignValidationConfig:
    if path is None:
        env_path = os.getenv(CONFIG_PATH_ENV)
        path = Path(env_path) if env_path else CONFIG_PATH
    return load_design_validation_config(path)

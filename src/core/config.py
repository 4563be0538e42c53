"""Configuration models and YAML loader for the lead hunter."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.backend import available_providers
from src.core.schemas import Category, Location, Mode
from src.pipeline.proposal import DEFAULT_SKILLS


class BackendConfig(BaseModel):
    """Which generative-search backend to call and how."""

    provider: str = "gemini"
    model: str | None = None
    web_search: bool = True
    timeout_s: float = Field(default=120.0, ge=1.0)

    @field_validator("provider")
    @classmethod
    def provider_known(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in available_providers():
            msg = f"provider must be one of {available_providers()}, got '{v}'"
            raise ValueError(msg)
        return v


class StorageConfig(BaseModel):
    """Saved-lead storage configuration."""

    path: str = "data/leads.db"


class SearchDefaults(BaseModel):
    """Defaults applied when the CLI does not override them."""

    mode: Mode = "freelance"
    location: Location = "Worldwide"
    category: Category = "All"
    lookback_days: int = Field(default=7, ge=0)


class ProposalConfig(BaseModel):
    """Outreach proposal settings."""

    skills: str = DEFAULT_SKILLS

    @field_validator("skills")
    @classmethod
    def skills_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "skills must not be empty"
            raise ValueError(msg)
        return v.strip()


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    search: SearchDefaults = Field(default_factory=SearchDefaults)
    proposal: ProposalConfig = Field(default_factory=ProposalConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

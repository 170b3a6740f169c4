"""Configuration models and loading for profilekit."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from profilekit.discovery import DEFAULT_INFO_SUFFIX, DEFAULT_SEARCH_PATHS
from profilekit.hooks import SUPPORTED_HOOKS, HookName
from profilekit.loader import DEFAULT_CODE_UNITS

CONFIG_FILENAME = ".profilekit.yaml"


class DiscoveryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    search_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_SEARCH_PATHS))
    info_suffix: str = DEFAULT_INFO_SUFFIX
    code_units: list[str] = Field(default_factory=lambda: list(DEFAULT_CODE_UNITS))


class SiteConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Profiles included by this site in addition to those the base profile declares.
    profiles: list[str] = Field(default_factory=list)


class DispatchConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    include_root_hooks: bool = True
    raise_on_failure: bool = True
    supported_hooks: list[HookName] = Field(default_factory=lambda: list(SUPPORTED_HOOKS))


class ProfileKitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must decode to a mapping")
    return data


def load_effective_config(
    project_path: str | Path,
    org_defaults: dict[str, Any] | None = None,
    system_defaults: dict[str, Any] | None = None,
    runtime_override: dict[str, Any] | None = None,
) -> ProfileKitConfig:
    """Load config with precedence runtime > project .profilekit.yaml > org > system."""
    project = Path(project_path)
    project_config = _load_yaml(project / CONFIG_FILENAME)

    merged: dict[str, Any] = {}
    if system_defaults:
        merged = _deep_merge(merged, system_defaults)
    if org_defaults:
        merged = _deep_merge(merged, org_defaults)
    if project_config:
        merged = _deep_merge(merged, project_config)
    if runtime_override:
        merged = _deep_merge(merged, runtime_override)

    return ProfileKitConfig.model_validate(merged)

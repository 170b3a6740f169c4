"""Shared helpers for CLI command modules."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from profilekit.config import ProfileKitConfig, load_effective_config
from profilekit.installer import ProfileInstaller
from profilekit.services.command_runtime import CommandRuntime

logger = logging.getLogger(__name__)

ALIAS_TO_CANONICAL = {
    "graph": "resolve",
    "catalog": "hooks",
    "serve-ui": "serve",
}


def normalize_command(name: str) -> str:
    return ALIAS_TO_CANONICAL.get(name, name)


def load_yaml_dict(path: str | None) -> dict | None:
    if not path:
        return None
    data = yaml.safe_load(Path(path).read_text())
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must decode to a mapping")
    return data


def load_data_file(path: str | None) -> Any:
    """Read a JSON or YAML document; ``None`` when no path is given."""
    if not path:
        return None
    file_path = Path(path)
    text = file_path.read_text()
    if file_path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_config(args: argparse.Namespace) -> ProfileKitConfig:
    return load_effective_config(
        project_path=args.project_path,
        org_defaults=load_yaml_dict(args.org_config),
        system_defaults=load_yaml_dict(args.system_config),
        runtime_override=load_yaml_dict(args.runtime_override),
    )


def build_installer(args: argparse.Namespace, *, runtime: CommandRuntime) -> ProfileInstaller:
    config = load_config(args)
    source = runtime.declaration_source_cls(
        args.project_path,
        base=args.profile,
        search_paths=config.discovery.search_paths,
        info_suffix=config.discovery.info_suffix,
    )
    loader = runtime.code_loader_cls(config.discovery.code_units)
    return ProfileInstaller(args.profile, config, project_path=args.project_path, source=source, loader=loader)


def add_common_config_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--project-path", default=".", help="Project root containing profiles/")
    cmd.add_argument("--org-config", help="Optional org defaults YAML")
    cmd.add_argument("--system-config", help="Optional system defaults YAML")
    cmd.add_argument("--runtime-override", help="Optional runtime override YAML")


def add_profile_flag(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--profile", required=True, help="Base profile name, e.g. standard")

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from inkwell.core.config import InkwellConfig
from inkwell.core.exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "_config.yml"
ENV_PREFIX = "INKWELL_"

# Flat Jekyll `_config.yml` keys and the nested setting each one feeds.
_JEKYLL_KEYS: dict[str, tuple[str, str]] = {
    "title": ("site", "title"),
    "url": ("site", "url"),
    "baseurl": ("site", "base_path"),
    "author": ("site", "author"),
    "paginate": ("build", "paginate"),
    "paginate_path": ("build", "paginate_path"),
    "permalink": ("build", "permalink"),
    "excerpt_length": ("build", "excerpt_length"),
    "destination": ("paths", "output_dir"),
}


class ConfigLoader:
    """Reads a site's `_config.yml` into an :class:`InkwellConfig`.

    Jekyll's flat keys are folded into the `site`, `build` and `paths`
    sections; environment variables still win over the file.
    """

    def __init__(self, site_root: Path | None = None):
        self.site_root = site_root if site_root is not None else Path.cwd()

    @property
    def config_path(self) -> Path:
        return self.site_root / CONFIG_FILENAME

    def load(self) -> InkwellConfig:
        """Build the configuration: `INKWELL_SECTION__KEY` variables, then `_config.yml`, then defaults.

        Raises:
            ConfigLoadError: If the file is unreadable or a value fails validation.

        """
        file_config = self._normalized_config(self._load_from_file())

        try:
            merged = _overlay(
                InkwellConfig().model_dump(mode="json"),
                file_config,
                skip=_env_defined_paths(os.environ),
            )
            return InkwellConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigLoadError(str(self.config_path), str(e)) from e

    def _normalized_config(self, config_data: dict[str, Any]) -> dict[str, Any]:
        """Fold flat Jekyll keys into sections and pin site_root."""
        normalized: dict[str, Any] = {}

        for key, value in deepcopy(config_data).items():
            if key in _JEKYLL_KEYS:
                section, field = _JEKYLL_KEYS[key]
                normalized.setdefault(section, {})[field] = _jekyll_value(key, value)
            elif key == "feed" and isinstance(value, dict) and "posts_limit" in value:
                normalized.setdefault("build", {})["feed_limit"] = value["posts_limit"]
            elif key in {"site", "build", "paths"}:
                if not isinstance(value, dict):
                    raise ConfigLoadError(
                        str(self.config_path),
                        f"'{key}' must be a dictionary, got {type(value).__name__}",
                    )
                normalized.setdefault(key, {}).update(value)
            else:
                logger.debug("Ignoring unknown configuration key '%s'", key)

        normalized.setdefault("paths", {})["site_root"] = self.site_root
        return normalized

    def _load_from_file(self) -> dict[str, Any]:
        config_path = self.config_path
        if not config_path.is_file():
            return {}

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(str(config_path), f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigLoadError(
                str(config_path),
                f"configuration root must be a mapping, got {type(data).__name__}",
            )
        return data


def _jekyll_value(key: str, value: Any) -> Any:
    # Jekyll allows `author: {name: ..., email: ...}`.
    if key == "author" and isinstance(value, dict):
        return value.get("name")
    if key == "baseurl" and not value:
        return "/"
    return value


def _env_defined_paths(environ: Mapping[str, str], prefix: str = ENV_PREFIX) -> frozenset[tuple[str, ...]]:
    """Setting paths an ``INKWELL_SECTION__KEY`` variable already provides."""
    return frozenset(
        tuple(segment.lower() for segment in name.removeprefix(prefix).split("__") if segment)
        for name in environ
        if name.startswith(prefix) and name != prefix
    )


def _overlay(
    defaults: dict[str, Any],
    file_values: dict[str, Any],
    *,
    skip: frozenset[tuple[str, ...]],
    prefix: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Lay ``file_values`` over ``defaults``; paths in ``skip`` keep their default."""
    result = deepcopy(defaults)
    for name, value in file_values.items():
        path = (*prefix, str(name).lower())
        if path in skip:
            continue
        nested = result.get(name)
        result[name] = (
            _overlay(nested, value, skip=skip, prefix=path)
            if isinstance(value, dict) and isinstance(nested, dict)
            else value
        )
    return result

"""
Project configuration loader.

Loads per-project settings from .docdrift.yaml (camelCase keys):

    style: verbose
    coverage:
      min: 80
      ratchet: true
    docs:
      include: ["docs/**/*.md"]
      exclude: ["docs/legacy/**"]
    require:
      examples: true

Functions:
- load_project_config: Load configuration from YAML file
- save_project_config: Save configuration to YAML file
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml

from docdrift.shared.domain.base_model import BaseDomainModel, to_snake_case
from docdrift.shared.domain.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

PROJECT_CONFIG_FILE = ".docdrift.yaml"
VALID_STYLES = ("minimal", "verbose", "types-only")


def _convert_keys_to_snake_case(data: Any) -> Any:
    """Recursively convert dictionary keys from camelCase to snake_case."""
    if isinstance(data, dict):
        return {to_snake_case(str(key)): _convert_keys_to_snake_case(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_convert_keys_to_snake_case(item) for item in data]
    return data


@dataclass
class CoverageConfig(BaseDomainModel):
    min: Optional[int] = None
    ratchet: bool = False


@dataclass
class DocsConfig(BaseDomainModel):
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)


@dataclass
class RequireConfig(BaseDomainModel):
    """Per-rule overrides on top of the style preset (None keeps the preset)."""

    description: Optional[bool] = None
    params: Optional[bool] = None
    returns: Optional[bool] = None
    examples: Optional[bool] = None

    def overrides(self) -> Dict[str, bool]:
        return {
            name: value
            for name, value in (
                ("description", self.description),
                ("params", self.params),
                ("returns", self.returns),
                ("examples", self.examples),
            )
            if value is not None
        }


@dataclass
class ProjectConfig(BaseDomainModel):
    """Settings read from .docdrift.yaml; a missing style falls back to the environment."""

    style: Optional[str] = None
    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    require: RequireConfig = field(default_factory=RequireConfig)


def _expect_mapping(value: Any, key: str, config_path: Path) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"'{key}' must be a mapping in {config_path}",
            context={"key": key, "path": str(config_path)},
        )
    return value


def _expect_str_list(value: Any, key: str, config_path: Path) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(
            f"'{key}' must be a list of glob strings in {config_path}",
            context={"key": key, "path": str(config_path)},
        )
    return list(value)


def _parse_config(data: Dict[str, Any], config_path: Path) -> ProjectConfig:
    style = data.get("style")
    if style is not None and style not in VALID_STYLES:
        raise ConfigurationError(
            f"Unknown style '{style}' in {config_path}; expected one of {', '.join(VALID_STYLES)}",
            context={"style": style},
        )

    coverage_data = _expect_mapping(data.get("coverage"), "coverage", config_path)
    minimum = coverage_data.get("min")
    if minimum is not None and (isinstance(minimum, bool) or not isinstance(minimum, int) or not 0 <= minimum <= 100):
        raise ConfigurationError(
            f"'coverage.min' must be an integer between 0 and 100 in {config_path}",
            context={"value": minimum},
        )

    docs_data = _expect_mapping(data.get("docs"), "docs", config_path)
    require_data = _expect_mapping(data.get("require"), "require", config_path)
    for key, value in require_data.items():
        if value is not None and not isinstance(value, bool):
            raise ConfigurationError(
                f"'require.{key}' must be true or false in {config_path}",
                context={"key": key, "value": value},
            )

    return ProjectConfig(
        style=style,
        coverage=CoverageConfig(min=minimum, ratchet=bool(coverage_data.get("ratchet", False))),
        docs=DocsConfig(
            include=_expect_str_list(docs_data.get("include"), "docs.include", config_path),
            exclude=_expect_str_list(docs_data.get("exclude"), "docs.exclude", config_path),
        ),
        require=RequireConfig(
            description=require_data.get("description"),
            params=require_data.get("params"),
            returns=require_data.get("returns"),
            examples=require_data.get("examples"),
        ),
    )


def load_project_config(
    config_path: Path | None = None,
    project_root: Path | None = None,
) -> ProjectConfig:
    """
    Load project configuration from YAML file.

    Args:
        config_path: Path to .docdrift.yaml
        project_root: Project root directory (uses <root>/.docdrift.yaml)

    Returns:
        ProjectConfig loaded from file, or defaults when the file is absent

    Raises:
        ConfigurationError: If YAML is invalid or values have the wrong shape
    """
    if config_path is None:
        if project_root is None:
            raise ConfigurationError("Either config_path or project_root must be provided")
        config_path = project_root / PROJECT_CONFIG_FILE

    if not config_path.exists():
        return ProjectConfig()

    try:
        content = config_path.read_text(encoding="utf-8")
        data = yaml.safe_load(content) if content.strip() else {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", context={"path": str(config_path)}) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping", context={"path": str(config_path)})

    config = _parse_config(_convert_keys_to_snake_case(data), config_path)
    logger.debug("project_config_loaded", path=str(config_path), style=config.style)
    return config


def save_project_config(config: ProjectConfig, config_path: Path) -> None:
    """Save project configuration to YAML file (camelCase keys)."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_json(), f, default_flow_style=False, sort_keys=False)

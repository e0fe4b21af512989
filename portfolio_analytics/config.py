"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``PORTFOLIO_ANALYTICS_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Every recompute function and CLI command receives an ``AppConfig`` instance —
thresholds such as the at-risk cut-off or the default forecast horizon are
never hard-coded at the call site.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Filesystem locations of the two input CSVs and the export directory."""

    model_config = ConfigDict(frozen=True)

    projects_csv: str = "data/projects.csv"
    change_orders_csv: str = "data/change_orders.csv"
    output_dir: str = "data/outputs"


class ForecastConfig(BaseModel):
    """Predictive view settings."""

    model_config = ConfigDict(frozen=True)

    default_horizon: int = 3
    horizon_options: list[int] = [1, 2, 3, 4, 5]
    pipeline_years: int = 3

    @field_validator("default_horizon", "pipeline_years")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Forecast horizon must be >= 1, got {v}.")
        return v


class RiskConfig(BaseModel):
    """Risk score thresholds and spread-score jitter amplitude."""

    model_config = ConfigDict(frozen=True)

    at_risk_threshold: int = 70
    high_risk_threshold: int = 80
    spread_jitter: float = 2.0

    @field_validator("at_risk_threshold", "high_risk_threshold")
    @classmethod
    def validate_threshold(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"Risk thresholds must be in [0, 100], got {v}.")
        return v

    @field_validator("spread_jitter")
    @classmethod
    def validate_jitter(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"spread_jitter must be non-negative, got {v}.")
        return v


class RecommendConfig(BaseModel):
    """Prescriptive view settings.

    ``seed`` fixes the random source used for action tie-breaks, impact /
    effort sampling and spread-score jitter.  ``None`` means a fresh,
    unseeded generator per recompute.
    """

    model_config = ConfigDict(frozen=True)

    default_top_n: int = 10
    top_n_options: list[int] = [5, 10, 20, 50]
    seed: Optional[int] = None


class DiagnosticConfig(BaseModel):
    """Diagnostic view settings."""

    model_config = ConfigDict(frozen=True)

    top_reasons: int = 7


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    forecast: ForecastConfig = ForecastConfig()
    risk: RiskConfig = RiskConfig()
    recommend: RecommendConfig = RecommendConfig()
    diagnostic: DiagnosticConfig = DiagnosticConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def resolve_data_path(path: str | Path) -> Path:
    """Anchor a configured path at the project root.

    Relative ``data.*`` paths in the TOML are written relative to the
    repository, not to whatever directory the CLI or dashboard is started
    from.  Absolute paths are returned unchanged.
    """
    path = Path(path)
    if path.is_absolute():
        return path
    return _find_project_root() / path


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply PORTFOLIO_ANALYTICS_* env vars to the raw config dict.

    Supported overrides:
      PORTFOLIO_ANALYTICS_DATA_DIR   → both CSV paths under this directory
      PORTFOLIO_ANALYTICS_LOG_LEVEL  → raw["logging"]["level"]
      PORTFOLIO_ANALYTICS_SEED       → raw["recommend"]["seed"]
      PORTFOLIO_ANALYTICS_DEBUG      → raw["debug"]
    """
    if data_dir := os.environ.get("PORTFOLIO_ANALYTICS_DATA_DIR"):
        data = raw.setdefault("data", {})
        data["projects_csv"] = str(Path(data_dir) / "projects.csv")
        data["change_orders_csv"] = str(Path(data_dir) / "change_orders.csv")

    if log_level := os.environ.get("PORTFOLIO_ANALYTICS_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if seed := os.environ.get("PORTFOLIO_ANALYTICS_SEED"):
        raw.setdefault("recommend", {})["seed"] = int(seed)

    if debug := os.environ.get("PORTFOLIO_ANALYTICS_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        forecast=ForecastConfig(**raw.get("forecast", {})),
        risk=RiskConfig(**raw.get("risk", {})),
        recommend=RecommendConfig(**raw.get("recommend", {})),
        diagnostic=DiagnosticConfig(**raw.get("diagnostic", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )

"""
Portfolio Analytics — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load the project / change-order snapshot (both CSVs concurrently).
  4. Recompute the requested view.
  5. Report result to stdout.

Install and run::

    pip install -e .
    portfolio-analytics --help
    portfolio-analytics validate-config
    portfolio-analytics descriptive --year 2023
    portfolio-analytics diagnostic
    portfolio-analytics predictive --horizon 5
    portfolio-analytics prescriptive --top-n 20 --seed 7
    portfolio-analytics export --format parquet --seed 7
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="portfolio-analytics",
    help="Construction portfolio analytics — descriptive, diagnostic, predictive, prescriptive.",
    add_completion=False,
)

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json", "parquet")

# Shared options.
_CONFIG_OPT = typer.Option(None, "--config", help="Path to TOML config file.")
_PROJECTS_OPT = typer.Option(
    None, "--projects", help="Override projects CSV path from config."
)
_CO_OPT = typer.Option(
    None, "--change-orders", help="Override change-orders CSV path from config."
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from portfolio_analytics.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from portfolio_analytics.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_snapshot_or_exit(config, projects: Optional[str], change_orders: Optional[str]):
    """Load both CSVs; log and exit 1 on ``DataFetchError``.

    Paths passed on the command line are taken as given (relative to the
    working directory); paths from config are anchored at the project root.
    """
    from portfolio_analytics.config import resolve_data_path
    from portfolio_analytics.exceptions import DataFetchError
    from portfolio_analytics.ingestion.csv_loader import load_snapshot

    projects_path = Path(projects) if projects else resolve_data_path(config.data.projects_csv)
    co_path = (
        Path(change_orders) if change_orders
        else resolve_data_path(config.data.change_orders_csv)
    )
    try:
        return load_snapshot(projects_path, co_path)
    except DataFetchError as exc:
        logger.error("Data load failed: %s", exc, extra={"path": str(exc.path)})
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _year_or_exit(year: Optional[str]) -> Optional[int]:
    from portfolio_analytics.pipeline.state import parse_year_filter

    try:
        return parse_year_filter(year)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _check_option(name: str, value: int, allowed: list[int]) -> None:
    """Warn (not fail) when a selector value is outside the configured options."""
    if value < 1:
        typer.echo(f"[ERROR] {name} must be >= 1, got {value}.", err=True)
        raise typer.Exit(code=1)
    if allowed and value not in allowed:
        typer.echo(f"[WARN] {name}={value} is not one of the configured options {allowed}.")


def _year_label(year: Optional[int]) -> str:
    return "Year: all" if year is None else f"Year: {year}"


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Projects CSV:       {config.data.projects_csv}")
    typer.echo(f"  Change orders CSV:  {config.data.change_orders_csv}")
    typer.echo(f"  Output dir:         {config.data.output_dir}")
    typer.echo(f"  Forecast horizon:   {config.forecast.default_horizon}")
    typer.echo(f"  At-risk threshold:  {config.risk.at_risk_threshold}")
    typer.echo(f"  High-risk threshold:{config.risk.high_risk_threshold}")
    typer.echo(f"  Top-N default:      {config.recommend.default_top_n}")
    typer.echo(f"  Seed:               {config.recommend.seed}")
    typer.echo(f"  Log level:          {config.logging.level}")
    typer.echo(f"  Debug mode:         {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("descriptive")
def descriptive(
    year: Optional[str] = typer.Option(
        None, "--year", help="Start year to show, or 'all' (default)."
    ),
    config_path: Optional[str] = _CONFIG_OPT,
    projects: Optional[str] = _PROJECTS_OPT,
    change_orders: Optional[str] = _CO_OPT,
) -> None:
    """Project counts, planned vs actual totals and average cost by period."""
    from portfolio_analytics.pipeline.views import recompute_descriptive
    from portfolio_analytics.reporting.formatters import format_view_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    year_value = _year_or_exit(year)
    snapshot = _load_snapshot_or_exit(config, projects, change_orders)

    view = recompute_descriptive(snapshot, year_value)
    typer.echo(
        format_view_report("Descriptive — Portfolio Overview", _year_label(year_value), view.kpis, view.charts)
    )


@app.command("diagnostic")
def diagnostic(
    year: Optional[str] = typer.Option(
        None, "--year", help="Year to show, or 'all' (default)."
    ),
    config_path: Optional[str] = _CONFIG_OPT,
    projects: Optional[str] = _PROJECTS_OPT,
    change_orders: Optional[str] = _CO_OPT,
) -> None:
    """Cost / schedule variance and change-order diagnostics.

    Projects are filtered by start year; change orders by their own date.
    """
    from portfolio_analytics.pipeline.views import recompute_diagnostic
    from portfolio_analytics.reporting.formatters import format_view_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    year_value = _year_or_exit(year)
    snapshot = _load_snapshot_or_exit(config, projects, change_orders)

    view = recompute_diagnostic(snapshot, year_value, config.diagnostic.top_reasons)
    typer.echo(
        format_view_report("Diagnostic — Variance & Change Orders", _year_label(year_value), view.kpis, view.charts)
    )


@app.command("predictive")
def predictive(
    horizon: Optional[int] = typer.Option(
        None, "--horizon", help="Years to forecast. Uses config default if omitted."
    ),
    config_path: Optional[str] = _CONFIG_OPT,
    projects: Optional[str] = _PROJECTS_OPT,
    change_orders: Optional[str] = _CO_OPT,
) -> None:
    """Trend forecasts, overrun probability, risk distribution and pipeline."""
    from portfolio_analytics.pipeline.views import recompute_predictive
    from portfolio_analytics.reporting.formatters import format_view_report, pct_str

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    h = horizon if horizon is not None else config.forecast.default_horizon
    _check_option("--horizon", h, config.forecast.horizon_options)
    snapshot = _load_snapshot_or_exit(config, projects, change_orders)

    view = recompute_predictive(snapshot, h, config)
    extra = (
        f"  Overrun probability: baseline {pct_str(view.overrun.baseline)}, "
        f"adjusted {pct_str(view.overrun.adjusted)}"
    )
    typer.echo(
        format_view_report("Predictive — Forecasts & Risk", f"Horizon: {h} year(s)", view.kpis, view.charts, extra)
    )


@app.command("prescriptive")
def prescriptive(
    top_n: Optional[int] = typer.Option(
        None, "--top-n", help="Rows in the recommendation table. Uses config default if omitted."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Random seed for reproducible recommendations."
    ),
    config_path: Optional[str] = _CONFIG_OPT,
    projects: Optional[str] = _PROJECTS_OPT,
    change_orders: Optional[str] = _CO_OPT,
) -> None:
    """Recommended actions, savings estimates and the priority matrix."""
    from portfolio_analytics.pipeline.state import seeded_rng
    from portfolio_analytics.pipeline.views import recompute_prescriptive
    from portfolio_analytics.reporting.formatters import (
        format_recommendation_table,
        format_view_report,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    n = top_n if top_n is not None else config.recommend.default_top_n
    _check_option("--top-n", n, config.recommend.top_n_options)
    snapshot = _load_snapshot_or_exit(config, projects, change_orders)

    view = recompute_prescriptive(snapshot, n, config, seeded_rng(config, seed))
    typer.echo(
        format_view_report(
            "Prescriptive — Recommended Actions",
            f"Top {n}",
            view.kpis,
            view.charts,
            format_recommendation_table(view.table),
        )
    )


@app.command("export")
def export(
    fmt: str = typer.Option(
        "csv", "--format", help="Output format: csv, json or parquet."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Random seed for reproducible recommendations."
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", help="Override output directory from config."
    ),
    config_path: Optional[str] = _CONFIG_OPT,
    projects: Optional[str] = _PROJECTS_OPT,
    change_orders: Optional[str] = _CO_OPT,
) -> None:
    """Export KPIs and recommendations for BI tools.

    \b
      csv      — recommendations_<date>.csv + kpis_<date>.csv
      parquet  — recommendations_<date>.parquet + kpis_<date>.csv
      json     — views_<date>.json (KPIs + chart descriptions per view)
    """
    from portfolio_analytics.config import resolve_data_path
    from portfolio_analytics.pipeline.state import ViewFilter, seeded_rng
    from portfolio_analytics.pipeline.views import recompute
    from portfolio_analytics.reporting.export import (
        export_to_csv,
        export_to_json,
        export_to_parquet,
        flatten_kpis_for_export,
        flatten_recommendations_for_export,
        view_to_dict,
    )

    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        typer.echo(
            f"[ERROR] Unsupported format '{fmt}'. Use one of: {', '.join(EXPORT_FORMATS)}.",
            err=True,
        )
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    snapshot = _load_snapshot_or_exit(config, projects, change_orders)

    view_filter = ViewFilter(
        horizon=config.forecast.default_horizon,
        top_n=config.recommend.default_top_n,
    )
    views = recompute(snapshot, view_filter, config, seeded_rng(config, seed))
    named = {
        "descriptive":  views.descriptive,
        "diagnostic":   views.diagnostic,
        "predictive":   views.predictive,
        "prescriptive": views.prescriptive,
    }

    out_dir = Path(output_dir) if output_dir else resolve_data_path(config.data.output_dir)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    written: list[Path] = []

    if fmt == "json":
        payload = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "projects": len(snapshot.projects),
            "change_orders": len(snapshot.change_orders),
            "views": {name: view_to_dict(v) for name, v in named.items()},
        }
        written.append(export_to_json(payload, out_dir / f"views_{stamp}.json"))
    else:
        rows = flatten_recommendations_for_export(views.prescriptive.recommendations)
        if fmt == "parquet":
            written.append(export_to_parquet(rows, out_dir / f"recommendations_{stamp}.parquet"))
        else:
            written.append(export_to_csv(rows, out_dir / f"recommendations_{stamp}.csv"))
        written.append(
            export_to_csv(flatten_kpis_for_export(named), out_dir / f"kpis_{stamp}.csv")
        )

    for path in written:
        typer.echo(f"  Wrote {path}")
    typer.echo("[OK] Export complete.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()

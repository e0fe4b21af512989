"""
portfolio_analytics.reporting — chart descriptions, terminal formatting, export.

Modules:
  charts     — ChartSpec builders and declarative axis options.
  formatters — Number formatters and ASCII report formatters for Typer CLI
               commands.
  export     — CSV / JSON / Parquet flat-file export helpers.
"""

"""
portfolio_analytics.ingestion — tabular data source.

Modules:
  csv_loader — lenient CSV parsing of projects and change orders, plus the
               concurrent two-file snapshot load.
"""

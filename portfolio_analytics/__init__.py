"""Portfolio Analytics — descriptive, diagnostic, predictive and prescriptive
summaries over project and change-order datasets."""

__version__ = "0.1.0"

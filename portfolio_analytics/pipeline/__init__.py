"""
portfolio_analytics.pipeline — loaded-data state and view recomputation.

Modules:
  state — immutable PortfolioSnapshot, ViewFilter and year-filter parsing.
  views — recompute_* pure functions producing the four view models.
"""

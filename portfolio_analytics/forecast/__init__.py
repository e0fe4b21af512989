"""
Predictive layer — deterministic point forecasts over yearly series.

Modules
-------
trend    : TrendFit + fit_trend() + project_trend() + pipeline_forecast().
overrun  : OverrunProbability + estimate_overrun_probability() and the
           diagnostic variance KPIs.
"""

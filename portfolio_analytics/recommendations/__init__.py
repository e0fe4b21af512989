"""
Recommendation engine: scores project risk and converts per-project drivers
into ranked, categorised actions with savings estimates.

Modules
-------
risk     : rule_risk_score() + spread_risk_scores() + histogram helpers —
           pure functions, no I/O.
actions  : choose_action() + sample_range() + estimate_savings().
ranker   : build_recommendations() + top_n() + action_mix() + KPI helpers.
"""

"""Digital Product Passport data quality.

Completeness, accuracy, consistency and recency sub-scores combined into
a weighted overall score and letter grade, with structured issues and
prioritised recommendations.

Deterministic - no LLM calls.
"""

"""External assessment capabilities (LLM-backed suggestions).

Providers only suggest values. Every suggestion is re-validated by the
deterministic scorers before it is stored.
"""

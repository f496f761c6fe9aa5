"""Deterministic scoring engines: circularity index and double materiality."""

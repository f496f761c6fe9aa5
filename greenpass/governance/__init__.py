"""Publication readiness, data-mode enforcement and the hash-chained audit log."""

"""Liveness and readiness routes, including the loaded fork-mapping count."""

"""Grafik package: formula model, sampler, probe, renderer, API and CLI for 2-D plots."""

__all__ = [
    "config",
    "parser",
    "algebra",
    "formula",
    "sampler",
    "probe",
    "plotting",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "resolve",
    "sample",
    "probe",
    "plot",
    "validate_formula",
]

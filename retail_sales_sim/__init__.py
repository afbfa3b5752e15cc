"""Reproducible retail point-of-sale simulation and sales reporting."""

__version__ = "0.1.0"

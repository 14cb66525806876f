# src/core/__init__.py — v1
"""Domain models, errors and vector math shared across the engine."""

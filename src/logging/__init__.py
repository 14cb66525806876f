# src/logging/__init__.py — v1
"""Structured logging: formatters, request context and file rotation."""

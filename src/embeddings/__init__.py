# src/embeddings/__init__.py — v1
"""Embedding gateway: provider adapters behind one async interface."""

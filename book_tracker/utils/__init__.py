"""Utility helpers (logging, session identity)."""

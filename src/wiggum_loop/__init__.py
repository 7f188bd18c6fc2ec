"""Wiggum Loop: a builder/verifier harness around agent sessions."""

__version__ = "0.1.0"

"""Fenced div recognition and live-preview derivation for markdown documents."""

__version__ = "0.1.0"

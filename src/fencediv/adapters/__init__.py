"""Adapters for settings persistence, ids and HTML rendering."""

"""Inline ghost-text autocomplete engine for a structured document editor."""

"""Snapshot reporters — Rich terminal view and JSON."""

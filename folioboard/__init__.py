"""Folioboard - ordering engine and CLI for a portfolio Kanban board."""

__version__ = "0.1.0"

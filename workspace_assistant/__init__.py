"""Workspace chat assistant: retrieval pipeline over workspace messages."""

__version__ = "0.1.0"

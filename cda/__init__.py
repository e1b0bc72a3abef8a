"""Codebase Deep Analyzer."""

__version__ = "0.1.0"

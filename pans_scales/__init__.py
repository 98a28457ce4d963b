"""Scoring and diagnostic classification for PANS/PANDAS clinical instruments."""

__version__ = "0.1.0"

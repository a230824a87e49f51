"""Databasin CLI client and pipeline enrichment engine."""

__version__ = "0.1.0"

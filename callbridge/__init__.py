"""Vodia PBX <-> GoHighLevel call-event router."""

__version__ = "1.0.0"

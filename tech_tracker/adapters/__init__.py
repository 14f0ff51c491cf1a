"""Adapter modules for external integrations."""

from .api import TechTrackerClient

__all__ = ["TechTrackerClient"]

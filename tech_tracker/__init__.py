"""Client for the Tech Tracker technician status API."""

__version__ = "0.1.0"

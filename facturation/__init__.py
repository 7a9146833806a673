"""Invoice billing and status-workflow service."""

__version__ = "1.0.0"

"""CleanCity civic issue desk: citizen reports, nearest-worker assignment, 24h SLA tracking."""

__version__ = "1.0.0"

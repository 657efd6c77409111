"""Live status dashboard: snapshot reconciliation, windowing and charting."""

__version__ = "1.1.7"

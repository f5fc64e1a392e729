"""Exceptions raised by the analysis driver."""


class AnalysisCancelledError(Exception):
    """Raised when an analysis run is cancelled between windows."""

"""
Exceptions raised by dashboard components.

The web layer maps these to HTTP status codes; anything else propagates.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for dashboard errors surfaced to the user."""


class ModelNotReadyError(DashboardError):
    """Detection requested while the model is loading or failed to load."""


class ControlDisabledError(DashboardError):
    """A control was used while the UI would have it disabled."""


class SourceBusyError(DashboardError):
    """A frame source is already bound; Reset first."""


class SourceUnavailableError(DashboardError):
    """Camera could not be opened (missing device or access denied)."""


class UnsupportedMediaError(DashboardError):
    """Uploaded file is neither a supported image nor a supported video."""

"""Django Audit Log - Consent and agreement audit events.

Public API:
    log_event: Record an audit event (consent granted, agreement deleted, ...)

Selectors:
    list_events, get_event, get_stats_overview, export_csv
"""

__version__ = "0.2.0"


def log_event(*args, **kwargs):
    """Record an audit event."""
    from .api import log_event as _log_event
    return _log_event(*args, **kwargs)


__all__ = ["log_event"]

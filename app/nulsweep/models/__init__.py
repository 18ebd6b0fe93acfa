"""Data models shared across nulsweep."""

from nulsweep.models.history import RunRecord, create_run_record

__all__ = ["RunRecord", "create_run_record"]

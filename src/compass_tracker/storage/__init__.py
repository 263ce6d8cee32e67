"""Persistent visit storage."""

from .visit_store import VisitRecord, VisitStore

__all__ = ["VisitRecord", "VisitStore"]

"""Tracker store package."""

from lttr.store.tracker import TrackerStore

__all__ = ["TrackerStore"]

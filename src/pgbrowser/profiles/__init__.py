"""Saved connection profiles."""
from pgbrowser.profiles.models import ConnectionProfile
from pgbrowser.profiles.store import ProfileStore

__all__ = ["ConnectionProfile", "ProfileStore"]

"""
Adapters layer - Storage and external collaborators.
"""

from .availability_store import AvailabilityStore
from .database import Database
from .session_store import SessionStore
from .user_directory import ConfigUserDirectory, UserDirectory, UserSummary

__all__ = [
    "AvailabilityStore",
    "ConfigUserDirectory",
    "Database",
    "SessionStore",
    "UserDirectory",
    "UserSummary",
]

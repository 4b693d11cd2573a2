"""
Data management infrastructure for sessions, profiles and achievements.
"""

from .conversations import record_to_dict, record_from_dict, profile_to_dict, profile_from_dict
from .profile_store import ProfileStore

__all__ = [
    'record_to_dict',
    'record_from_dict',
    'profile_to_dict',
    'profile_from_dict',
    'ProfileStore'
]

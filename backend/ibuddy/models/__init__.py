"""
Stored entities (pydantic) and the SQLAlchemy record backing the key-value store.
"""
from ibuddy.models.record import Record
from ibuddy.models.user import Role, User
from ibuddy.models.mentee import Mentee, MenteeStatus, Note
from ibuddy.models.asset import Asset, AssetHost, AssetType
from ibuddy.models.faq import FAQ

__all__ = ["Record", "Role", "User", "Mentee", "MenteeStatus", "Note", "Asset", "AssetHost", "AssetType", "FAQ"]

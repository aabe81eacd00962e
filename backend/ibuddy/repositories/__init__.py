from ibuddy.repositories.assets import AssetDeletion, AssetRepository
from ibuddy.repositories.faqs import FAQRepository
from ibuddy.repositories.mentees import MenteeRepository
from ibuddy.repositories.users import UserRepository

__all__ = ["AssetDeletion", "AssetRepository", "FAQRepository", "MenteeRepository", "UserRepository"]

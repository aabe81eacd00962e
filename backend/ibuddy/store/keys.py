"""
Composite key encoding for the key-value store.

Every stored key is ``"<Entity>#<id>"``. Entity names never contain ``#``, so the
prefix of an encoded key is always unambiguous and decoding (strip the prefix) is the
exact inverse of encoding. Child items (notes) share their parent's partition key and
carry a typed sort key:

    pk = "Mentee#<mentee id>", sk = "Mentee#<mentee id>"   -> the mentee itself
    pk = "Mentee#<mentee id>", sk = "Note#<note id>"       -> one of its notes
"""
from dataclasses import dataclass

SEPARATOR = "#"

USER = "User"
MENTEE = "Mentee"
NOTE = "Note"
ASSET = "Asset"
FAQ = "FAQ"

ENTITY_NAMES = (USER, MENTEE, NOTE, ASSET, FAQ)


def _check_entity_name(name: str) -> str:
    if not name or SEPARATOR in name:
        raise ValueError(f"Invalid entity name: {name!r}")
    return name


for _name in ENTITY_NAMES:
    _check_entity_name(_name)


@dataclass(frozen=True)
class EntityKey:
    """Key of a root item: entity name plus its logical id."""

    entity: str
    id: str

    def __post_init__(self):
        _check_entity_name(self.entity)
        if not self.id:
            raise ValueError("Entity id must not be empty")

    @property
    def prefix(self) -> str:
        return self.entity + SEPARATOR

    def encode(self) -> str:
        return self.prefix + self.id

    @classmethod
    def decode(cls, raw: str, entity: str) -> "EntityKey":
        """Inverse of encode(); raises ValueError if `raw` is not a key of `entity`."""
        prefix = _check_entity_name(entity) + SEPARATOR
        if not raw.startswith(prefix) or len(raw) == len(prefix):
            raise ValueError(f"{raw!r} is not a {entity} key")
        return cls(entity, raw[len(prefix):])

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class ChildKey:
    """Key of an item stored in its parent's item collection."""

    parent: EntityKey
    child_type: str
    child_id: str

    def __post_init__(self):
        _check_entity_name(self.child_type)
        if not self.child_id:
            raise ValueError("Child id must not be empty")

    @property
    def partition_key(self) -> str:
        return self.parent.encode()

    @property
    def sort_key(self) -> str:
        return self.child_type + SEPARATOR + self.child_id

    @classmethod
    def decode(cls, partition_key: str, sort_key: str, parent_entity: str, child_type: str) -> "ChildKey":
        parent = EntityKey.decode(partition_key, parent_entity)
        child = EntityKey.decode(sort_key, child_type)
        return cls(parent, child_type, child.id)

    @staticmethod
    def sort_prefix(child_type: str) -> str:
        """Sort key prefix selecting every child of `child_type` in a partition."""
        return _check_entity_name(child_type) + SEPARATOR


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def user_key(email: str) -> EntityKey:
    return EntityKey(USER, normalize_email(email))


def user_id_from_email(email: str) -> str:
    """User ids are derived from the (case-insensitive) email, never generated."""
    return user_key(email).encode()


def mentee_key(mentee_id: str) -> EntityKey:
    return EntityKey(MENTEE, mentee_id)


def note_key(mentee_id: str, note_id: str) -> ChildKey:
    return ChildKey(mentee_key(mentee_id), NOTE, note_id)


def asset_key(asset_id: str) -> EntityKey:
    return EntityKey(ASSET, asset_id)


def faq_key(faq_id: str) -> EntityKey:
    return EntityKey(FAQ, faq_id)

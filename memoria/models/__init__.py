from .kinds import EntityKind, RelationshipKind
from .mood import Mood, MoodTag, MoodActivity, MoodMetadata
from .place import Place, PlaceMood
from .person import Person, PersonTag
from .food import FoodEntry
from .memory import Memory
from .relationship import EntityRelationship

__all__ = [
    "EntityKind",
    "RelationshipKind",
    "Mood",
    "MoodTag",
    "MoodActivity",
    "MoodMetadata",
    "Place",
    "PlaceMood",
    "Person",
    "PersonTag",
    "FoodEntry",
    "Memory",
    "EntityRelationship",
]

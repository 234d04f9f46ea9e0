"""
Entity kinds and relationship kinds shared by every store.
"""
import enum


class EntityKind(str, enum.Enum):
    mood = "mood"
    place = "place"
    person = "person"
    food = "food"
    memory = "memory"


class RelationshipKind:
    AT_PLACE             = "at_place"
    HAS_MOOD             = "has_mood"
    HAS_FOOD             = "has_food"
    HAS_MEMORY           = "has_memory"
    WITH_PERSON          = "with_person"
    EXPERIENCED_WITH     = "experienced_with"
    ASSOCIATED_WITH_MOOD = "associated_with_mood"
    ASSOCIATED_WITH_FOOD = "associated_with_food"
    ATE_FOOD             = "ate_food"
    IN_MEMORY            = "in_memory"

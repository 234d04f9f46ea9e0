"""
Unit tests for write-time reference resolution.
"""
from datetime import datetime, timezone

import pytest

from conftest import make_mood
from memoria.core.errors import EntityValidationError, StorageFailureError
from memoria.models.kinds import RelationshipKind
from memoria.repositories.records import FoodRecord, MemoryRecord, PersonRecord, PlaceRecord
from memoria.services.resolver import FOOD_MOOD_TAG, social_context_person


class TestSocialContextPerson:
    @pytest.mark.parametrize("context, expected", [
        ("With Anna", "Anna"),
        ("with  Ben Smith ", "Ben Smith"),
        ("With strangers", None),
        ("With a crowd", None),
        ("Alone", None),
        ("", None),
        (None, None),
    ])
    def test_parses_companion(self, context, expected):
        assert social_context_person(context) == expected


class TestSaveMood:
    def test_location_reuses_place_by_normalized_name(self, services):
        resolver = services.resolver
        first = resolver.save_mood(make_mood(location="Home"))
        second = resolver.save_mood(make_mood(location=" home "))

        places = services.repos.places.list_in_insertion_order()
        assert len(places) == 1
        place_id = places[0].id
        assert first.links[0].target_id == place_id
        assert second.links[0].target_id == place_id
        assert sorted(services.repos.places.get_place_moods(place_id)) == sorted(
            [first.entity_id, second.entity_id]
        )

    def test_location_creates_bidirectional_edges(self, services):
        result = services.resolver.save_mood(make_mood(location="Office"))
        place = services.repos.places.find_by_name("office")
        graph = services.graph
        assert graph.find_edge("mood", result.entity_id, "place", place.id, RelationshipKind.AT_PLACE)
        assert graph.find_edge("place", place.id, "mood", result.entity_id, RelationshipKind.HAS_MOOD)
        assert result.created is True
        assert result.errors == []

    def test_people_by_id_or_name(self, services):
        anna = services.repos.people.create(PersonRecord(name="Anna"))
        result = services.resolver.save_mood(make_mood(), people=[anna, "Ben", "ben "])

        people = services.repos.people.list_in_insertion_order()
        assert [p.name for p in people] == ["Anna", "Ben"]
        linked = {link.target_id for link in result.links}
        assert linked == {p.id for p in people}
        for link in result.links:
            assert link.forward == RelationshipKind.WITH_PERSON
            assert link.inverse == RelationshipKind.EXPERIENCED_WITH

    def test_social_context_links_companion(self, services):
        result = services.resolver.save_mood(make_mood(social_context="With Clara"))
        clara = services.repos.people.find_by_name("clara")
        assert clara is not None
        assert clara.context == "Generated from mood entry"
        assert services.graph.find_edge(
            "person", clara.id, "mood", result.entity_id, RelationshipKind.ASSOCIATED_WITH_MOOD
        )

    def test_anonymous_company_creates_nobody(self, services):
        services.resolver.save_mood(make_mood(social_context="With strangers"))
        assert services.repos.people.count() == 0

    def test_invalid_mood_propagates_and_links_nothing(self, services):
        with pytest.raises(EntityValidationError):
            services.resolver.save_mood(make_mood(rating=7, location="Home"))
        assert services.repos.places.count() == 0
        assert services.graph.count() == 0

    def test_link_failure_does_not_fail_the_save(self, services, monkeypatch):
        def broken_link(*args, **kwargs):
            raise StorageFailureError("relationships", "create_edge")

        monkeypatch.setattr(services.graph, "link", broken_link)
        result = services.resolver.save_mood(make_mood(location="Home"), people=["Anna"])

        assert services.repos.moods.get_by_id(result.entity_id) is not None
        assert result.links == []
        assert len(result.errors) == 2

    def test_one_failing_reference_does_not_block_the_others(self, services, monkeypatch):
        def flaky_place(name):
            raise StorageFailureError("places", "create")

        monkeypatch.setattr(services.resolver, "find_or_create_place", flaky_place)
        result = services.resolver.save_mood(make_mood(location="Home"), people=["Anna"])

        assert len(result.errors) == 1
        assert "Home" in result.errors[0]
        assert len(result.links) == 1
        assert services.repos.moods.count() == 1

    def test_resave_updates_and_does_not_duplicate_edges(self, services):
        resolver = services.resolver
        first = resolver.save_mood(make_mood(location="Home"))
        mood = services.repos.moods.get_by_id(first.entity_id)
        mood.notes = "edited"
        second = resolver.save_mood(mood)

        assert second.created is False
        assert second.entity_id == first.entity_id
        assert services.repos.moods.get_by_id(first.entity_id).notes == "edited"
        assert services.graph.count() == 2


class TestSaveFood:
    def _food(self, **overrides):
        fields = {"name": "Ramen", "date": datetime(2026, 3, 2, 19, tzinfo=timezone.utc)}
        fields.update(overrides)
        return FoodRecord(**fields)

    def test_embedded_mood_becomes_linked_mood(self, services):
        result = services.resolver.save_food(self._food(mood_rating=5, mood_emotion="happy"))
        (mood,) = services.repos.moods.list()
        assert mood.rating == 5
        assert mood.emotion == "happy"
        assert mood.tags == [FOOD_MOOD_TAG]
        assert mood.notes == "Added while tracking food: Ramen"
        assert services.graph.find_edge("food", result.entity_id, "mood", mood.id, RelationshipKind.HAS_MOOD)
        assert services.graph.find_edge("mood", mood.id, "food", result.entity_id, RelationshipKind.ASSOCIATED_WITH_FOOD)

    def test_resave_updates_the_linked_mood(self, services):
        first = services.resolver.save_food(self._food(mood_rating=2, mood_emotion="meh"))
        food = services.repos.food.get_by_id(first.entity_id)
        food.mood_rating = 4
        food.mood_emotion = "content"
        services.resolver.save_food(food)

        (mood,) = services.repos.moods.list()
        assert mood.rating == 4
        assert mood.emotion == "content"

    def test_invalid_embedded_mood_is_reported_not_raised(self, services):
        result = services.resolver.save_food(self._food(mood_rating=11, mood_emotion="ecstatic"))
        assert services.repos.food.get_by_id(result.entity_id) is not None
        assert services.repos.moods.count() == 0
        assert len(result.errors) == 1

    def test_place_and_people(self, services):
        result = services.resolver.save_food(self._food(place="Noodle Bar", people=["Anna"]))
        place = services.repos.places.find_by_name("noodle bar")
        anna = services.repos.people.find_by_name("anna")
        graph = services.graph
        assert graph.find_edge("place", place.id, "food", result.entity_id, RelationshipKind.HAS_FOOD)
        assert graph.find_edge("person", anna.id, "food", result.entity_id, RelationshipKind.ATE_FOOD)


class TestSaveMemoryPlacePerson:
    def test_memory_links_location_and_people(self, services):
        result = services.resolver.save_memory(MemoryRecord(
            title="Lake day", date=datetime(2026, 6, 1, tzinfo=timezone.utc),
            location="Lake", people=["Anna"],
        ))
        lake = services.repos.places.find_by_name("lake")
        anna = services.repos.people.find_by_name("anna")
        graph = services.graph
        assert graph.find_edge("place", lake.id, "memory", result.entity_id, RelationshipKind.HAS_MEMORY)
        assert graph.find_edge("person", anna.id, "memory", result.entity_id, RelationshipKind.IN_MEMORY)

    def test_save_place_reuses_existing_name(self, services):
        first = services.resolver.save_place(PlaceRecord(name="Cafe"))
        second = services.resolver.save_place(PlaceRecord(name=" CAFE "))
        assert first.created is True
        assert second.created is False
        assert second.entity_id == first.entity_id
        assert services.repos.places.count() == 1

    def test_save_place_links_moods(self, services):
        mood_id = services.repos.moods.create(make_mood())
        result = services.resolver.save_place(PlaceRecord(name="Cafe"), mood_ids=[mood_id])
        assert services.repos.places.get_place_moods(result.entity_id) == [mood_id]
        assert services.graph.find_edge("mood", mood_id, "place", result.entity_id, RelationshipKind.AT_PLACE)

    def test_save_place_validates_before_reuse(self, services):
        with pytest.raises(EntityValidationError):
            services.resolver.save_place(PlaceRecord(name=""))

    def test_save_person(self, services):
        result = services.resolver.save_person(PersonRecord(name="Dora"))
        assert result.created is True
        assert services.repos.people.get_by_id(result.entity_id).name == "Dora"

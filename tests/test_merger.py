"""
Unit tests for the duplicate place merger.
"""
from conftest import make_mood
from memoria.core.errors import StorageFailureError
from memoria.models.kinds import RelationshipKind
from memoria.repositories.records import PlaceRecord
from memoria.services.merger import group_duplicates


class TestGroupDuplicates:
    def test_groups_by_normalized_name_keeping_order(self):
        places = [
            PlaceRecord(id="1", name="Cafe"),
            PlaceRecord(id="2", name="Park"),
            PlaceRecord(id="3", name=" cafe "),
            PlaceRecord(id="4", name="CAFE"),
        ]
        (group,) = group_duplicates(places)
        assert [p.id for p in group] == ["1", "3", "4"]

    def test_no_duplicates(self):
        assert group_duplicates([PlaceRecord(id="1", name="A"), PlaceRecord(id="2", name="B")]) == []


class TestMergeDuplicatePlaces:
    def _three_cafes(self, services):
        """Three spellings of one place, each linked to its own mood."""
        places = services.repos.places
        graph = services.graph
        place_ids, mood_ids = [], []
        for name in ("Cafe", " cafe ", "CAFE"):
            place_id = places.create(PlaceRecord(name=name))
            mood_id = services.repos.moods.create(make_mood(notes=f"at {name!r}"))
            graph.link("mood", mood_id, "place", place_id, RelationshipKind.AT_PLACE, RelationshipKind.HAS_MOOD)
            places.add_place_mood(place_id, mood_id)
            place_ids.append(place_id)
            mood_ids.append(mood_id)
        return place_ids, mood_ids

    def test_convergence(self, services):
        place_ids, mood_ids = self._three_cafes(services)
        survivor, *duplicates = place_ids

        report = services.merger.merge_duplicate_places()

        assert report.merged == 2
        assert report.groups[0].survivor_id == survivor
        assert report.groups[0].merged_ids == duplicates

        active = services.repos.places.list_active()
        assert [p.id for p in active] == [survivor]

        linked = {
            i.entity_id
            for i in services.history.history_for("place", survivor)
            if i.entity_type == "mood"
        }
        assert linked == set(mood_ids)

        for dup in duplicates:
            place = services.repos.places.get_by_id(dup)
            assert place is not None
            assert place.merged_into == survivor
            assert services.graph.edges_touching("place", dup) == []

    def test_moods_see_the_survivor(self, services):
        place_ids, mood_ids = self._three_cafes(services)
        services.merger.merge_duplicate_places()

        for mood_id in mood_ids:
            (place,) = services.history.related_of_kind("mood", mood_id, "place")
            assert place.id == place_ids[0]

    def test_place_moods_move_to_survivor(self, services):
        place_ids, mood_ids = self._three_cafes(services)
        services.merger.merge_duplicate_places()

        assert sorted(services.repos.places.get_place_moods(place_ids[0])) == sorted(mood_ids)
        assert services.repos.places.get_place_moods(place_ids[1]) == []

    def test_second_run_merges_nothing(self, services):
        self._three_cafes(services)
        services.merger.merge_duplicate_places()
        edges_after_first = services.graph.count()

        report = services.merger.merge_duplicate_places()
        assert report.merged == 0
        assert report.groups == []
        assert services.graph.count() == edges_after_first

    def test_shared_neighbour_does_not_duplicate_edges(self, services):
        places = services.repos.places
        keep = places.create(PlaceRecord(name="Gym"))
        dup = places.create(PlaceRecord(name="gym"))
        mood_id = services.repos.moods.create(make_mood())
        for place_id in (keep, dup):
            services.graph.link("mood", mood_id, "place", place_id, RelationshipKind.AT_PLACE, RelationshipKind.HAS_MOOD)

        services.merger.merge_duplicate_places()

        assert services.graph.count() == 2
        items = services.history.history_for("mood", mood_id)
        assert {i.entity_id for i in items} == {keep}

    def test_distinct_names_untouched(self, services):
        places = services.repos.places
        places.create(PlaceRecord(name="Home"))
        places.create(PlaceRecord(name="Work"))
        assert services.merger.merge_duplicate_places().merged == 0
        assert len(places.list_active()) == 2

    def _linked_pair(self, services, name):
        places = services.repos.places
        keep = places.create(PlaceRecord(name=name))
        dup = places.create(PlaceRecord(name=name.lower()))
        mood_id = services.repos.moods.create(make_mood(notes=name))
        services.graph.link("mood", mood_id, "place", dup, RelationshipKind.AT_PLACE, RelationshipKind.HAS_MOOD)
        return keep, dup

    def test_failed_edge_rewrite_does_not_stop_the_run(self, services, monkeypatch):
        self._linked_pair(services, "Cafe")
        self._linked_pair(services, "Park")
        real_repoint = services.graph.repoint
        calls = []

        def repoint_failing_once(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise StorageFailureError("relationships", "repoint")
            return real_repoint(*args, **kwargs)

        monkeypatch.setattr(services.graph, "repoint", repoint_failing_once)
        report = services.merger.merge_duplicate_places()

        assert report.merged == 2
        assert len(report.groups) == 2
        assert len(calls) == 4
        assert sum(g.edges_repointed for g in report.groups) == 3

    def test_failed_tombstone_leaves_duplicate_active(self, services, monkeypatch):
        cafe_keep, cafe_dup = self._linked_pair(services, "Cafe")
        park_keep, park_dup = self._linked_pair(services, "Park")
        real_tombstone = services.repos.places.tombstone

        def tombstone(place_id, survivor_id):
            if place_id == cafe_dup:
                raise StorageFailureError("places", "update")
            return real_tombstone(place_id, survivor_id)

        monkeypatch.setattr(services.repos.places, "tombstone", tombstone)
        report = services.merger.merge_duplicate_places()

        assert report.merged == 1
        cafe, park = report.groups
        assert cafe.merged_ids == [] and cafe.failed_ids == [cafe_dup]
        assert park.merged_ids == [park_dup] and park.failed_ids == []
        active = {p.id for p in services.repos.places.list_active()}
        assert active == {cafe_keep, cafe_dup, park_keep}

        monkeypatch.undo()
        assert services.merger.merge_duplicate_places().merged == 1

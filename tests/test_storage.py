"""
Tests for the storage context: lazy per-store handles, schema init and the
additive column migrations.
"""
import sqlalchemy as sa

from memoria.core.config import Settings
from memoria.db.base import StorageContext, Store
from memoria.db.migrations import apply_additive_migrations


def _columns(engine, table):
    return {c["name"] for c in sa.inspect(engine).get_columns(table)}


class TestStorageContext:
    def test_handles_open_lazily(self, storage):
        assert not storage.is_open(Store.moods)
        storage.engine(Store.moods)
        assert storage.is_open(Store.moods)
        assert not storage.is_open(Store.places)

    def test_engine_is_cached(self, storage):
        assert storage.engine(Store.food) is storage.engine(Store.food)

    def test_each_store_has_only_its_own_tables(self, storage):
        places = set(sa.inspect(storage.engine(Store.places)).get_table_names())
        moods = set(sa.inspect(storage.engine(Store.moods)).get_table_names())
        assert places == {"places", "place_moods"}
        assert {"mood_entries", "mood_tags", "mood_activities", "mood_entry_metadata"} == moods

    def test_relationship_indexes_exist(self, storage):
        indexes = {i["name"] for i in sa.inspect(storage.engine(Store.relationships)).get_indexes("entity_relationships")}
        assert {"idx_source", "idx_target"} <= indexes

    def test_init_all_opens_six_stores(self, storage):
        storage.init_all()
        assert all(storage.is_open(s) for s in Store)

    def test_file_databases_land_in_data_dir(self, tmp_path):
        ctx = StorageContext(Settings(DATA_DIR=str(tmp_path / "data"), _env_file=None))
        try:
            ctx.engine(Store.people)
            assert (tmp_path / "data" / "people.db").exists()
            assert not (tmp_path / "data" / "moods.db").exists()
        finally:
            ctx.dispose()

    def test_foreign_keys_enabled(self, storage):
        with storage.session(Store.moods) as db:
            assert db.execute(sa.text("PRAGMA foreign_keys")).scalar() == 1


class TestAdditiveMigrations:
    def test_fresh_schema_needs_no_columns(self, storage):
        engine = storage.engine(Store.food)
        assert apply_additive_migrations(engine, Store.food) == 0

    def test_legacy_food_table_gets_new_columns(self, tmp_path):
        url = f"sqlite:///{tmp_path}/food.db"
        legacy = sa.create_engine(url)
        with legacy.begin() as conn:
            conn.exec_driver_sql(
                "CREATE TABLE food_entries ("
                " id VARCHAR(64) PRIMARY KEY, name VARCHAR(256) NOT NULL,"
                " calories FLOAT, protein FLOAT, carbs FLOAT, fat FLOAT,"
                " meal_type VARCHAR(32), date DATETIME NOT NULL, notes TEXT,"
                " image_uri VARCHAR(1024), created_at DATETIME NOT NULL,"
                " updated_at DATETIME NOT NULL)"
            )
        legacy.dispose()

        ctx = StorageContext(Settings(DATA_DIR=str(tmp_path), _env_file=None))
        try:
            columns = _columns(ctx.engine(Store.food), "food_entries")
        finally:
            ctx.dispose()
        assert {"people", "place", "mood_rating", "mood_emotion", "food_rating",
                "is_restaurant", "restaurant_name"} <= columns

    def test_second_run_is_a_no_op(self, tmp_path):
        engine = sa.create_engine(f"sqlite:///{tmp_path}/people.db")
        with engine.begin() as conn:
            conn.exec_driver_sql("CREATE TABLE people (id VARCHAR(64) PRIMARY KEY, name VARCHAR(256))")
        assert apply_additive_migrations(engine, Store.people) == 1
        assert apply_additive_migrations(engine, Store.people) == 0
        assert "deceased_date" in _columns(engine, "people")
        engine.dispose()

    def test_failing_step_does_not_stop_the_rest(self, tmp_path):
        # No food_entries table at all: every step fails, none raises.
        engine = sa.create_engine(f"sqlite:///{tmp_path}/empty.db")
        assert apply_additive_migrations(engine, Store.food) == 0
        engine.dispose()

"""
c0rd - Topology Store Tests
===========================

Persistence of the logging category and channel ids.
"""

import pytest

from src.services.topology import TopologyRecord, TopologyStore
from src.services.topology.store import STATE_KEY


class TestBotState:
    """Raw key/value state underneath the store."""

    def test_set_and_get_dict(self, test_db):
        test_db.set_bot_state("config", {"a": 1})
        assert test_db.get_bot_state("config") == {"a": 1}

    def test_get_default(self, test_db):
        assert test_db.get_bot_state("nonexistent", "default_value") == "default_value"

    def test_delete(self, test_db):
        test_db.set_bot_state("key", True)
        test_db.delete_bot_state("key")
        assert test_db.get_bot_state("key") is None

    def test_update_starts_from_default(self, test_db):
        written = test_db.update_bot_state("counter", lambda n: n + 1, default=0)
        assert written == 1
        assert test_db.update_bot_state("counter", lambda n: n + 1, default=0) == 2

    def test_failed_update_keeps_old_value(self, test_db):
        test_db.set_bot_state("key", {"a": 1})

        def explode(_):
            raise ValueError("nope")

        with pytest.raises(ValueError):
            test_db.update_bot_state("key", explode)
        assert test_db.get_bot_state("key") == {"a": 1}


class TestTopologyStore:
    """load / set_category_id / set_channel_id."""

    def test_missing_record_is_none(self, topology_store):
        assert topology_store.load() is None

    def test_set_category_id(self, topology_store):
        topology_store.set_category_id(123)
        record = topology_store.load()
        assert record.category_id == 123
        assert record.channel_ids == {}

    def test_channel_ids_accumulate(self, topology_store):
        topology_store.set_category_id(123)
        topology_store.set_channel_id("voice", 456)
        topology_store.set_channel_id("roles", 789)
        record = topology_store.load()
        assert record.category_id == 123
        assert record.channel_ids == {"voice": 456, "roles": 789}

    def test_overwrite_single_field(self, topology_store):
        topology_store.set_channel_id("voice", 456)
        topology_store.set_channel_id("voice", 999)
        assert topology_store.load().channel_ids == {"voice": 999}

    def test_survives_reopen(self, test_db, tmp_path):
        from src.core.database import DatabaseManager

        TopologyStore(test_db).set_channel_id("voice", 456)
        test_db.close()

        reopened = DatabaseManager(tmp_path / "test_c0rd.db")
        try:
            assert TopologyStore(reopened).load().channel_ids == {"voice": 456}
        finally:
            reopened.close()

    def test_unreadable_record_is_none(self, test_db, topology_store):
        test_db.set_bot_state(STATE_KEY, "not a record")
        assert topology_store.load() is None

    def test_separate_keys_are_isolated(self, test_db):
        TopologyStore(test_db, key="a").set_category_id(1)
        assert TopologyStore(test_db, key="b").load() is None


class TestTopologyRecord:
    """Parsing stored documents."""

    def test_round_trip_shape(self):
        record = TopologyRecord(category_id=1, channel_ids={"voice": 2})
        assert record.to_dict() == {"category_id": 1, "channel_ids": {"voice": 2}}

    def test_string_ids_are_coerced(self):
        record = TopologyRecord.from_dict({"category_id": "1", "channel_ids": {"voice": "2"}})
        assert record.category_id == 1
        assert record.channel_ids == {"voice": 2}

    def test_bad_channel_ids_are_dropped(self):
        record = TopologyRecord.from_dict({"category_id": None, "channel_ids": {"voice": "x", "roles": 3}})
        assert record.category_id is None
        assert record.channel_ids == {"roles": 3}

    def test_non_dict_is_none(self):
        assert TopologyRecord.from_dict([1, 2]) is None

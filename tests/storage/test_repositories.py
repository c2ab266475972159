"""
Tests for the alert store repositories.

============================================================
PURPOSE
============================================================
Validation, due set queries, fired bookkeeping and cascades
against a real SQLite store.

============================================================
"""

import pytest
from sqlalchemy import func, select

from alerts.milestones import MilestoneKind
from core.exceptions import NotFoundError, StorageError, ValidationError
from storage.models.alerts import BlockHeightTrigger
from storage.repositories.alerts import (
    BlockHeightAlertRepository,
    BlockHeightTriggerRepository,
    NameAlertRepository,
    ProcessedBlockRepository,
)
from storage.repositories.exceptions import IntegrityError, RepositoryException


def trigger_count(session):
    return session.execute(select(func.count()).select_from(BlockHeightTrigger)).scalar()


# ============================================================
# NAME ALERTS
# ============================================================

class TestNameAlertRepository:
    """Tests for NameAlertRepository."""

    @pytest.mark.parametrize("chat_id", ["123", 1.5, True, None])
    def test_rejects_bad_chat_id(self, database, chat_id):
        with database.session() as session:
            with pytest.raises(ValidationError) as exc_info:
                NameAlertRepository(session).create(chat_id, "ocer")
        assert exc_info.value.field == "chat_id"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_rejects_bad_name(self, database, name):
        with database.session() as session:
            with pytest.raises(ValidationError):
                NameAlertRepository(session).create(1, name)

    def test_create_and_lookup(self, database):
        """Test create, get, exists and get_or_raise."""
        with database.transaction() as session:
            alert = NameAlertRepository(session).create(-1001234567890, "ocer")

        with database.session() as session:
            alerts = NameAlertRepository(session)
            assert alerts.get(-1001234567890, "ocer").id == alert.id
            assert alerts.get_by_id(alert.id).target_name == "ocer"
            assert alerts.exists(-1001234567890, "ocer")
            assert not alerts.exists(1, "ocer")
            assert alerts.get(1, "ocer") is None
            with pytest.raises(NotFoundError):
                alerts.get_or_raise(1, "ocer")

    def test_triggers_store_kind_tags(self, database):
        """Test that enum kinds are stored as their string tag."""
        with database.transaction() as session:
            alerts = NameAlertRepository(session)
            alert = alerts.create(1, "ocer")
            alerts.add_triggers(alert.id, [
                (MilestoneKind.AUCTION_REVEAL, 63274),
                (MilestoneKind.AUCTION_BIDDING, 62554),
            ])

        with database.session() as session:
            triggers = BlockHeightTriggerRepository(session).list_for_alert(alert.id)
            assert [(t.milestone_kind, t.block_height, t.did_fire) for t in triggers] == [
                ("AUCTION_BIDDING", 62554, False),
                ("AUCTION_REVEAL", 63274, False),
            ]

    def test_trigger_needs_existing_alert(self, database):
        """Test that a trigger for a missing alert violates the foreign key."""
        with pytest.raises(IntegrityError):
            with database.transaction() as session:
                NameAlertRepository(session).add_triggers(999, [("NAME_LOCKED", 5)])

    def test_rejects_negative_trigger_height(self, database):
        with database.transaction() as session:
            alert = NameAlertRepository(session).create(1, "ocer")

        with pytest.raises(ValidationError):
            with database.transaction() as session:
                NameAlertRepository(session).add_triggers(alert.id, [("NAME_LOCKED", -1)])

    def test_delete_cascades(self, database):
        """Test that deleting an alert deletes fired and unfired triggers."""
        with database.transaction() as session:
            alerts = NameAlertRepository(session)
            alert = alerts.create(1, "ocer")
            other = alerts.create(2, "ocer")
            alerts.add_triggers(alert.id, [("NAME_LOCKED", 5), ("NAME_UNLOCKED", 50)])
            alerts.add_triggers(other.id, [("NAME_LOCKED", 5)])
            triggers = BlockHeightTriggerRepository(session)
            triggers.mark_fired([triggers.list_for_alert(alert.id)[0].id])

        with database.transaction() as session:
            assert NameAlertRepository(session).delete(1, "ocer") == 1

        with database.session() as session:
            assert trigger_count(session) == 1
            assert NameAlertRepository(session).delete(1, "ocer") == 0

    def test_listing_and_counters(self, database):
        """Test name listings and the subscriber counters."""
        with database.transaction() as session:
            alerts = NameAlertRepository(session)
            alerts.create(1, "b")
            alerts.create(1, "a")
            alerts.create(2, "a")

        with database.session() as session:
            alerts = NameAlertRepository(session)
            assert alerts.list_target_names(1) == ["b", "a"]
            assert alerts.list_target_names(3) == []
            assert alerts.distinct_target_names() == {"a", "b"}
            assert [a.chat_id for a in alerts.find_by_target_name("a")] == [1, 2]
            assert alerts.find_by_target_names([]) == []
            assert alerts.count() == 3
            assert alerts.count_unique_chats() == 2

    def test_distinct_target_names_collapses_chats(self, database):
        """Test that a name watched by many chats is listed once."""
        with database.session() as session:
            assert NameAlertRepository(session).distinct_target_names() == set()

        with database.transaction() as session:
            alerts = NameAlertRepository(session)
            for chat_id in range(1, 6):
                alerts.create(chat_id, "ocer")
            alerts.create(9, "xn--mnchen-3ya")

        with database.session() as session:
            names = NameAlertRepository(session).distinct_target_names()

        assert names == {"ocer", "xn--mnchen-3ya"}

    def test_rollback_on_error(self, database):
        """Test that a failing transaction leaves nothing behind."""
        with pytest.raises(ValidationError):
            with database.transaction() as session:
                alerts = NameAlertRepository(session)
                alerts.create(1, "ocer")
                alerts.create(1, "")

        with database.session() as session:
            assert NameAlertRepository(session).count() == 0

    def test_missing_schema_is_storage_error(self, database):
        """Test that database failures surface as repository exceptions."""
        database.drop_all_tables()

        with database.session() as session:
            with pytest.raises(RepositoryException) as exc_info:
                NameAlertRepository(session).count()

        assert isinstance(exc_info.value, StorageError)
        assert exc_info.value.repository_name == "NameAlertRepository"


# ============================================================
# TRIGGERS
# ============================================================

class TestBlockHeightTriggerRepository:
    """Tests for BlockHeightTriggerRepository."""

    @pytest.fixture
    def alert_id(self, database):
        with database.transaction() as session:
            alerts = NameAlertRepository(session)
            alert = alerts.create(7, "ocer")
            alerts.add_triggers(alert.id, [
                ("AUCTION_BIDDING", 100),
                ("AUCTION_REVEAL", 200),
                ("AUCTION_CLOSED", 300),
            ])
            return alert.id

    def test_find_due_is_inclusive(self, database, alert_id):
        """Test that triggers at the height are due, above it are not."""
        with database.session() as session:
            triggers = BlockHeightTriggerRepository(session)
            assert triggers.find_due(99) == []
            due = triggers.find_due(200)

        assert [(t.block_height, chat_id, name) for t, chat_id, name in due] == [
            (100, 7, "ocer"),
            (200, 7, "ocer"),
        ]

    def test_mark_fired_only_once(self, database, alert_id):
        """Test that only unfired triggers are flipped."""
        with database.transaction() as session:
            triggers = BlockHeightTriggerRepository(session)
            ids = [t.id for t, _, _ in triggers.find_due(200)]
            assert triggers.mark_fired(ids) == 2
            assert triggers.mark_fired(ids) == 0
            assert triggers.mark_fired([]) == 0

        with database.session() as session:
            triggers = BlockHeightTriggerRepository(session)
            assert triggers.find_due(1000)[0][0].block_height == 300
            assert [t.block_height for t in triggers.list_unfired_for_alert(alert_id)] == [300]
            assert triggers.count_unfired() == 1

    def test_delete_future_unfired_is_strict(self, database, alert_id):
        """Test that the trigger at the height is kept."""
        with database.transaction() as session:
            assert BlockHeightTriggerRepository(session).delete_future_unfired(alert_id, 200) == 1

        with database.session() as session:
            remaining = BlockHeightTriggerRepository(session).list_for_alert(alert_id)
            assert [t.block_height for t in remaining] == [100, 200]

    def test_delete_future_keeps_fired(self, database, alert_id):
        with database.transaction() as session:
            triggers = BlockHeightTriggerRepository(session)
            fired = [t.id for t in triggers.list_for_alert(alert_id) if t.block_height == 300]
            triggers.mark_fired(fired)
            assert triggers.delete_future_unfired(alert_id, 0) == 2

        with database.session() as session:
            remaining = BlockHeightTriggerRepository(session).list_for_alert(alert_id)
            assert [(t.block_height, t.did_fire) for t in remaining] == [(300, True)]


# ============================================================
# BLOCK HEIGHT ALERTS
# ============================================================

class TestBlockHeightAlertRepository:
    """Tests for BlockHeightAlertRepository."""

    def test_context_roundtrip(self, database):
        """Test that a JSON context is returned unchanged."""
        context = {"reason": "auction", "names": ["ocer", "moviebox"], "n": 3}
        with database.transaction() as session:
            BlockHeightAlertRepository(session).create(1, 100, "auction_reminder", context=context)

        with database.session() as session:
            alert = BlockHeightAlertRepository(session).find_due(100)[0]
            assert alert.context == context
            assert alert.alert_type == "auction_reminder"

    @pytest.mark.parametrize("alert_type", ["", None])
    def test_rejects_bad_alert_type(self, database, alert_type):
        with database.session() as session:
            with pytest.raises(ValidationError):
                BlockHeightAlertRepository(session).create(1, 100, alert_type)

    def test_fired_match_does_not_block_unique_create(self, database):
        """Test that uniqueness only considers unfired alerts."""
        with database.transaction() as session:
            alerts = BlockHeightAlertRepository(session)
            first = alerts.create(1, 100, "BLOCK_MINED", enforce_unique=True)
            assert alerts.create(1, 100, "BLOCK_MINED", enforce_unique=True) is None
            alerts.mark_fired([first.id])
            assert alerts.create(1, 100, "BLOCK_MINED", enforce_unique=True) is not None
            assert alerts.count_unfired_matching(1, 100, "BLOCK_MINED") == 1

    def test_delete_unfired(self, database):
        with database.transaction() as session:
            alerts = BlockHeightAlertRepository(session)
            fired = alerts.create(1, 100, "BLOCK_MINED")
            alerts.create(1, 100, "BLOCK_MINED")
            alerts.create(1, 100, "other")
            alerts.mark_fired([fired.id])

        with database.transaction() as session:
            assert BlockHeightAlertRepository(session).delete_unfired(1, 100, "BLOCK_MINED") == 1

        with database.session() as session:
            remaining = BlockHeightAlertRepository(session).list_unfired_for_chat(1)
            assert [a.alert_type for a in remaining] == ["other"]


# ============================================================
# PROCESSED BLOCKS
# ============================================================

class TestProcessedBlockRepository:
    """Tests for ProcessedBlockRepository."""

    def test_last_processed_height(self, database):
        with database.session() as session:
            assert ProcessedBlockRepository(session).get_last_processed_height() is None

        with database.transaction() as session:
            blocks = ProcessedBlockRepository(session)
            blocks.record(101, "ab" * 32)
            blocks.record(100)

        with database.session() as session:
            assert ProcessedBlockRepository(session).get_last_processed_height() == 101

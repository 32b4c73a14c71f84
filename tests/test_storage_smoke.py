"""Smoke tests for the JSON-file storage collaborators."""

from datetime import datetime

import pytest

from life_leveling.models.interest import AgeRange, Interest, UserRecord
from life_leveling.models.simulation import SimulationResult, SimulationScenario
from life_leveling.storage import scenarios as scenario_store
from life_leveling.storage import user_records


def record(user_id: str, allow: bool = True) -> UserRecord:
    return UserRecord(
        user_id=user_id,
        age_range=AgeRange(min=19, max=25),
        interests=[Interest(category="Writing", subcategory="Poetry", current_level=2, intent_level="invested")],
        allow_peer_comparisons=allow,
    )


class TestUserRecords:
    def test_load_missing_user(self, tmp_path):
        assert user_records.load_user(tmp_path, "nobody") is None

    def test_save_and_load(self, tmp_path):
        user_records.save_user(tmp_path, record("alice"))

        loaded = user_records.load_user(tmp_path, "alice")
        assert loaded == record("alice")
        assert loaded.interests[0].subcategory == "Poetry"

    def test_population_respects_opt_in(self, tmp_path):
        user_records.save_user(tmp_path, record("alice"))
        user_records.save_user(tmp_path, record("bob", allow=False))

        assert [u.user_id for u in user_records.list_users(tmp_path)] == ["alice", "bob"]
        assert [u.user_id for u in user_records.load_comparison_population(tmp_path)] == ["alice"]

    def test_unreadable_file_skipped(self, tmp_path):
        user_records.save_user(tmp_path, record("alice"))
        (tmp_path / "broken.json").write_text("{not json")
        assert [u.user_id for u in user_records.list_users(tmp_path)] == ["alice"]

    def test_set_comparison_preference(self, tmp_path):
        user_records.save_user(tmp_path, record("bob", allow=False))

        updated = user_records.set_comparison_preference(tmp_path, "bob", True)

        assert updated.allow_peer_comparisons is True
        assert user_records.load_user(tmp_path, "bob").allow_peer_comparisons is True

    def test_set_preference_unknown_user(self, tmp_path):
        with pytest.raises(KeyError):
            user_records.set_comparison_preference(tmp_path, "ghost", True)

    @pytest.mark.parametrize("bad_id", ["../etc/passwd", "", "a b", "x/y"])
    def test_rejects_unsafe_ids(self, tmp_path, bad_id):
        with pytest.raises(ValueError):
            user_records.load_user(tmp_path, bad_id)


def scenario(user_id: str, name: str, created_at: datetime) -> SimulationScenario:
    return SimulationScenario(
        user_id=user_id,
        scenario_name=name,
        effort_allocation={"Math": 50},
        timeframe_weeks=52,
        forecasted_results={
            "Math": SimulationResult(
                projected_level=1.6, growth_rate=0.6, synergy_bonus=0.0, effort_efficiency=1.2
            )
        },
        created_at=created_at,
    )


class TestScenarios:
    def test_read_empty(self, tmp_path):
        assert scenario_store.read_scenarios(tmp_path, "alice") == []

    def test_append_and_read_newest_first(self, tmp_path):
        older = scenario("alice", "Balanced", datetime(2026, 3, 1, 9, 0))
        newer = scenario("alice", "All in on math", datetime(2026, 3, 2, 9, 0))
        other = scenario("bob", "Bob's plan", datetime(2026, 3, 3, 9, 0))
        for s in (older, newer, other):
            scenario_store.append_scenario(tmp_path, s)

        stored = scenario_store.read_scenarios(tmp_path, "alice")

        assert [s.scenario_name for s in stored] == ["All in on math", "Balanced"]
        assert stored[0].forecasted_results["Math"].projected_level == 1.6

    def test_get_scenario(self, tmp_path):
        s = scenario("alice", "Plan", datetime(2026, 3, 1))
        scenario_store.append_scenario(tmp_path, s)
        assert scenario_store.get_scenario(tmp_path, s.id) == s
        assert scenario_store.get_scenario(tmp_path, "missing") is None

    def test_converted_flag_is_one_way(self, tmp_path):
        s = scenario("alice", "Plan", datetime(2026, 3, 1))
        scenario_store.append_scenario(tmp_path, s)

        scenario_store.mark_converted_to_goals(tmp_path, s.id)

        assert scenario_store.get_scenario(tmp_path, s.id).is_converted_to_goals is True
        with pytest.raises(ValueError):
            scenario_store.mark_converted_to_goals(tmp_path, s.id)

    def test_convert_unknown_scenario(self, tmp_path):
        with pytest.raises(KeyError):
            scenario_store.mark_converted_to_goals(tmp_path, "missing")

    def test_lookups_scoped_to_owner(self, tmp_path):
        s = scenario("alice", "Plan", datetime(2026, 3, 1))
        scenario_store.append_scenario(tmp_path, s)

        assert scenario_store.get_scenario(tmp_path, s.id, user_id="bob") is None
        with pytest.raises(KeyError):
            scenario_store.mark_converted_to_goals(tmp_path, s.id, user_id="bob")
        with pytest.raises(KeyError):
            scenario_store.remove_scenario(tmp_path, s.id, user_id="bob")
        assert scenario_store.get_scenario(tmp_path, s.id, user_id="alice") == s

    def test_remove_scenario(self, tmp_path):
        keep = scenario("alice", "Keep", datetime(2026, 3, 1))
        drop = scenario("alice", "Drop", datetime(2026, 3, 2))
        for s in (keep, drop):
            scenario_store.append_scenario(tmp_path, s)

        scenario_store.remove_scenario(tmp_path, drop.id)

        assert [s.id for s in scenario_store.read_scenarios(tmp_path, "alice")] == [keep.id]
        with pytest.raises(KeyError):
            scenario_store.remove_scenario(tmp_path, drop.id)

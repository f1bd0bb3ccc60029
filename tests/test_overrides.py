"""Tests for override application and full recompute."""
import logging

import pytest

from storerota.models.overrides import OverrideRule
from storerota.models.person import MarkType, Person, Role
from storerota.solver.cycle import cycle_cell
from storerota.solver.engine import build_schedule
from storerota.solver.overrides import apply_overrides

from conftest import MONDAY


@pytest.fixture
def baseline(pharmacists, clerks, flat_requirements):
    return build_schedule(MONDAY, pharmacists, clerks, flat_requirements)


class TestApplyOverrides:

    def test_empty_map_reproduces_baseline(self, baseline, pharmacists, clerks, requirements):
        result = apply_overrides(baseline.days, {}, pharmacists, clerks, requirements)
        assert [d.warnings for d in result.days] == [d.warnings for d in baseline.days]
        assert [d.to_dict() for d in result.days] == [d.to_dict() for d in baseline.days]

    def test_baseline_untouched(self, baseline, pharmacists, clerks, requirements):
        before = [d.to_dict() for d in baseline.days]
        apply_overrides(baseline.days, {MONDAY: {"p1": OverrideRule.none()}}, pharmacists, clerks, requirements)
        assert [d.to_dict() for d in baseline.days] == before

    def test_idempotent(self, baseline, pharmacists, clerks, requirements):
        overrides = {
            MONDAY: {
                "p1": OverrideRule.shift("P8A"),
                "c2": OverrideRule.mark(MarkType.ANNUAL, 8),
            }
        }
        first = apply_overrides(baseline.days, overrides, pharmacists, clerks, requirements)
        second = apply_overrides(baseline.days, overrides, pharmacists, clerks, requirements)
        assert first.to_dict() == second.to_dict()
        again = apply_overrides(first.days, overrides, pharmacists, clerks, requirements)
        assert again.to_dict() == first.to_dict()

    def test_shift_override_replaces_block(self, baseline, pharmacists, clerks, requirements):
        result = apply_overrides(baseline.days, {MONDAY: {"p1": OverrideRule.shift("P8A")}}, pharmacists, clerks, requirements)
        mine = [b for b in result.days[0].all_blocks if b.id == "p1"]
        assert len(mine) == 1
        assert (mine[0].code, mine[0].start, mine[0].end, mine[0].hours) == ("P8A", "09:00", "17:30", 8)
        assert mine[0] in result.days[0].pharmacists

    def test_mark_override_removes_block(self, baseline, pharmacists, clerks, requirements):
        result = apply_overrides(
            baseline.days, {MONDAY: {"c2": OverrideRule.mark(MarkType.PUBLIC, 8)}}, pharmacists, clerks, requirements
        )
        monday = result.days[0]
        assert not monday.has_shift("c2")
        # c2 was the only clerk on the afternoon half
        assert not any("Store staffing short" in w for w in monday.warnings)
        assert any("staffing score short" in w for w in monday.warnings)

    def test_none_override_clears_cell(self, baseline, pharmacists, clerks, requirements):
        result = apply_overrides(baseline.days, {MONDAY: {"p1": OverrideRule.none()}}, pharmacists, clerks, requirements)
        assert not result.days[0].has_shift("p1")
        assert any("Pharmacist coverage short" in w for w in result.days[0].warnings)

    def test_role_taken_from_rule(self, baseline, pharmacists, clerks, requirements):
        rule = OverrideRule.shift("S10", role=Role.CLERK)
        result = apply_overrides(baseline.days, {MONDAY: {"p1": rule}}, pharmacists, clerks, requirements)
        monday = result.days[0]
        assert any(b.id == "p1" and b.code == "S10" for b in monday.clerks)
        assert not any(b.id == "p1" for b in monday.pharmacists)

    def test_shift_stats_recomputed(self, baseline, pharmacists, clerks, requirements):
        result = apply_overrides(baseline.days, {MONDAY: {"p1": OverrideRule.shift("P12")}}, pharmacists, clerks, requirements)
        stats = {s.id: s for s in result.shift_stats}
        assert stats["p1"].full == 1


class TestInvalidOverrides:

    def test_unknown_code_skipped(self, baseline, pharmacists, clerks, requirements, caplog):
        with caplog.at_level(logging.WARNING, logger="storerota"):
            result = apply_overrides(baseline.days, {MONDAY: {"p1": OverrideRule.shift("X99")}}, pharmacists, clerks, requirements)
        assert result.days[0].to_dict() == baseline.days[0].to_dict()
        assert "X99" in caplog.text

    def test_unknown_person_skipped(self, baseline, pharmacists, clerks, requirements, caplog):
        with caplog.at_level(logging.WARNING, logger="storerota"):
            result = apply_overrides(baseline.days, {MONDAY: {"ghost": OverrideRule.none()}}, pharmacists, clerks, requirements)
        assert result.days[0].to_dict() == baseline.days[0].to_dict()
        assert "ghost" in caplog.text

    def test_date_outside_horizon_ignored(self, baseline, pharmacists, clerks, requirements):
        result = apply_overrides(baseline.days, {"2030-01-01": {"p1": OverrideRule.none()}}, pharmacists, clerks, requirements)
        assert result.to_dict()["days"] == baseline.to_dict()["days"]

    def test_valid_entries_still_applied(self, baseline, pharmacists, clerks, requirements):
        overrides = {MONDAY: {"ghost": OverrideRule.none(), "p1": OverrideRule.shift("P10A")}}
        result = apply_overrides(baseline.days, overrides, pharmacists, clerks, requirements)
        assert any(b.id == "p1" and b.code == "P10A" for b in result.days[0].pharmacists)


class TestPayloadRules:

    def test_dict_rule_applied(self, baseline, pharmacists, clerks, requirements):
        overrides = {MONDAY: {"p1": {"kind": "SHIFT", "code": "P8A"}}}
        result = apply_overrides(baseline.days, overrides, pharmacists, clerks, requirements)
        assert any(b.id == "p1" and b.code == "P8A" for b in result.days[0].pharmacists)

    def test_malformed_entries_skipped(self, baseline, pharmacists, clerks, requirements, caplog):
        overrides = {
            MONDAY: {
                "p1": {"kind": "BOGUS"},
                "c2": "S6A",
                "p2": OverrideRule.shift("P10B"),
            }
        }
        with caplog.at_level(logging.WARNING, logger="storerota"):
            result = apply_overrides(baseline.days, overrides, pharmacists, clerks, requirements)
        codes = {b.id: b.code for b in result.days[0].all_blocks}
        assert codes["p1"] == "P6A"
        assert codes["c2"] == "S6B"
        assert codes["p2"] == "P10B"
        assert "BOGUS" in caplog.text


class TestRosterRoles:
    """Records left at the default role, passed in the pharmacist list."""

    @pytest.fixture
    def untagged(self):
        return [Person(id="p1", name="Alice"), Person(id="p2", name="Bob")]

    @pytest.fixture
    def untagged_baseline(self, untagged, clerks, flat_requirements):
        return build_schedule(MONDAY, untagged, clerks, flat_requirements)

    def test_shift_override_uses_list_role(self, untagged_baseline, untagged, clerks, requirements):
        overrides = {MONDAY: {"p1": OverrideRule.shift("P8A")}}
        result = apply_overrides(untagged_baseline.days, overrides, untagged, clerks, requirements)
        assert [b.code for b in result.days[0].pharmacists if b.id == "p1"] == ["P8A"]
        assert not any(b.id == "p1" for b in result.days[0].clerks)

    def test_stats_keep_list_role(self, untagged_baseline, untagged, clerks, requirements):
        result = apply_overrides(untagged_baseline.days, {}, untagged, clerks, requirements)
        before = {s.id: s.role for s in untagged_baseline.shift_stats}
        after = {s.id: s.role for s in result.shift_stats}
        assert after == before
        assert after["p1"] == "pharmacist"

    def test_caller_records_untouched(self, untagged_baseline, untagged, clerks, requirements):
        apply_overrides(untagged_baseline.days, {MONDAY: {"p1": OverrideRule.none()}}, untagged, clerks, requirements)
        assert untagged[0].role == Role.CLERK

    def test_cycle_follows_baseline_list(self, untagged_baseline, untagged, clerks, requirements):
        updated = cycle_cell({}, untagged_baseline.days, MONDAY, untagged[0])
        rule = updated[MONDAY]["p1"]
        assert (rule.role, rule.code) == (Role.PHARMACIST, "P6B")

        result = apply_overrides(untagged_baseline.days, updated, untagged, clerks, requirements)
        assert [b.code for b in result.days[0].pharmacists if b.id == "p1"] == ["P6B"]

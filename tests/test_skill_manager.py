"""Tests for SkillManager mutations and authorization."""

import pytest

from starstraw.errors import ErrorKind
from starstraw.skills import (
    SkillCategory,
    SkillEntry,
    SkillManager,
    SkillName,
    SkillResult,
)


def _entry(name: SkillName, magnitude: float | None = None) -> SkillEntry:
    return SkillEntry.of(name, magnitude)


def _profile(power: float, defense: float) -> SkillManager:
    """A Normal-titled profile with exactly the given power and defense."""
    return SkillManager(
        [
            _entry(SkillName.NORMAL),
            _entry(SkillName.MASTER, power),
            _entry(SkillName.PATRON, defense),
        ]
    )


class TestSkillResult:
    def test_success_is_truthy(self):
        result = SkillResult.success()
        assert result
        assert result.error is None

    def test_failure_is_falsy(self):
        result = SkillResult.failure(ErrorKind.INVALID_GRANT, "nope")
        assert not result
        assert result.error == ErrorKind.INVALID_GRANT
        assert result.detail == "nope"


class TestGrant:
    def test_grant_appends(self):
        manager = SkillManager([_entry(SkillName.NORMAL)])
        result = manager.grant(_entry(SkillName.MASTER))
        assert result
        assert manager.skills == [_entry(SkillName.NORMAL), _entry(SkillName.MASTER)]

    def test_grant_master_scenario(self):
        manager = SkillManager([SkillEntry(SkillCategory.TITLE, SkillName.NORMAL, 1.0)])
        assert manager.grant(SkillEntry(SkillCategory.MODIFIER_POWER, SkillName.MASTER, 2.0))
        stats = manager.stats()
        assert stats.power == 2.0
        assert stats.defense == 1.0
        assert stats.title == SkillName.NORMAL

    def test_grant_twice_stacks(self):
        manager = SkillManager([_entry(SkillName.NORMAL)])
        manager.grant(_entry(SkillName.MASTER))
        manager.grant(_entry(SkillName.MASTER))
        assert len(manager.skills) == 3
        assert manager.stats().power == 4.0

    def test_absolute_rejected_below_threshold(self):
        manager = SkillManager([_entry(SkillName.ADMINISTRATOR)])
        result = manager.grant(_entry(SkillName.ABSOLUTE))
        assert not result
        assert result.error == ErrorKind.INVALID_GRANT
        assert manager.skills == [_entry(SkillName.ADMINISTRATOR)]

    def test_absolute_allowed_at_threshold(self):
        manager = SkillManager([_entry(SkillName.ADMINISTRATOR), _entry(SkillName.MASTER, 10.0)])
        assert manager.stats().power == 100000.0
        result = manager.grant(_entry(SkillName.ABSOLUTE))
        assert result
        assert manager.stats().abilities == {SkillName.ABSOLUTE: 1.0}

    def test_god_never_grantable(self):
        for skills in ([], [_entry(SkillName.NORMAL)], [_entry(SkillName.GOD)]):
            manager = SkillManager(skills)
            result = manager.grant(_entry(SkillName.GOD))
            assert not result
            assert result.error == ErrorKind.INVALID_GRANT
            assert manager.skills == skills

    def test_grant_title_through_grant_does_not_replace(self):
        manager = SkillManager([_entry(SkillName.NORMAL)])
        assert manager.grant(_entry(SkillName.MANAGER))
        assert manager.stats().title == SkillName.NORMAL


class TestRevoke:
    def test_revoke_removes_all_matches(self):
        manager = SkillManager(
            [
                _entry(SkillName.TRUSTWORTHY),
                _entry(SkillName.PATRON),
                _entry(SkillName.TRUSTWORTHY),
            ]
        )
        result = manager.revoke(SkillName.TRUSTWORTHY)
        assert result
        assert manager.skills == [_entry(SkillName.PATRON)]

    def test_revoke_adjacent_duplicates(self):
        manager = SkillManager(
            [_entry(SkillName.MASTER), _entry(SkillName.MASTER), _entry(SkillName.MASTER)]
        )
        manager.revoke(SkillName.MASTER)
        assert manager.skills == []

    def test_revoke_missing_is_noop(self):
        skills = [_entry(SkillName.NORMAL), _entry(SkillName.MASTER)]
        manager = SkillManager(skills)
        result = manager.revoke(SkillName.PATRON)
        assert result
        assert manager.skills == skills

    def test_revoke_title_falls_back(self):
        manager = SkillManager([_entry(SkillName.MANAGER), _entry(SkillName.NORMAL)])
        manager.revoke(SkillName.MANAGER)
        assert manager.stats().title == SkillName.NORMAL


class TestSetTitle:
    def test_inserts_at_front_when_missing(self):
        manager = SkillManager([_entry(SkillName.MASTER), _entry(SkillName.TRUSTWORTHY)])
        assert manager.set_title(_entry(SkillName.MANAGER))
        assert manager.skills[0] == _entry(SkillName.MANAGER)
        assert manager.skills[1:] == [_entry(SkillName.MASTER), _entry(SkillName.TRUSTWORTHY)]
        assert manager.stats().power == pytest.approx(2.0 * 1.05 * 1000.0)

    def test_replaces_first_title_in_place(self):
        manager = SkillManager(
            [
                _entry(SkillName.MASTER),
                _entry(SkillName.NORMAL),
                _entry(SkillName.PATRON),
                _entry(SkillName.ADMINISTRATOR),
            ]
        )
        manager.set_title(_entry(SkillName.MANAGER))
        assert manager.skills == [
            _entry(SkillName.MASTER),
            _entry(SkillName.MANAGER),
            _entry(SkillName.PATRON),
            _entry(SkillName.ADMINISTRATOR),
        ]
        stats = manager.stats()
        assert stats.title == SkillName.MANAGER
        assert stats.power == 2000.0
        assert stats.defense == 2000.0

    def test_twice_keeps_single_slot(self):
        manager = SkillManager([_entry(SkillName.MASTER)])
        manager.set_title(_entry(SkillName.MANAGER))
        manager.set_title(_entry(SkillName.ADMINISTRATOR))
        titles = [s for s in manager.skills if s.category == SkillCategory.TITLE]
        assert titles == [_entry(SkillName.ADMINISTRATOR)]
        assert manager.skills == [_entry(SkillName.ADMINISTRATOR), _entry(SkillName.MASTER)]

    def test_god_can_be_set_directly(self):
        manager = SkillManager([_entry(SkillName.NORMAL)])
        assert manager.set_title(_entry(SkillName.GOD))
        assert manager.stats().title == SkillName.GOD

    def test_rejects_non_title(self):
        skills = [_entry(SkillName.NORMAL)]
        manager = SkillManager(skills)
        result = manager.set_title(_entry(SkillName.MASTER))
        assert not result
        assert result.error == ErrorKind.VALUE_ERROR
        assert manager.skills == skills


class TestAuthorizeAction:
    def test_power_beats_defense(self):
        a = _profile(power=500.0, defense=100.0)
        b = _profile(power=400.0, defense=450.0)
        assert a.authorize_action(b)
        assert not b.authorize_action(a)

    def test_outpowered_actor_refused(self):
        # Actor beats target defense but target is stronger
        a = _profile(power=500.0, defense=1.0)
        b = _profile(power=600.0, defense=10.0)
        assert not a.authorize_action(b)

    def test_equal_power_allowed_if_defense_beaten(self):
        a = _profile(power=500.0, defense=1.0)
        b = _profile(power=500.0, defense=499.0)
        assert a.authorize_action(b)

    def test_defense_equal_to_power_refused(self):
        a = _profile(power=500.0, defense=1.0)
        b = _profile(power=1.0, defense=500.0)
        assert not a.authorize_action(b)

    def test_default_profiles_cannot_act_on_each_other(self):
        a = SkillManager([_entry(SkillName.NORMAL)])
        b = SkillManager([_entry(SkillName.NORMAL)])
        assert not a.authorize_action(b)
        assert not a.authorize_action(a)

    def test_god_always_allowed(self):
        weak_god = SkillManager([SkillEntry(SkillCategory.TITLE, SkillName.GOD, 1.0)])
        assert weak_god.stats().power == 1.0
        giant = _profile(power=1e9, defense=1e9)
        assert weak_god.authorize_action(giant)
        # The title grants no protection of its own
        assert giant.authorize_action(weak_god)

    def test_title_ranks(self):
        manager = SkillManager([_entry(SkillName.MANAGER)])
        normal = SkillManager([_entry(SkillName.NORMAL)])
        assert manager.authorize_action(normal)
        assert not normal.authorize_action(manager)


class TestStats:
    def test_stats_matches_resolve(self):
        from starstraw.skills import resolve

        skills = [_entry(SkillName.MANAGER), _entry(SkillName.PROTECTED)]
        assert SkillManager(skills).stats() == resolve(skills)

    def test_wraps_copy(self):
        skills = [_entry(SkillName.NORMAL)]
        manager = SkillManager(skills)
        manager.grant(_entry(SkillName.MASTER))
        assert skills == [_entry(SkillName.NORMAL)]

"""Tests for default address resolution."""

from __future__ import annotations

from datetime import datetime, timezone

from storesync.address import resolve_default
from storesync.domain import Address


def at(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=timezone.utc)


def addr(address_id: int, **fields) -> Address:
    return Address(id=str(address_id), address_id=address_id, **fields)


class TestResolveDefault:
    def test_no_addresses(self):
        assert resolve_default([]) is None

    def test_local_choice_wins_over_server_flag(self):
        flagged = addr(1, default_flag=True)
        chosen = addr(2)

        assert resolve_default([flagged, chosen], "2") is chosen

    def test_unknown_local_choice_is_ignored(self):
        flagged = addr(1, default_flag=True)

        assert resolve_default([addr(2), flagged], "99") is flagged

    def test_single_strict_flag(self):
        flagged = addr(2, default_flag=True, default_hint=True)
        hinted = addr(3, default_hint=True)

        assert resolve_default([addr(1), flagged, hinted]) is flagged

    def test_hint_when_no_strict_flag(self):
        hinted = addr(2, default_hint=True)

        assert resolve_default([addr(1), hinted]) is hinted

    def test_several_flags_pick_latest_modified(self):
        older = addr(1, default_flag=True, modified_at=at(3))
        newer = addr(2, default_flag=True, created_at=at(1), modified_at=at(9))
        created_only = addr(3, default_flag=True, created_at=at(5))

        assert resolve_default([older, newer, created_only]) is newer

    def test_several_flags_tie_keeps_first(self):
        a = addr(1, default_flag=True, modified_at=at(4))
        b = addr(2, default_flag=True, modified_at=at(4))

        assert resolve_default([a, b]) is a

    def test_several_undated_flags_keep_first(self):
        a = addr(1, default_flag=True)
        b = addr(2, default_flag=True)

        assert resolve_default([a, b]) is a

    def test_no_candidates_pick_latest_created(self):
        old = addr(1, created_at=at(1), modified_at=at(20))
        new = addr(2, created_at=at(10))

        assert resolve_default([old, new]) is new

    def test_nothing_dated_picks_first(self):
        first = addr(1)

        assert resolve_default([first, addr(2)]) is first

    def test_choice_matches_ui_id(self):
        chosen = Address(id="home-1")

        assert resolve_default([addr(1, default_flag=True), chosen], "home-1") is chosen

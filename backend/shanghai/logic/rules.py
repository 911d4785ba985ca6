"""
Pluggable win rules.

A rule strategy decides whether a candidate tile set wins. Tables select a
rule by id through GameSettings.rule_id; unknown ids fall back to the default
Shanghai rule.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shanghai.logic.win import check_win

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.tiles import Tile
    from shanghai.logic.win import WinCheckResult


class RuleStrategy(Protocol):
    rule_id: str
    name: str

    def check_win(self, tiles: Sequence[Tile]) -> WinCheckResult: ...


class ShanghaiRule:
    """Shanghai rules: flush, mixed flush, all-triplets and all-honors only."""

    rule_id = "shanghai"
    name = "Shanghai (four shapes)"

    def check_win(self, tiles: Sequence[Tile]) -> WinCheckResult:
        return check_win(tiles)


_RULES: tuple[RuleStrategy, ...] = (ShanghaiRule(),)
DEFAULT_RULE_ID = _RULES[0].rule_id


def _normalize(rule_id: str | None) -> str:
    return (rule_id or "").strip().lower()


def get_rule(rule_id: str | None) -> RuleStrategy:
    key = _normalize(rule_id)
    for rule in _RULES:
        if rule.rule_id == key:
            return rule
    return _RULES[0]


def is_registered_rule(rule_id: str | None) -> bool:
    key = _normalize(rule_id)
    return any(rule.rule_id == key for rule in _RULES)

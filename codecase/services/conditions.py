"""Shared rule evaluation: which rules became true that were not already recorded.

Hint steps (rules over the learner's code) and achievements (rules over
player stats) both reduce to this shape.
"""
from collections.abc import Callable, Collection, Iterable
from typing import TypeVar

T = TypeVar("T")


def newly_satisfied(
    rules: Iterable[tuple[str, Callable[[T], bool]]],
    subject: T,
    already: Collection[str],
) -> list[str]:
    """Return ids of rules that hold for ``subject`` and are not in ``already``, in rule order."""
    return [rule_id for rule_id, test in rules if rule_id not in already and test(subject)]

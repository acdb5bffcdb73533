import pytest

from conftest import at, finished
from gamification.engine.rules import (
    Progress,
    check_rule,
    filter_history,
    rule_progress,
    rule_task_ids,
)
from gamification.errors import ValidationError
from gamification.models.actor import Player
from gamification.models.rule import AllTasksRule, AnyTaskRule, ExpressionRule, PointsRule


def _all(tasks, *names):
    return AllTasksRule(id=1, organisation_id=1, name='all', tasks=[tasks[n] for n in names])


def _any(tasks, *names):
    return AnyTaskRule(id=2, organisation_id=1, name='any', tasks=[tasks[n] for n in names])


def test_all_tasks_counts_repeats(tasks):
    rule = _all(tasks, 'A', 'A', 'B')
    history = [finished(tasks['A'], 1), finished(tasks['B'], 2)]
    assert check_rule(rule, Player(), history) is False

    history.append(finished(tasks['A'], 3))
    assert check_rule(rule, Player(), history) is True


def test_all_tasks_progress_counts_distinct_names(tasks):
    rule = _all(tasks, 'A', 'A', 'B')
    history = [finished(tasks['A'], 1), finished(tasks['B'], 2)]
    assert rule_progress(rule, Player(), history) == Progress(2, 2)
    assert rule_progress(rule, Player(), history[:1]) == Progress(1, 2)


def test_all_tasks_ignores_history_before_cursor(tasks):
    rule = _all(tasks, 'A', 'B')
    history = [finished(tasks['A'], 1), finished(tasks['B'], 5)]
    assert check_rule(rule, Player(), history, cursor=at(0)) is True
    assert check_rule(rule, Player(), history, cursor=at(1)) is False


def test_cursor_is_exclusive(tasks):
    rule = _any(tasks, 'A')
    history = [finished(tasks['A'], 3)]
    assert filter_history(rule, history, cursor=at(3)) == []


def test_any_task(tasks):
    rule = _any(tasks, 'A', 'B')
    assert check_rule(rule, Player(), [], cursor=at(0)) is False
    assert check_rule(rule, Player(), [finished(tasks['C'], 1)]) is False
    assert check_rule(rule, Player(), [finished(tasks['B'], 1)], cursor=at(0)) is True


def test_points_rule_threshold():
    rule = PointsRule(id=3, organisation_id=1, name='fifty', points=50)
    assert check_rule(rule, Player(points=49), []) is False
    assert check_rule(rule, Player(points=50), []) is True
    assert rule_progress(rule, Player(points=20), []) == Progress(20, 50)


def test_points_rule_rejects_negative_threshold():
    with pytest.raises(ValidationError):
        PointsRule(id=3, organisation_id=1, name='bad', points=-1)


def test_expression_rule(tasks):
    rule = ExpressionRule(id=4, organisation_id=1, name='expr', expression='1*(2+3)')
    assert rule_task_ids(rule) == [1, 2, 3]
    assert check_rule(rule, Player(), [finished(tasks['A'], 1)]) is False
    history = [finished(tasks['A'], 1), finished(tasks['C'], 2)]
    assert check_rule(rule, Player(), history) is True
    assert rule_progress(rule, Player(), history) == Progress(2, 3)


def test_progress_ratio_is_clamped():
    assert Progress(120, 100).ratio == 1.0
    assert Progress(0, 0).ratio == 1.0
    assert Progress(1, 4).ratio == 0.25


def test_check_rule_none_is_a_programming_error():
    with pytest.raises(TypeError):
        check_rule(None, Player(), [])  # type: ignore[arg-type]

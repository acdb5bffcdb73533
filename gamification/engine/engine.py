from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from gamification.engine.events import (
    CompletionOutcome,
    GoalCompletedEvent,
    RewardGrantedEvent,
)
from gamification.engine.goals import can_complete, last_finished, try_complete
from gamification.engine.interface import GamificationStore
from gamification.engine.rewards import grant, is_permanent
from gamification.engine.rules import Progress, check_points_rule, rule_progress
from gamification.errors import ForbiddenOperation, NotFound
from gamification.models.actor import Actor, Player, PlayerGroup
from gamification.models.goal import Goal
from gamification.models.reward import Points
from gamification.models.rule import GoalRule, PointsRule
from gamification.models.task import FinishedTask, Task
from gamification.utils.constants import MAX_CASCADE_DEPTH
from gamification.utils.tracing import add_span_metadata, trace_span

logger = logging.getLogger(__name__)

ActorKey = tuple[str, int]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Event:
    '''State scoped to one top-level task completion.'''

    now: datetime
    outcome: CompletionOutcome
    completed: set[tuple[ActorKey, int]] = field(default_factory=set)
    granted: set[tuple[ActorKey, int]] = field(default_factory=set)


class GamificationEngine:
    def __init__(
        self, store: GamificationStore, max_cascade_depth: int = MAX_CASCADE_DEPTH
    ) -> None:
        self.store = store
        self.max_cascade_depth = max_cascade_depth

    def complete_task(
        self, player: Player, task: Task, finished_at: datetime | None = None
    ) -> CompletionOutcome:
        '''Record that ``player`` finished ``task`` and run the goal cascade.

        Raises ForbiddenOperation before touching any state when the player
        is inactive or lacks every role the task is restricted to.
        '''
        with trace_span(
            'engine.complete_task', {'player_id': player.id, 'task_id': task.id}
        ):
            self._check_allowed(player, task)

            # goal records are stamped with the wall clock, never a backdated time
            now = _utcnow()
            if finished_at is None:
                finished_at = now
            elif finished_at.tzinfo is None:
                finished_at = finished_at.replace(tzinfo=timezone.utc)
            finished = FinishedTask(
                task=task, finished_at=finished_at, player_id=player.id
            )
            player.finished_tasks.append(finished)
            event = _Event(now=now, outcome=CompletionOutcome(finished_task=finished))

            for rule in self.store.rules_referencing_task(task):
                for goal in self._goals_for(rule):
                    if not goal.group_goal:
                        self._attempt(player, goal, rule, event, depth=0)
                        continue
                    for group in self.store.groups_containing(player):
                        self._attempt(group, goal, rule, event, depth=0)

            add_span_metadata('goals', len(event.outcome.completed_goals))
            add_span_metadata('rewards', len(event.outcome.granted_rewards))
            return event.outcome

    def goal_progress(self, actor: Actor, goal: Goal) -> Progress:
        rule = self.store.rule(goal.rule_id)
        previous = self.store.finished_goals(actor, goal)
        cursor = last_finished(previous) if goal.repeatable else None
        return rule_progress(rule, actor, self.store.finished_tasks(actor), cursor)

    def _check_allowed(self, player: Player, task: Task) -> None:
        if task.organisation_id != player.organisation_id:
            raise NotFound('Task', task.id)
        if not player.is_active:
            raise ForbiddenOperation(f'Player {player.id} is inactive')
        if task.roles and not (task.roles & player.roles):
            raise ForbiddenOperation(
                f'Player {player.id} has none of the roles required by task {task.id}'
            )

    def _goals_for(self, rule: GoalRule) -> list[Goal]:
        return sorted(self.store.goals_referencing_rule(rule), key=lambda g: g.id)

    def _attempt(
        self, actor: Actor, goal: Goal, rule: GoalRule, event: _Event, depth: int
    ) -> None:
        if (actor.key, goal.id) in event.completed:
            return
        if not can_complete(goal, actor):
            logger.debug(f'Goal {goal.id} skipped for {actor.key}: role mismatch')
            return

        with trace_span(
            'engine.rule_evaluation',
            {'goal_id': goal.id, 'rule_id': rule.id, 'actor': actor.key},
        ):
            history = (
                [] if isinstance(rule, PointsRule) else self.store.finished_tasks(actor)
            )
            finished_goal = try_complete(
                actor,
                goal,
                rule,
                self.store.finished_goals(actor, goal),
                history,
                now=event.now,
            )
        if finished_goal is None:
            return

        event.completed.add((actor.key, goal.id))
        actor.finished_goals.append(finished_goal)
        event.outcome.completed_goals.append(
            GoalCompletedEvent(actor, finished_goal, cascade_depth=depth)
        )
        logger.info(f'Goal {goal.id} ({goal.name}) completed by {actor.key}')
        self._apply_rewards(actor, goal, event, depth)

    def _apply_rewards(
        self, actor: Actor, goal: Goal, event: _Event, depth: int
    ) -> None:
        for reward_id in goal.reward_ids:
            reward = self.store.reward(reward_id)
            if is_permanent(reward):
                if (actor.key, reward.id) in event.granted:
                    continue
                event.granted.add((actor.key, reward.id))

            grant(reward, actor)
            event.outcome.granted_rewards.append(
                RewardGrantedEvent(actor, reward, goal.id)
            )
            if isinstance(reward, Points):
                self._points_cascade(actor, event, depth + 1)

    def _points_cascade(self, actor: Actor, event: _Event, depth: int) -> None:
        if depth > self.max_cascade_depth:
            logger.warning(
                f'Points cascade for {actor.key} stopped at depth {depth}'
            )
            return

        with trace_span('engine.points_cascade', {'actor': actor.key, 'depth': depth}):
            is_group = isinstance(actor, PlayerGroup)
            for rule in self.store.points_rules(actor.organisation_id):
                if not check_points_rule(rule, actor):
                    continue
                for goal in self._goals_for(rule):
                    # player cascades only reach player goals, groups group goals
                    if goal.group_goal != is_group:
                        continue
                    self._attempt(actor, goal, rule, event, depth)

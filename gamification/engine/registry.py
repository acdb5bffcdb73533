from __future__ import annotations

from typing import Iterable, List, Sequence

from gamification.engine.rules import rule_task_ids
from gamification.errors import NotFound, ValidationError
from gamification.models.actor import Actor, Player, PlayerGroup
from gamification.models.goal import FinishedGoal, Goal
from gamification.models.organisation import Organisation
from gamification.models.reward import Reward
from gamification.models.rule import (
    TASK_RULE_TYPES,
    AllTasksRule,
    AnyTaskRule,
    GoalRule,
    PointsRule,
    TaskRule,
)
from gamification.models.task import FinishedTask, Task


class OrganisationRegistry:
    '''In-memory arena of one organisation's entities, keyed by id.

    Implements GamificationStore. Goals reference rules and rewards by id;
    registering anything that belongs to another organisation is rejected.
    '''

    def __init__(self, organisation: Organisation) -> None:
        self.organisation = organisation
        self._tasks: dict[int, Task] = {}
        self._rules: dict[int, GoalRule] = {}
        self._rewards: dict[int, Reward] = {}
        self._goals: dict[int, Goal] = {}
        self._players: dict[int, Player] = {}
        self._groups: dict[int, PlayerGroup] = {}

    def _check_owner(self, kind: str, entity) -> None:
        if entity.organisation_id != self.organisation.id:
            raise ValidationError(
                f'{kind} {entity.id} belongs to organisation '
                f'{entity.organisation_id}, not {self.organisation.id}'
            )

    # registration

    def add_task(self, task: Task) -> Task:
        self._check_owner('Task', task)
        self._tasks[task.id] = task
        return task

    def add_rule(self, rule: GoalRule) -> GoalRule:
        self._check_owner('Rule', rule)
        if isinstance(rule, (AllTasksRule, AnyTaskRule)):
            for task in rule.tasks:
                if task.organisation_id != rule.organisation_id:
                    raise ValidationError(
                        f'Rule {rule.id} references task {task.id} '
                        'of another organisation'
                    )
        elif isinstance(rule, TASK_RULE_TYPES):
            missing = [i for i in rule_task_ids(rule) if i not in self._tasks]
            if missing:
                raise ValidationError(
                    f'Rule {rule.id} references unknown task ids {missing}'
                )
        self._rules[rule.id] = rule
        return rule

    def add_reward(self, reward: Reward) -> Reward:
        self._check_owner('Reward', reward)
        self._rewards[reward.id] = reward
        return reward

    def add_goal(self, goal: Goal) -> Goal:
        self._check_owner('Goal', goal)
        rule = self.rule(goal.rule_id)
        if rule.organisation_id != goal.organisation_id:
            raise ValidationError(
                f'Goal {goal.id} uses rule {rule.id} of another organisation'
            )
        for reward_id in goal.reward_ids:
            self.reward(reward_id)
        self._goals[goal.id] = goal
        return goal

    def add_player(self, player: Player) -> Player:
        self._check_owner('Player', player)
        self._players[player.id] = player
        return player

    def add_group(self, group: PlayerGroup) -> PlayerGroup:
        self._check_owner('PlayerGroup', group)
        self._groups[group.id] = group
        return group

    # lookups

    def task(self, task_id: int) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise NotFound('Task', task_id) from None

    def rule(self, rule_id: int) -> GoalRule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise NotFound('Rule', rule_id) from None

    def reward(self, reward_id: int) -> Reward:
        try:
            return self._rewards[reward_id]
        except KeyError:
            raise NotFound('Reward', reward_id) from None

    def goal(self, goal_id: int) -> Goal:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise NotFound('Goal', goal_id) from None

    def player(self, player_id: int) -> Player:
        try:
            return self._players[player_id]
        except KeyError:
            raise NotFound('Player', player_id) from None

    def group(self, group_id: int) -> PlayerGroup:
        try:
            return self._groups[group_id]
        except KeyError:
            raise NotFound('PlayerGroup', group_id) from None

    def player_by_reference(self, reference: str) -> Player:
        for p in self._players.values():
            if p.reference == reference:
                return p
        raise NotFound('Player with reference', reference)

    def all_goals(self) -> List[Goal]:
        return sorted(self._goals.values(), key=lambda g: g.id)

    def all_tasks(self) -> List[Task]:
        return sorted(self._tasks.values(), key=lambda t: t.id)

    # GamificationStore

    def finished_tasks(self, actor: Actor) -> Sequence[FinishedTask]:
        return list(actor.finished_tasks)

    def finished_goals(self, actor: Actor, goal: Goal) -> Sequence[FinishedGoal]:
        return actor.finished_goals_for(goal)

    def goals_referencing_rule(self, rule: GoalRule) -> Iterable[Goal]:
        return [g for g in self.all_goals() if g.rule_id == rule.id]

    def points_rules(self, organisation_id: int) -> Iterable[PointsRule]:
        return sorted(
            (
                r
                for r in self._rules.values()
                if isinstance(r, PointsRule) and r.organisation_id == organisation_id
            ),
            key=lambda r: r.id,
        )

    def groups_containing(self, player: Player) -> Iterable[PlayerGroup]:
        return sorted(
            (g for g in self._groups.values() if g.has_member(player)),
            key=lambda g: g.id,
        )

    def rules_referencing_task(self, task: Task) -> Iterable[TaskRule]:
        return sorted(
            (
                r
                for r in self._rules.values()
                if isinstance(r, TASK_RULE_TYPES) and task.id in rule_task_ids(r)
            ),
            key=lambda r: r.id,
        )

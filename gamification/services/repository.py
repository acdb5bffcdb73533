from __future__ import annotations

import logging
from typing import Any, Optional

from gamification.database.db_manager import DBManager
from gamification.engine.events import CompletionOutcome
from gamification.engine.registry import OrganisationRegistry
from gamification.engine.rewards import is_permanent
from gamification.errors import NotFound, ValidationError
from gamification.models.actor import Actor, Player, PlayerGroup
from gamification.models.goal import FinishedGoal, Goal
from gamification.models.organisation import Organisation, Role
from gamification.models.reward import REWARD_TYPES, Reward
from gamification.models.rule import RULE_TYPES, GoalRule, PointsRule
from gamification.models.task import FinishedTask, Task

logger = logging.getLogger(__name__)


class Repository:
    '''Postgres side of the engine.

    Loads an organisation into an OrganisationRegistry snapshot and writes
    a CompletionOutcome back, both on the caller's DBManager so a whole
    task completion shares one transaction.
    '''

    def __init__(self, db: DBManager) -> None:
        self.db = db

    # loading

    def load_organisation(self, api_key: str) -> OrganisationRegistry:
        row = self.db.fetchone(
            'SELECT id, name, api_key FROM organisations WHERE api_key = %s',
            (api_key,),
        )
        if not row:
            raise NotFound('Organisation with API key', api_key)
        org = Organisation(id=row['id'], name=row['name'], api_key=row['api_key'])
        registry = OrganisationRegistry(org)
        params = (org.id,)

        roles = {
            r['id']: Role(id=r['id'], organisation_id=org.id, name=r['name'])
            for r in self.db.fetchall(
                'SELECT id, name FROM roles WHERE organisation_id = %s', params
            )
        }

        for r in self.db.fetchall(
            'SELECT * FROM tasks WHERE organisation_id = %s ORDER BY id', params
        ):
            registry.add_task(
                Task(
                    id=r['id'],
                    organisation_id=org.id,
                    name=r['name'],
                    description=r.get('description') or '',
                    tradeable=bool(r.get('tradeable')),
                    roles=_roles(roles, r.get('role_ids')),
                )
            )

        for r in self.db.fetchall(
            'SELECT * FROM rules WHERE organisation_id = %s ORDER BY id', params
        ):
            registry.add_rule(self._rule_from_row(registry, r))

        for r in self.db.fetchall(
            'SELECT * FROM rewards WHERE organisation_id = %s ORDER BY id', params
        ):
            registry.add_reward(_reward_from_row(r))

        for r in self.db.fetchall(
            'SELECT * FROM goals WHERE organisation_id = %s ORDER BY id', params
        ):
            registry.add_goal(
                Goal(
                    id=r['id'],
                    organisation_id=org.id,
                    name=r['name'],
                    rule_id=r['rule_id'],
                    repeatable=bool(r.get('repeatable')),
                    group_goal=bool(r.get('group_goal')),
                    roles=_roles(roles, r.get('role_ids')),
                    reward_ids=list(r.get('reward_ids') or []),
                )
            )

        for r in self.db.fetchall(
            'SELECT * FROM players WHERE organisation_id = %s ORDER BY id', params
        ):
            registry.add_player(
                Player(
                    id=r['id'],
                    organisation_id=org.id,
                    nickname=r['nickname'],
                    reference=r.get('reference'),
                    is_active=bool(r.get('is_active', True)),
                    roles=_roles(roles, r.get('role_ids')),
                    **_balances(r),
                )
            )

        for r in self.db.fetchall(
            'SELECT * FROM player_groups WHERE organisation_id = %s ORDER BY id',
            params,
        ):
            registry.add_group(
                PlayerGroup(
                    id=r['id'],
                    organisation_id=org.id,
                    name=r['name'],
                    players=[registry.player(pid) for pid in r.get('player_ids') or []],
                    **_balances(r),
                )
            )

        self._load_history(registry)
        return registry

    def find_player(self, registry: OrganisationRegistry, reference: str) -> Player:
        return registry.player_by_reference(str(reference))

    def _rule_from_row(
        self, registry: OrganisationRegistry, r: dict[str, Any]
    ) -> GoalRule:
        cls = RULE_TYPES.get(r['rule_type'])
        if cls is None:
            raise ValidationError(f'Unknown rule type {r["rule_type"]!r}')
        common = {
            'id': r['id'],
            'organisation_id': r['organisation_id'],
            'name': r['name'],
            'description': r.get('description') or '',
        }
        if cls is PointsRule:
            return PointsRule(points=int(r.get('points') or 0), **common)
        if cls.rule_type == 'expression':
            return cls(expression=r.get('expression') or '', **common)
        return cls(
            tasks=[registry.task(tid) for tid in r.get('task_ids') or []], **common
        )

    def _load_history(self, registry: OrganisationRegistry) -> None:
        org_id = registry.organisation.id

        for r in self.db.fetchall(
            'SELECT ft.id, ft.task_id, ft.player_id, ft.finished_at '
            'FROM finished_tasks ft JOIN players p ON p.id = ft.player_id '
            'WHERE p.organisation_id = %s ORDER BY ft.finished_at, ft.id',
            (org_id,),
        ):
            registry.player(r['player_id']).finished_tasks.append(
                FinishedTask(
                    task=registry.task(r['task_id']),
                    finished_at=r['finished_at'],
                    player_id=r['player_id'],
                    id=r['id'],
                )
            )

        for r in self.db.fetchall(
            'SELECT fg.id, fg.goal_id, fg.player_id, fg.group_id, fg.finished_at '
            'FROM finished_goals fg JOIN goals g ON g.id = fg.goal_id '
            'WHERE g.organisation_id = %s ORDER BY fg.finished_at, fg.id',
            (org_id,),
        ):
            _owner(registry, r).finished_goals.append(
                FinishedGoal(goal_id=r['goal_id'], finished_at=r['finished_at'], id=r['id'])
            )

        for r in self.db.fetchall(
            'SELECT gr.reward_id, gr.player_id, gr.group_id '
            'FROM granted_rewards gr JOIN rewards rw ON rw.id = gr.reward_id '
            'WHERE rw.organisation_id = %s ORDER BY gr.granted_at, gr.id',
            (org_id,),
        ):
            reward = registry.reward(r['reward_id'])
            if is_permanent(reward):
                _owner(registry, r).rewards.append(reward)  # type: ignore[arg-type]

    # saving

    def save_outcome(self, outcome: CompletionOutcome) -> dict[str, Any]:
        '''Persist one completion; returns the ids the inserts produced.'''
        ft = outcome.finished_task
        row = self.db.fetchone(
            'INSERT INTO finished_tasks (task_id, player_id, finished_at) '
            'VALUES (%s, %s, %s) RETURNING id',
            (ft.task.id, ft.player_id, ft.finished_at),
        )
        finished_task_id = row['id'] if row else None

        finished_goal_ids: list[Optional[int]] = []
        for ev in outcome.completed_goals:
            player_id, group_id = _owner_columns(ev.actor)
            row = self.db.fetchone(
                'INSERT INTO finished_goals (goal_id, player_id, group_id, finished_at) '
                'VALUES (%s, %s, %s, %s) RETURNING id',
                (ev.finished_goal.goal_id, player_id, group_id, ev.finished_goal.finished_at),
            )
            finished_goal_ids.append(row['id'] if row else None)

        for ev in outcome.granted_rewards:
            if not is_permanent(ev.reward):
                continue
            player_id, group_id = _owner_columns(ev.actor)
            self.db.execute(
                'INSERT INTO granted_rewards (reward_id, player_id, group_id, granted_at) '
                'VALUES (%s, %s, %s, %s)',
                (ev.reward.id, player_id, group_id, ft.finished_at),
            )

        for actor in outcome.touched_actors:
            self._save_balances(actor)

        logger.info(
            f'Saved task {ft.task.id} for player {ft.player_id}: '
            f'{len(finished_goal_ids)} goals, {len(outcome.granted_rewards)} rewards'
        )
        return {
            'finished_task_id': finished_task_id,
            'finished_goal_ids': finished_goal_ids,
        }

    def _save_balances(self, actor: Actor) -> None:
        table = 'players' if isinstance(actor, Player) else 'player_groups'
        self.db.execute(
            f'UPDATE {table} '
            'SET points = %s, coins = %s, level_index = %s, level_label = %s '
            'WHERE id = %s',
            (actor.points, actor.coins, actor.level_index, actor.level_label, actor.id),
        )


def _roles(roles: dict[int, Role], ids: Optional[list[int]]) -> set[Role]:
    return {roles[i] for i in ids or [] if i in roles}


def _balances(r: dict[str, Any]) -> dict[str, Any]:
    return {
        'points': int(r.get('points') or 0),
        'coins': int(r.get('coins') or 0),
        'level_index': int(r.get('level_index') or 0),
        'level_label': r.get('level_label') or '',
    }


def _reward_from_row(r: dict[str, Any]) -> Reward:
    cls = REWARD_TYPES.get(r['reward_type'])
    if cls is None:
        raise ValidationError(f'Unknown reward type {r["reward_type"]!r}')
    common = {'id': r['id'], 'organisation_id': r['organisation_id']}
    if cls.reward_type in ('badge', 'achievement'):
        return cls(
            name=r.get('name') or '',
            description=r.get('description') or '',
            icon_url=r.get('icon_url'),
            **common,
        )
    if cls.reward_type == 'level':
        return cls(
            level_index=int(r.get('level_index') or 0),
            level_label=r.get('level_label') or '',
            **common,
        )
    return cls(amount=int(r.get('amount') or 0), **common)


def _owner(registry: OrganisationRegistry, r: dict[str, Any]) -> Actor:
    if r.get('player_id') is not None:
        return registry.player(r['player_id'])
    return registry.group(r['group_id'])


def _owner_columns(actor: Actor) -> tuple[Optional[int], Optional[int]]:
    if isinstance(actor, Player):
        return actor.id, None
    return None, actor.id

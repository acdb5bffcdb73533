from gamification.engine.engine import GamificationEngine
from gamification.engine.events import (
    CompletionOutcome,
    GoalCompletedEvent,
    RewardGrantedEvent,
)
from gamification.engine.goals import GoalState, can_complete, goal_state, try_complete
from gamification.engine.registry import OrganisationRegistry
from gamification.engine.rewards import grant
from gamification.engine.rules import Progress, check_rule, rule_progress

__all__ = [
    'CompletionOutcome',
    'GamificationEngine',
    'GoalCompletedEvent',
    'GoalState',
    'OrganisationRegistry',
    'Progress',
    'RewardGrantedEvent',
    'can_complete',
    'check_rule',
    'goal_state',
    'grant',
    'rule_progress',
    'try_complete',
]

from conftest import at
from gamification.engine.events import CompletionOutcome, GoalCompletedEvent, RewardGrantedEvent
from gamification.engine.rules import Progress
from gamification.models.actor import Player
from gamification.models.goal import FinishedGoal, Goal
from gamification.models.reward import Badge, Coins
from gamification.models.task import FinishedTask, Task
from gamification.utils.embeds import completion_embed, profile_embed, progress_embed


def test_completion_embed_lists_goals_and_rewards():
    player = Player(id=1, nickname='ada')
    task = Task(id=1, organisation_id=1, name='Read')
    outcome = CompletionOutcome(FinishedTask(task, at(0), player_id=1))
    outcome.completed_goals.append(GoalCompletedEvent(player, FinishedGoal(5, at(0))))
    outcome.granted_rewards.append(
        RewardGrantedEvent(player, Badge(id=1, organisation_id=1, name='Reader'), 5)
    )
    outcome.granted_rewards.append(
        RewardGrantedEvent(player, Coins(id=2, organisation_id=1, amount=3), 5)
    )

    embed = completion_embed(outcome, {5: 'Bookworm'})

    assert embed.title == 'Task completed: Read'
    assert embed.fields[0].value == '**Bookworm** (you)'
    assert 'Reader' in embed.fields[1].value and '+3 coins' in embed.fields[1].value


def test_completion_embed_without_goals():
    task = Task(id=1, organisation_id=1, name='Read')
    embed = completion_embed(CompletionOutcome(FinishedTask(task, at(0))), {})
    assert embed.description == 'No goals completed this time.'


def test_progress_and_profile_embeds():
    goal = Goal(id=1, organisation_id=1, name='Both', rule_id=1)
    assert progress_embed(goal, Progress(1, 2)).description.endswith('1/2')

    player = Player(nickname='ada', points=12)
    embed = profile_embed(player)
    values = {f.name: f.value for f in embed.fields}
    assert values['Points'] == '12'
    assert values['Badges'] == 'None yet'

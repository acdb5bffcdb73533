import discord

from gamification.engine.events import CompletionOutcome
from gamification.engine.rules import Progress
from gamification.models.actor import Player
from gamification.models.goal import Goal
from gamification.models.reward import Achievement, Badge, Coins, Points, ReceiveLevel


def _describe_reward(reward) -> str:
    if isinstance(reward, Badge):
        return f'🏅 Badge: **{reward.name}**'
    if isinstance(reward, Achievement):
        return f'🏆 Achievement: **{reward.name}**'
    if isinstance(reward, Points):
        return f'+{reward.amount} points'
    if isinstance(reward, Coins):
        return f'+{reward.amount} coins'
    if isinstance(reward, ReceiveLevel):
        return f'⬆️ Level {reward.level_index} {reward.level_label}'.rstrip()
    return str(reward)


def completion_embed(outcome: CompletionOutcome, goal_names: dict[int, str]) -> discord.Embed:
    task = outcome.finished_task.task
    embed = discord.Embed(title=f'Task completed: {task.name}', color=discord.Color.green())
    if not outcome.completed_goals:
        embed.description = 'No goals completed this time.'
        return embed

    goal_lines = []
    for ev in outcome.completed_goals:
        owner = 'you' if isinstance(ev.actor, Player) else f'group {ev.actor.name}'
        name = goal_names.get(ev.finished_goal.goal_id, f'#{ev.finished_goal.goal_id}')
        goal_lines.append(f'**{name}** ({owner})')
    embed.add_field(name='Goals', value='\n'.join(goal_lines), inline=False)

    if outcome.granted_rewards:
        embed.add_field(
            name='Rewards',
            value='\n'.join(_describe_reward(ev.reward) for ev in outcome.granted_rewards),
            inline=False,
        )
    return embed


def progress_embed(goal: Goal, progress: Progress) -> discord.Embed:
    embed = discord.Embed(title=f'Progress: {goal.name}', color=discord.Color.blue())
    filled = round(progress.ratio * 10)
    embed.description = (
        f"{'▰' * filled}{'▱' * (10 - filled)} {progress.current}/{progress.full}"
    )
    return embed


def profile_embed(player: Player) -> discord.Embed:
    embed = discord.Embed(
        title=f"{player.nickname}'s Profile", color=discord.Color.blurple()
    )
    level = f'{player.level_index} {player.level_label}'.rstrip()
    embed.add_field(name='Level', value=level)
    embed.add_field(name='Points', value=player.points)
    embed.add_field(name='Coins', value=player.coins)
    badges = ', '.join(b.name for b in player.badges) or 'None yet'
    achievements = ', '.join(a.name for a in player.achievements) or 'None yet'
    embed.add_field(name='Badges', value=badges, inline=False)
    embed.add_field(name='Achievements', value=achievements, inline=False)
    return embed

import logging

from discord import Interaction, app_commands
from discord.ext import commands

from gamification.database.db_manager import DBManager
from gamification.engine.engine import GamificationEngine
from gamification.errors import GamificationError
from gamification.services.repository import Repository
from gamification.utils.embeds import completion_embed, progress_embed
from gamification.utils.env import require_env
from gamification.utils.helper import parse_finished_at

logger = logging.getLogger(__name__)


class TasksCog(commands.Cog):
    '''Slash commands for completing tasks and checking goal progress.'''

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name='complete_task', description='Mark a task as done')
    @app_commands.describe(
        task_id='Id of the task you finished',
        finished_at='Optional: when you finished it (YYYY-MM-DD HH:MM:SS, UTC)',
    )
    async def complete_task(
        self,
        interaction: Interaction,
        task_id: int,
        finished_at: str | None = None,
    ):
        await interaction.response.defer(thinking=True, ephemeral=True)
        try:
            when = parse_finished_at(finished_at)
            with DBManager() as db:
                repo = Repository(db)
                registry = repo.load_organisation(require_env('ORGANISATION_API_KEY'))
                player = repo.find_player(registry, str(interaction.user.id))
                task = registry.task(task_id)

                outcome = GamificationEngine(registry).complete_task(player, task, when)
                repo.save_outcome(outcome)
                goal_names = {g.id: g.name for g in registry.all_goals()}
        except GamificationError as e:
            await interaction.followup.send(f'⚠️ {e}', ephemeral=True)
            return
        except Exception:
            logger.error('complete_task failed', exc_info=True)
            await interaction.followup.send(
                '❌ Something went wrong recording that task.', ephemeral=True
            )
            return

        await interaction.followup.send(
            embed=completion_embed(outcome, goal_names), ephemeral=True
        )

    @app_commands.command(name='goal_progress', description='Show progress on a goal')
    @app_commands.describe(goal_id='Id of the goal')
    async def goal_progress(self, interaction: Interaction, goal_id: int):
        await interaction.response.defer(thinking=True, ephemeral=True)
        try:
            with DBManager() as db:
                repo = Repository(db)
                registry = repo.load_organisation(require_env('ORGANISATION_API_KEY'))
                player = repo.find_player(registry, str(interaction.user.id))
                goal = registry.goal(goal_id)
                progress = GamificationEngine(registry).goal_progress(player, goal)
        except GamificationError as e:
            await interaction.followup.send(f'⚠️ {e}', ephemeral=True)
            return
        except Exception:
            logger.error('goal_progress failed', exc_info=True)
            await interaction.followup.send(
                '❌ Could not load goal progress.', ephemeral=True
            )
            return

        await interaction.followup.send(
            embed=progress_embed(goal, progress), ephemeral=True
        )


async def setup(bot: commands.Bot):
    await bot.add_cog(TasksCog(bot))

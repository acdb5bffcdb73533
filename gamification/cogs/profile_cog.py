import logging

import discord
from discord import Interaction, app_commands
from discord.ext import commands

from gamification.database.db_manager import DBManager
from gamification.errors import NotFound
from gamification.services.repository import Repository
from gamification.utils.embeds import profile_embed
from gamification.utils.env import require_env

logger = logging.getLogger(__name__)


class ProfileCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(
        name='profile', description="Show your profile or another member's profile"
    )
    @app_commands.describe(member='Optional: The member whose profile you want to view')
    async def show_profile(
        self, interaction: Interaction, member: discord.Member | None = None
    ):
        target = member or interaction.user
        try:
            with DBManager() as db:
                repo = Repository(db)
                registry = repo.load_organisation(require_env('ORGANISATION_API_KEY'))
                player = repo.find_player(registry, str(target.id))
        except NotFound:
            await interaction.response.send_message(
                f'⚠️ {target.mention} isn’t a player yet.', ephemeral=True
            )
            return
        except Exception:
            logger.error('profile lookup failed', exc_info=True)
            await interaction.response.send_message(
                '❌ Could not load that profile.', ephemeral=True
            )
            return

        await interaction.response.send_message(embed=profile_embed(player))


async def setup(bot: commands.Bot):
    await bot.add_cog(ProfileCog(bot))

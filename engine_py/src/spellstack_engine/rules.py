"""
Game rule configuration.
"""

from pydantic import BaseModel, Field


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    spell_call_required: bool = Field(
        default=False,
        description="Whether a player down to one card may (and should) call it"
    )
    stack_draw_cards: bool = Field(
        default=True,
        description="Whether +2/+4 cards can be stacked onto a pending forced draw"
    )
    max_players: int = Field(
        default=4,
        ge=2,
        le=4,
        description="Maximum number of players allowed"
    )

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return 2 <= player_count <= self.max_players


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)

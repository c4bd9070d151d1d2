"""
Promotion Engine

Turns per-tier standings into promotion/relegation directives for a box
season's cycle rollover. Directives are descriptive only; moving players
between boxes is left to the caller.
"""

from typing import List, Sequence

from clubrank.data_models.standings import MovementDirection, MovementDirective, TierStandings
from clubrank.utils.exceptions import InvalidPromotionRuleError
from clubrank.utils.logger import setup_logger

logger = setup_logger(__name__)


class PromotionEngine:
    """Computes movements between adjacent box tiers"""

    def __init__(self, up_count: int, down_count: int):
        """
        Args:
            up_count: Players promoted from each tier that has a tier above it
            down_count: Players relegated from each tier that has a tier below it

        Raises:
            InvalidPromotionRuleError: If either count is negative or not an integer
        """
        for label, value in (("up_count", up_count), ("down_count", down_count)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidPromotionRuleError(f"{label} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidPromotionRuleError(f"{label} must not be negative, got {value}")
        self.up_count = up_count
        self.down_count = down_count

    def _validate_tier(self, tier: TierStandings, moves_up: bool, moves_down: bool) -> None:
        size = tier.size
        if moves_up and self.up_count >= size:
            raise InvalidPromotionRuleError(
                f"up_count {self.up_count} must be less than the {size} players in tier {tier.tier_id}"
            )
        if moves_down and self.down_count >= size:
            raise InvalidPromotionRuleError(
                f"down_count {self.down_count} must be less than the {size} players in tier {tier.tier_id}"
            )
        if moves_up and moves_down and self.up_count + self.down_count > size:
            raise InvalidPromotionRuleError(
                f"up_count {self.up_count} and down_count {self.down_count} overlap "
                f"in tier {tier.tier_id} of {size} players"
            )

    def compute_movements(self, tiers: Sequence[TierStandings]) -> List[MovementDirective]:
        """
        Produce movement directives for every tier.

        Args:
            tiers: Tier standings ordered top tier first, each already ordered
                best player first

        Returns:
            Directives ordered by tier, promotions before relegations

        Raises:
            InvalidPromotionRuleError: If a count does not fit a tier it applies to
        """
        directives: List[MovementDirective] = []
        last = len(tiers) - 1

        for index, tier in enumerate(tiers):
            upper = tiers[index - 1] if index > 0 else None
            lower = tiers[index + 1] if index < last else None
            moves_up = upper is not None and self.up_count > 0
            moves_down = lower is not None and self.down_count > 0

            self._validate_tier(tier, moves_up, moves_down)

            if moves_up:
                for entry in tier.entries[:self.up_count]:
                    directives.append(MovementDirective(
                        player_id=entry.player_id,
                        from_tier_id=tier.tier_id,
                        to_tier_id=upper.tier_id,
                        direction=MovementDirection.UP
                    ))

            if moves_down:
                for entry in tier.entries[-self.down_count:]:
                    directives.append(MovementDirective(
                        player_id=entry.player_id,
                        from_tier_id=tier.tier_id,
                        to_tier_id=lower.tier_id,
                        direction=MovementDirection.DOWN
                    ))

        logger.info(
            f"Computed {len(directives)} movements across {len(tiers)} tiers "
            f"(up={self.up_count}, down={self.down_count})"
        )
        return directives

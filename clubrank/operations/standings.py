"""
Standings Calculator

Derives ordered standings for a ladder season (by rating) or a box tier (by
results) from plain member and match data. No storage access: the standings
service loads the inputs and hands them in.

Every ordering ends in the player id, so two entries never compare equal.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from clubrank.data_models.standings import (
    BoxMember, BoxStats, CompletedMatch, LadderMember, LadderStats, StandingEntry
)


class StandingsCalculator:
    """Orders ladder and box tier members into strict standings"""

    @staticmethod
    def _check_unique(player_ids: Sequence[int]) -> None:
        if len(set(player_ids)) != len(player_ids):
            raise ValueError("Standings members must be unique players")

    @staticmethod
    def ladder_standings(members: Iterable[LadderMember]) -> List[StandingEntry]:
        """
        Order ladder members by rating, highest first.

        Ties are broken by player id ascending. Unrated members sort after
        every rated member.

        Args:
            members: Ladder members with their current ratings

        Returns:
            Standing entries with 1-based ranks and LadderStats snapshots
        """
        members = list(members)
        StandingsCalculator._check_unique([m.player_id for m in members])

        ordered = sorted(
            members,
            key=lambda m: (m.rating is None, -(m.rating or 0.0), m.player_id)
        )
        return [
            StandingEntry(
                player_id=member.player_id,
                rank=rank,
                stats=LadderStats(rating=member.rating, matches_played=member.matches_played)
            )
            for rank, member in enumerate(ordered, start=1)
        ]

    @staticmethod
    def box_stats(members: Iterable[BoxMember],
                  matches: Iterable[CompletedMatch]) -> Dict[int, BoxStats]:
        """
        Tally wins, losses and played counts for each box member.

        Matches not involving a member are ignored for that member.
        """
        members = list(members)
        wins = defaultdict(int)
        played = defaultdict(int)
        member_ids = {m.player_id for m in members}

        for match in matches:
            for player_id in (match.player_a_id, match.player_b_id):
                if player_id in member_ids:
                    played[player_id] += 1
                    if match.winner_id == player_id:
                        wins[player_id] += 1

        stats = {}
        for member in members:
            member_played = played[member.player_id]
            member_wins = wins[member.player_id]
            stats[member.player_id] = BoxStats(
                wins=member_wins,
                losses=member_played - member_wins,
                played=member_played,
                win_percentage=(member_wins / member_played) if member_played else 0.0,
                seed=member.seed
            )
        return stats

    @staticmethod
    def box_standings(members: Iterable[BoxMember],
                      matches: Iterable[CompletedMatch]) -> List[StandingEntry]:
        """
        Order a box tier by wins, then win percentage, then seed, then player id.

        Args:
            members: Tier members with their seeds
            matches: Completed matches for the tier

        Returns:
            Standing entries with 1-based ranks and BoxStats snapshots
        """
        members = list(members)
        StandingsCalculator._check_unique([m.player_id for m in members])
        stats = StandingsCalculator.box_stats(members, matches)

        ordered = sorted(
            members,
            key=lambda m: (
                -stats[m.player_id].wins,
                -stats[m.player_id].win_percentage,
                m.seed,
                m.player_id
            )
        )
        return [
            StandingEntry(player_id=member.player_id, rank=rank, stats=stats[member.player_id])
            for rank, member in enumerate(ordered, start=1)
        ]

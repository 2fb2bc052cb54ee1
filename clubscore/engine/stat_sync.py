"""
Stat Sync Engine - turns a finished match into per-player stat entries and
moves the matching goals forward.

Runs inside the transaction that completed the match, so the existence check
and the insert cannot interleave with another completion of the same match.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from clubscore.models.match import Match, Innings, DismissalType
from clubscore.models.profile import SportProfile, StatEntry, Goal, StatSource
from clubscore.models.tournament import SportType
from clubscore.engine.ledgers import strike_rate
from clubscore.engine.overs import legal_balls_from_overs, overs_from_legal_balls, rate_per_over

logger = logging.getLogger(__name__)


@dataclass
class PlayerMatchStats:
    """One linked player's aggregated performance in one match"""
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    wickets: int = 0
    legal_balls_bowled: int = 0
    runs_conceded: int = 0
    catches: int = 0
    won: bool = False

    def to_metrics(self) -> dict:
        return {
            "runs": self.runs,
            "balls_faced": self.balls_faced,
            "fours": self.fours,
            "sixes": self.sixes,
            "strike_rate": strike_rate(self.runs, self.balls_faced),
            "wickets": self.wickets,
            "overs_bowled": overs_from_legal_balls(self.legal_balls_bowled),
            "runs_conceded": self.runs_conceded,
            "economy": rate_per_over(self.runs_conceded, self.legal_balls_bowled),
            "catches": self.catches,
            "match_result": 1 if self.won else 0,
        }


@dataclass
class LinkedPlayer:
    user_id: int
    team_name: str
    # Match-level links aggregate the whole side, entry-level links only their own rows
    whole_side: bool = True


@dataclass
class StatSyncResult:
    created: list = field(default_factory=list)  # StatEntry
    skipped_profile_ids: list = field(default_factory=list)
    goals_updated: list = field(default_factory=list)  # Goal

    @property
    def synced(self) -> bool:
        return bool(self.created)


class StatSyncEngine:
    def __init__(self, session: Session):
        self.session = session

    def linked_players(self, match: Match, innings: list[Innings]) -> list[LinkedPlayer]:
        """
        Every identity explicitly linked to this match: the two match-level
        player ids first, then any ids carried on individual ledger entries.
        """
        players = []
        seen = set()
        for user_id, team_name in ((match.player_a_id, match.team_a), (match.player_b_id, match.team_b)):
            if user_id and user_id not in seen:
                players.append(LinkedPlayer(user_id=user_id, team_name=team_name, whole_side=True))
                seen.add(user_id)

        for inn in innings:
            for entry in inn.batting_entries:
                if entry.player_id and entry.player_id not in seen:
                    players.append(LinkedPlayer(entry.player_id, inn.batting_team_name, whole_side=False))
                    seen.add(entry.player_id)
            for entry in inn.bowling_entries:
                if entry.player_id and entry.player_id not in seen:
                    players.append(LinkedPlayer(entry.player_id, inn.bowling_team_name, whole_side=False))
                    seen.add(entry.player_id)
        return players

    @staticmethod
    def aggregate_side(innings: list[Innings], team_name: str) -> PlayerMatchStats:
        """Batting of the innings the side batted in, bowling of the innings it bowled in"""
        stats = PlayerMatchStats()
        for inn in innings:
            if inn.batting_team_name == team_name:
                for entry in inn.batting_entries:
                    stats.runs += entry.runs
                    stats.balls_faced += entry.balls_faced
                    stats.fours += entry.fours
                    stats.sixes += entry.sixes
            if inn.bowling_team_name == team_name:
                for entry in inn.bowling_entries:
                    stats.wickets += entry.wickets
                    stats.legal_balls_bowled += legal_balls_from_overs(entry.overs_bowled)
                    stats.runs_conceded += entry.runs_conceded
            if inn.batting_team_name != team_name:
                stats.catches += sum(
                    1 for entry in inn.batting_entries
                    if entry.is_out and entry.dismissal_type == DismissalType.CAUGHT
                )
        return stats

    @staticmethod
    def aggregate_player(innings: list[Innings], user_id: int, team_name: str) -> PlayerMatchStats:
        stats = PlayerMatchStats()
        names = set()
        for inn in innings:
            for entry in inn.batting_entries:
                if entry.player_id == user_id:
                    names.add(entry.player_name)
                    stats.runs += entry.runs
                    stats.balls_faced += entry.balls_faced
                    stats.fours += entry.fours
                    stats.sixes += entry.sixes
            for entry in inn.bowling_entries:
                if entry.player_id == user_id:
                    names.add(entry.player_name)
                    stats.wickets += entry.wickets
                    stats.legal_balls_bowled += legal_balls_from_overs(entry.overs_bowled)
                    stats.runs_conceded += entry.runs_conceded

        # Fielders are only recorded by name on the dismissal
        for inn in innings:
            if inn.batting_team_name == team_name:
                continue
            stats.catches += sum(
                1 for entry in inn.batting_entries
                if entry.is_out
                and entry.dismissal_type == DismissalType.CAUGHT
                and entry.fielder_name in names
            )
        return stats

    def sync_match(self, match: Match) -> StatSyncResult:
        """Create stat entries for every linked player with a cricket profile"""
        result = StatSyncResult()
        innings = list(match.innings)
        linked = self.linked_players(match, innings)
        if not linked:
            logger.debug("Match %s has no linked players; nothing to sync", match.id)
            return result

        profiles = {
            p.user_id: p
            for p in self.session.query(SportProfile)
            .filter(
                SportProfile.user_id.in_([lp.user_id for lp in linked]),
                SportProfile.sport_type == SportType.CRICKET,
            )
            .all()
        }

        for player in linked:
            profile = profiles.get(player.user_id)
            if profile is None:
                continue

            if player.whole_side:
                stats = self.aggregate_side(innings, player.team_name)
            else:
                stats = self.aggregate_player(innings, player.user_id, player.team_name)
            stats.won = match.winner == player.team_name

            entry, goals = self.sync_player(match, profile, player.team_name, stats.to_metrics())
            if entry is None:
                result.skipped_profile_ids.append(profile.id)
            else:
                result.created.append(entry)
                result.goals_updated.extend(goals)

        return result

    def sync_player(
        self, match: Match, profile: SportProfile, team_name: str, metrics: dict
    ) -> tuple[Optional[StatEntry], list[Goal]]:
        """
        Write one stat entry and apply goal progress, unless this profile
        already has an entry for the match.
        """
        existing = (
            self.session.query(StatEntry)
            .filter_by(match_id=match.id, sport_profile_id=profile.id)
            .first()
        )
        if existing:
            logger.warning("Stats for match %s already synced to profile %s; skipping", match.id, profile.id)
            return None, []

        if match.is_standalone:
            source = StatSource.STANDALONE
            notes = "Auto-synced from standalone match"
        else:
            source = StatSource.TOURNAMENT
            notes = f"Auto-synced from {match.tournament.name}"

        entry = StatEntry(
            sport_profile_id=profile.id,
            match_id=match.id,
            date=datetime.utcnow(),
            opponent=match.opponent_of(team_name),
            notes=notes,
            metrics=metrics,
            source=source,
        )
        self.session.add(entry)
        goals = self.apply_goal_progress(profile, metrics)
        logger.info("Synced match %s stats to profile %s (%d goals updated)", match.id, profile.id, len(goals))
        return entry, goals

    def apply_goal_progress(self, profile: SportProfile, metrics: dict) -> list[Goal]:
        goals = (
            self.session.query(Goal)
            .filter_by(sport_profile_id=profile.id, completed=False)
            .all()
        )
        updated = []
        for goal in goals:
            value = metrics.get(goal.metric)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                continue
            goal.current = goal.current + value
            goal.completed = goal.current >= goal.target
            updated.append(goal)
        return updated

from clubscore.engine.scoring_engine import ScoringEngine
from clubscore.engine.bracket_engine import BracketEngine
from clubscore.engine.stat_sync import StatSyncEngine

__all__ = ["ScoringEngine", "BracketEngine", "StatSyncEngine"]

"""
Tests for club roles and who may score a match.
"""
import pytest

from clubscore.models import ClubRole, User
from clubscore.auth.permissions import (
    has_permission, has_min_role, club_role, require_club_permission, require_match_scorer,
)
from clubscore.auth.utils import create_access_token, verify_token
from clubscore.engine.errors import PermissionDeniedError


class TestRoleHierarchy:
    @pytest.mark.parametrize("role,expected", [
        (ClubRole.ADMIN, True),
        (ClubRole.HOST, True),
        (ClubRole.PARTICIPANT, False),
        (ClubRole.SPECTATOR, False),
        (None, False),
    ])
    def test_enter_scores(self, role, expected):
        assert has_permission(role, "enter_scores") is expected

    def test_unknown_permission_denied(self):
        assert not has_permission(ClubRole.ADMIN, "launch_rockets")

    def test_min_role(self):
        assert has_min_role(ClubRole.ADMIN, ClubRole.SPECTATOR)
        assert not has_min_role(ClubRole.SPECTATOR, ClubRole.PARTICIPANT)


class TestClubRole:
    def test_owner_is_admin(self, test_db, club, member):
        assert club_role(test_db, member("Admin Alice"), club) == ClubRole.ADMIN

    def test_member_roles(self, test_db, club, member):
        assert club_role(test_db, member("Host Harry"), club) == ClubRole.HOST
        assert club_role(test_db, member("Spectator Sam"), club) == ClubRole.SPECTATOR

    def test_outsider_has_no_role(self, test_db, club, make_user):
        assert club_role(test_db, make_user("Stranger"), club) is None

    def test_host_can_create_tournament(self, test_db, club, member):
        require_club_permission(test_db, member("Host Harry"), club, "create_tournament")

    def test_participant_cannot_create_tournament(self, test_db, club, member):
        with pytest.raises(PermissionDeniedError, match="create tournament"):
            require_club_permission(test_db, member("Player Priya"), club, "create_tournament")


class TestMatchScorer:
    def test_standalone_creator_only(self, test_db, standalone_match, make_user):
        creator = test_db.get(User, standalone_match.created_by_user_id)
        require_match_scorer(test_db, creator, standalone_match)

        with pytest.raises(PermissionDeniedError, match="creator"):
            require_match_scorer(test_db, make_user("Someone Else"), standalone_match)

    @pytest.mark.parametrize("name", ["Admin Alice", "Host Harry"])
    def test_tournament_scorers(self, test_db, knockout, member, name):
        match = knockout(size=2).matches[0]
        require_match_scorer(test_db, member(name), match)

    @pytest.mark.parametrize("name", ["Player Priya", "Spectator Sam"])
    def test_tournament_non_scorers(self, test_db, knockout, member, name):
        match = knockout(size=2).matches[0]
        with pytest.raises(PermissionDeniedError):
            require_match_scorer(test_db, member(name), match)

    def test_engine_rejects_spectator(self, test_db, knockout, member, engine):
        from clubscore.engine.scoring_engine import LineupPlayer
        match = knockout(size=2).matches[0]
        with pytest.raises(PermissionDeniedError):
            engine.start_innings(
                match.id, "A", [LineupPlayer("A1"), LineupPlayer("A2")], LineupPlayer("B1"),
                scorer=member("Spectator Sam"),
            )
        test_db.refresh(match)
        assert match.innings == []


class TestTokens:
    def test_round_trip(self):
        assert verify_token(create_access_token(42)) == 42

    def test_wrong_type_rejected(self):
        assert verify_token(create_access_token(42), token_type="refresh") is None

    def test_garbage_rejected(self):
        assert verify_token("not-a-token") is None

    def test_algorithm_from_environment(self, monkeypatch):
        import importlib
        import clubscore.config as config

        monkeypatch.setenv("JWT_ALGORITHM", "HS512")
        try:
            assert importlib.reload(config).settings.JWT_ALGORITHM == "HS512"
        finally:
            monkeypatch.delenv("JWT_ALGORITHM")
            importlib.reload(config)

    def test_configured_algorithm_used(self, monkeypatch):
        from clubscore.auth.utils import settings

        hs256_token = create_access_token(7)
        monkeypatch.setattr(settings, "JWT_ALGORITHM", "HS512")
        assert verify_token(create_access_token(7)) == 7
        assert verify_token(hs256_token) is None

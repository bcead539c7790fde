"""
Tests for sessions: action application, clicks and snapshot transfer.
"""

import json

import pytest

from ..engine_core.action import Action, Rejection
from ..engine_core.cards import parse_card
from ..engine_core.rules import RuleVariant
from ..engine_core.state import GamePhase
from ..session import Session, SessionManager, SessionState
from ..snapshot import serialize


def c(key):
    return parse_card(key)


@pytest.fixture
def manager():
    return SessionManager(rules=RuleVariant())


@pytest.fixture
def session(mixed_state):
    return Session(session_id="test", game_state=mixed_state)


class TestSessionManager:
    """Tests for session lifecycle."""

    def test_create_session_deals_game(self, manager):
        session = manager.create_session(num_players=4, seed=8)
        assert session.game_state.num_players == 4
        assert session.seed == 8
        assert session.is_active()
        assert manager.get_session(session.session_id) is session

    def test_seeded_sessions_match(self, manager):
        a = manager.create_session(num_players=3, seed=21)
        b = manager.create_session(num_players=3, seed=21)
        assert a.session_id != b.session_id
        assert a.game_state == b.game_state

    def test_random_seed_is_recorded(self, manager):
        session = manager.create_session(num_players=2)
        assert session.seed is not None

    def test_end_session(self, manager):
        session = manager.create_session()
        assert session.session_id in manager.list_active_sessions()

        assert manager.end_session(session.session_id)
        assert session.session_id not in manager.list_active_sessions()
        assert session.state == SessionState.GAME_OVER
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_cleanup_stale_sessions(self, manager):
        finished = manager.create_session()
        finished.state = SessionState.GAME_OVER
        finished.created_at -= 7200
        running = manager.create_session()
        running.created_at -= 7200

        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 1
        assert manager.get_session(finished.session_id) is None
        assert manager.get_session(running.session_id) is running

    def test_rules_from_env(self, monkeypatch):
        monkeypatch.setenv("BAITAN_SIDE_ATTACKS", "true")
        assert SessionManager().rules.allow_side_attacks
        monkeypatch.setenv("BAITAN_SIDE_ATTACKS", "0")
        assert not SessionManager().rules.allow_side_attacks


class TestSessionApply:
    """Only accepted actions replace the snapshot."""

    def test_accepted_action_replaces_state(self, session, mixed_state):
        result = session.apply(Action.attack(0, c("7♦")))
        assert result.success
        assert session.game_state is result.new_state
        assert session.game_state is not mixed_state

    def test_rejected_action_keeps_state(self, session, mixed_state):
        result = session.apply(Action.attack(1, c("9♦")))
        assert not result.success
        assert session.game_state is mixed_state

    def test_stale_action_fails_naturally(self, session):
        # Two players race: the first attack wins, the second is now out of phase
        first = Action.attack(0, c("7♦"))
        second = Action.attack(0, c("7♣"))
        assert session.apply(first).success
        assert session.apply(second).error_code == Rejection.WRONG_PHASE

    def test_finishing_ends_session(self):
        from .conftest import build_state

        state = build_state(
            [["7♣", "8♥"], ["9♦"], ["8♦"]],
            phase=GamePhase.DEFEND,
            table=[("7♦", None, 0)],
            deck=[],
        )
        session = Session(session_id="end", game_state=state)
        session.apply(Action.defend(1, 0, c("9♦")))
        assert session.state == SessionState.GAME_OVER
        assert not session.is_active()


class TestClick:
    """Card clicks are interpreted by role and phase."""

    def test_attacker_click_attacks(self, session):
        result = session.click(0, c("7♦"))
        assert result.success
        assert session.game_state.phase == GamePhase.DEFEND

    def test_defender_click_defends_first_open_pair(self, session):
        session.click(0, c("7♦"))
        session.click(0, c("7♣"))
        result = session.click(1, c("9♦"))
        assert result.success
        assert session.game_state.table[0].defend == c("9♦")

    def test_attacker_click_during_defence_adds(self, session):
        session.click(0, c("7♦"))
        result = session.click(0, c("7♣"))
        assert result.success
        assert len(session.game_state.table) == 2

    def test_bystander_click_in_attack_phase(self, session):
        result = session.click(2, c("6♦"))
        assert result.error_code == Rejection.WRONG_ACTOR

    def test_bystander_add_rejected_by_default(self, session):
        session.click(0, c("7♦"))
        result = session.click(2, c("6♦"))
        assert result.error_code == Rejection.WRONG_ACTOR


class TestSnapshotTransfer:
    """Export on one device, import on another."""

    def test_export_import_between_sessions(self, manager):
        source = manager.create_session(num_players=3, seed=4)
        text = source.export_state()

        target = manager.create_session(num_players=2, seed=5)
        result = target.import_state(text)

        assert result.success
        assert target.game_state.num_players == 3
        assert target.game_state.deck == source.game_state.deck
        assert target.game_state.players == source.game_state.players
        assert target.game_state.log[0] == "Imported game state"

    def test_export_is_logged(self, session):
        session.export_state()
        assert session.game_state.log[0].startswith("Game state exported")

    def test_repeated_exports_differ_only_in_log(self, session):
        first = json.loads(session.export_state())
        second = json.loads(session.export_state())
        assert first != second
        assert len(second["log"]) == len(first["log"]) + 1
        first.pop("log")
        second.pop("log")
        assert first == second

    def test_new_game_with_rules(self, session):
        session.new_game(3, seed=3, rules=RuleVariant(allow_side_attacks=True))
        assert session.rules.allow_side_attacks
        assert session.reducer.rules.allow_side_attacks

    def test_malformed_import_keeps_game(self, session):
        before = session.game_state
        result = session.import_state("not json")
        assert not result.success
        assert result.error_code == Rejection.MALFORMED_IMPORT
        assert session.game_state is before

    def test_conservation_checked_on_import(self, session):
        data = json.loads(serialize(session.game_state))
        data["players"][0]["hand"].append(data["players"][1]["hand"][0])
        result = session.import_state(json.dumps(data))
        assert result.error_code == Rejection.MALFORMED_IMPORT

    def test_new_game_at_same_table(self, session):
        state = session.new_game(2, seed=3)
        assert state.num_players == 2
        assert session.game_state is state
        assert session.is_active()


class TestView:
    """Query surface for the presentation layer."""

    def test_view_fields(self, session):
        session.click(0, c("7♦"))
        view = session.view()

        assert view["phase"] == "defend"
        assert view["attacker"] == 0
        assert view["defender"] == 1
        assert view["trump"] == "♠"
        assert view["deck_count"] == 12
        assert view["table"] == [{"attack": "7♦", "defend": None, "by": 0}]
        assert view["players"][0]["count"] == 7
        assert "7♦" not in view["players"][0]["hand"]
        assert view["log"][0] == "Player 1 attacks 7♦"
        assert view["winners"] == []

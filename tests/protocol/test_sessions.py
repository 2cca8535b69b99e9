from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.engine.game import Game
from chessrules.engine.move import parse_uci
from chessrules.protocol.http.app import create_app
from chessrules.protocol.http.session import InMemorySessionStore


START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _client() -> TestClient:
    return TestClient(create_app())


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body["game_id"], str) and body["game_id"]
    assert body["fen"] == START_FEN
    game_id = body["game_id"]

    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["side_to_move"] == "white"
    assert len(state["legal_moves"]) == 20
    assert state["outcome"] is None
    assert state["pending_promotion"] is None


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"


def test_delete_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    assert client.delete(f"/api/games/{game_id}").json() == {"deleted": True}
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_set_position_validation_and_success() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"

    fen = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_ok.status_code == 200
    state = r_ok.json()
    assert state["fen"] == fen
    assert "e1g1" in state["legal_moves"] and "e1c1" in state["legal_moves"]


def test_loading_finished_position_reports_outcome_once() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/position", json={"fen": "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"})
    state = r.json()
    assert state["stalemate"] is True
    assert state["outcome"]["kind"] == "stalemate"
    assert [e["kind"] for e in state["events"]] == ["stalemate"]
    again = client.get(f"/api/games/{game_id}/state").json()
    assert again["events"] == []
    assert again["outcome"]["kind"] == "stalemate"


def test_store_create_get_replace() -> None:
    store = InMemorySessionStore()
    gid = store.create()
    assert len(store) == 1
    session = store.get(gid)
    assert session is not None
    assert session.game.to_fen() == START_FEN

    replaced = store.replace_game(gid, Game.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1"))
    assert store.get(gid) is replaced
    assert store.delete(gid) is True
    assert store.get(gid) is None
    assert store.delete(gid) is False


def test_outcome_reaches_session_after_earlier_drains() -> None:
    store = InMemorySessionStore()
    session = store.get(store.create())
    assert session is not None
    for uci in ("f2f3", "e7e5", "g2g4"):
        session.game.apply(parse_uci(uci))
        assert session.drain_events() == []
    session.game.apply(parse_uci("d8h4"))
    assert session.game.checkmate()
    assert [o.kind for o in session.drain_events()] == ["checkmate"]
    assert session.drain_events() == []


def test_http_checkmate_event_after_several_state_reads() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    for uci in ("f2f3", "e7e5", "g2g4"):
        client.post(f"/api/games/{game_id}/move", json={"move": uci})
        assert client.get(f"/api/games/{game_id}/state").json()["events"] == []
    state = client.post(f"/api/games/{game_id}/move", json={"move": "d8h4"}).json()
    assert [e["kind"] for e in state["events"]] == ["checkmate"]

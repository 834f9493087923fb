from __future__ import annotations

import threading
import time
from typing import Any, Mapping, Optional

from flask import Flask, jsonify, request

from .room_store import RoomStore


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.update(
        PLAYER_TIMEOUT_SECONDS=120,
        CLEANUP_INTERVAL_SECONDS=10,
    )
    if test_config is None:
        app.config.from_prefixed_env("STAXXIT")
    else:
        app.config.update(test_config)

    store = RoomStore(player_timeout_seconds=app.config["PLAYER_TIMEOUT_SECONDS"])
    app.extensions["room_store"] = store

    interval = app.config["CLEANUP_INTERVAL_SECONDS"]
    if interval:
        def _cleanup_loop() -> None:
            while True:
                time.sleep(interval)
                removed = store.cleanup()
                if removed:
                    app.logger.info(f"[🧹] Removed {removed} abandoned room(s)")

        t = threading.Thread(target=_cleanup_loop, daemon=True)
        t.start()

    # -------- Rooms --------

    @app.post("/api/rooms")
    def api_create_room():
        data = _json_body()
        nick = _text_field(data, "nick")
        if not nick:
            return jsonify({"error": "Nick is required"}), 400

        room, player = store.create_room(nick=nick)
        app.logger.info(f"[✅] Room {room.code} created by {nick} (ID: {player.player_id})")
        return jsonify({
            "code": room.code,
            "player_id": player.player_id,
            "color": player.color,
        })

    @app.get("/api/rooms/<code>")
    def api_get_room(code: str):
        player_id = (request.args.get("player_id") or "").strip() or None
        if player_id:
            store.ping(code, player_id)

        state = store.get_state(code)
        if not state:
            app.logger.warning(f"[❌] Room {code} not found")
            return jsonify({"error": "Room not found"}), 404
        return jsonify(state)

    @app.post("/api/rooms/<code>/join")
    def api_join_room(code: str):
        data = _json_body()
        nick = _text_field(data, "nick")
        if not nick:
            return jsonify({"error": "Nick is required"}), 400

        res = store.join_room(code=code, nick=nick)
        if res["ok"] is False:
            app.logger.warning(f"[❌] {nick} could not join {code}: {res.get('error')}")
            status = 404 if res["error"] == "Room not found" else 400
            return jsonify(res), status
        app.logger.info(f"[👤] {nick} joined {res['code']} as {res['color']}")
        return jsonify(res)

    @app.post("/api/rooms/<code>/leave")
    def api_leave_room(code: str):
        data = _json_body()
        player_id = _text_field(data, "player_id")
        if not player_id:
            return jsonify({"error": "player_id is required"}), 400

        ok = store.leave_room(code=code, player_id=player_id)
        if not ok:
            return jsonify({"error": "Room or player not found"}), 404
        app.logger.info(f"[🚪] Player {player_id} left room {code}")
        return jsonify({"ok": True})

    # -------- Game --------

    @app.post("/api/rooms/<code>/move")
    def api_move(code: str):
        data = _json_body()
        player_id = _text_field(data, "player_id")
        if not player_id:
            return jsonify({"error": "Auth required"}), 401

        res = store.make_move(code, player_id, data.get("action"))
        if res["ok"] is False:
            if res["error"] == "Room not found":
                return jsonify(res), 404
            app.logger.info(f"[⛔] Rejected action in {code}: {res['error']}")
            return jsonify(res), 400

        if res["outcome"] is not None:
            app.logger.info(f"[🏁] Game {code} ended, winner: {res['outcome']['winner']}")
        return jsonify(res)

    return app

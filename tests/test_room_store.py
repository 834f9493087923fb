import unittest

from staxxit.room_store import RoomStore


class TestRoomStore(unittest.TestCase):
    def setUp(self):
        self.store = RoomStore(player_timeout_seconds=120)
        self.room, self.host = self.store.create_room("alice")

    def test_create_room(self):
        self.assertEqual(len(self.room.code), 6)
        self.assertEqual(self.host.color, "W")
        self.assertFalse(self.room.started)

        state = self.store.get_state(self.room.code)
        self.assertEqual(state["code"], self.room.code)
        self.assertEqual(state["players"], {"W": "alice", "B": None})
        self.assertEqual(state["phase"], "placing")

    def test_join_takes_black(self):
        res = self.store.join_room(self.room.code.lower(), "bob")
        self.assertTrue(res["ok"])
        self.assertEqual(res["color"], "B")
        self.assertTrue(self.store.get_room(self.room.code).started)

        res = self.store.join_room(self.room.code, "carol")
        self.assertFalse(res["ok"])
        self.assertEqual(res["error"], "Room is full")

    def test_seated_players_in_join_order(self):
        bob = self.store.join_room(self.room.code, "bob")
        room = self.store.get_room(self.room.code)
        # Bob joined earlier than the host as far as the clock is concerned
        room.players[bob["player_id"]].joined_at = self.host.joined_at - 10

        state = self.store.get_state(self.room.code)
        self.assertEqual(state["created_at"], self.room.created_at)
        self.assertEqual([p["nick"] for p in state["seated"]], ["bob", "alice"])
        self.assertEqual([p["color"] for p in state["seated"]], ["B", "W"])
        self.assertNotIn("player_id", state["seated"][0])

    def test_join_unknown_room(self):
        res = self.store.join_room("NOPE00", "bob")
        self.assertFalse(res["ok"])
        self.assertEqual(res["error"], "Room not found")

    def test_leave_frees_seat_and_last_one_out_closes(self):
        bob = self.store.join_room(self.room.code, "bob")
        self.assertTrue(self.store.leave_room(self.room.code, self.host.player_id))
        self.assertEqual(self.store.get_state(self.room.code)["players"], {"W": None, "B": "bob"})

        res = self.store.join_room(self.room.code, "dave")
        self.assertEqual(res["color"], "W")

        self.assertTrue(self.store.leave_room(self.room.code, bob["player_id"]))
        self.assertTrue(self.store.leave_room(self.room.code, res["player_id"]))
        self.assertIsNone(self.store.get_room(self.room.code))
        self.assertFalse(self.store.leave_room(self.room.code, res["player_id"]))

    def test_make_move(self):
        bob = self.store.join_room(self.room.code, "bob")
        code = self.room.code

        res = self.store.make_move(code, bob["player_id"], {"kind": "place", "pos": "0,0"})
        self.assertFalse(res["ok"])
        self.assertEqual(res["error"], "Invalid move")

        res = self.store.make_move(code, self.host.player_id, {"kind": "place", "pos": "0,0"})
        self.assertTrue(res["ok"])
        self.assertEqual(res["state"]["current_player"], "B")
        self.assertEqual(res["state"]["board"], {"0,0": ["W"]})
        self.assertIsNone(res["outcome"])

        res = self.store.make_move(code, bob["player_id"], {"kind": "place", "pos": "zz"})
        self.assertEqual(res["error"], "Malformed action")

        res = self.store.make_move(code, "ghost", {"kind": "place", "pos": "1,0"})
        self.assertEqual(res["error"], "Player not found")

        res = self.store.make_move("NOPE00", bob["player_id"], {"kind": "place", "pos": "1,0"})
        self.assertEqual(res["error"], "Room not found")

    def test_cleanup_drops_stale_players(self):
        other, _ = self.store.create_room("erin")
        self.store.get_room(self.room.code).players[self.host.player_id].last_seen = 0

        self.assertEqual(self.store.cleanup(), 1)
        self.assertIsNone(self.store.get_room(self.room.code))
        self.assertIsNotNone(self.store.get_room(other.code))
        self.assertEqual(len(self.store), 1)


if __name__ == '__main__':
    unittest.main()

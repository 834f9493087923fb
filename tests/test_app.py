import unittest

from staxxit.app import create_app


class TestApi(unittest.TestCase):
    def setUp(self):
        self.app = create_app({"TESTING": True, "CLEANUP_INTERVAL_SECONDS": 0})
        self.client = self.app.test_client()

    def _create(self, nick="alice"):
        resp = self.client.post("/api/rooms", json={"nick": nick})
        self.assertEqual(resp.status_code, 200)
        return resp.get_json()

    def test_create_requires_nick(self):
        resp = self.client.post("/api/rooms", json={})
        self.assertEqual(resp.status_code, 400)

    def test_create_and_join(self):
        host = self._create()
        self.assertEqual(host["color"], "W")

        resp = self.client.post(f"/api/rooms/{host['code']}/join", json={"nick": "bob"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["color"], "B")

        resp = self.client.post(f"/api/rooms/{host['code']}/join", json={"nick": "carol"})
        self.assertEqual(resp.status_code, 400)

        resp = self.client.get(f"/api/rooms/{host['code']}", query_string={"player_id": host["player_id"]})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.get_json()["started"])

    def test_wrongly_typed_fields_are_rejected(self):
        self.assertEqual(self.client.post("/api/rooms", json={"nick": 5}).status_code, 400)
        self.assertEqual(self.client.post("/api/rooms", json=[1]).status_code, 400)

        host = self._create()
        code = host["code"]
        resp = self.client.post(f"/api/rooms/{code}/join", json={"nick": ["bob"]})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(f"/api/rooms/{code}/leave", json={"player_id": 7})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(f"/api/rooms/{code}/move", json={"player_id": 7, "action": {}})
        self.assertEqual(resp.status_code, 401)
        resp = self.client.post(f"/api/rooms/{code}/move", json=[1])
        self.assertEqual(resp.status_code, 401)

    def test_unknown_room(self):
        self.assertEqual(self.client.get("/api/rooms/NOPE00").status_code, 404)
        resp = self.client.post("/api/rooms/NOPE00/join", json={"nick": "bob"})
        self.assertEqual(resp.status_code, 404)

    def test_move(self):
        host = self._create()
        url = f"/api/rooms/{host['code']}/move"

        resp = self.client.post(url, json={"action": {"kind": "place", "pos": "0,0"}})
        self.assertEqual(resp.status_code, 401)

        resp = self.client.post(url, json={
            "player_id": host["player_id"],
            "action": {"kind": "place", "pos": "3,0"},
        })
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post(url, json={
            "player_id": host["player_id"],
            "action": {"kind": "place", "pos": "0,0"},
        })
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["state"]["current_player"], "B")
        self.assertEqual(body["state"]["last_action"]["pos"], "0,0")

    def test_leave(self):
        host = self._create()
        url = f"/api/rooms/{host['code']}/leave"

        self.assertEqual(self.client.post(url, json={}).status_code, 400)
        self.assertEqual(self.client.post(url, json={"player_id": host["player_id"]}).status_code, 200)
        self.assertEqual(self.client.post(url, json={"player_id": host["player_id"]}).status_code, 404)
        self.assertEqual(self.client.get(f"/api/rooms/{host['code']}").status_code, 404)


if __name__ == '__main__':
    unittest.main()

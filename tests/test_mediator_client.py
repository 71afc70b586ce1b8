"""
Tests for the mediator client: status translation and error taxonomy.

``urllib.request.urlopen`` is patched so no mediator is needed.
"""

import http.client
import io
import json
import socket
import threading
import unittest
import urllib.error
from unittest.mock import MagicMock, patch

from mediator.client import (
    GameFullError,
    MalformedResponseError,
    MediatorClient,
    MediatorError,
    MediatorUnreachableError,
    UnexpectedStatusError,
)
from schemas.move import Direction

BASE_URL = "http://mediator:8080"


def _response(status=200, body=b""):
    response = MagicMock()
    response.status = status
    response.read.return_value = body
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def _json_response(payload, status=200):
    return _response(status, json.dumps(payload).encode("utf-8"))


def _http_error(code, body=b""):
    return urllib.error.HTTPError(BASE_URL, code, "error", hdrs=None, fp=io.BytesIO(body))


def _garbage_server(reply):
    """Accept one connection on 127.0.0.1, answer ``reply`` and hang up. Returns the base url."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(5)

    def serve():
        with listener:
            conn, _ = listener.accept()
            with conn:
                conn.recv(4096)
                conn.sendall(reply)

    threading.Thread(target=serve, daemon=True).start()
    return f"http://127.0.0.1:{listener.getsockname()[1]}"


class TestRegister(unittest.TestCase):

    def setUp(self):
        self.client = MediatorClient(BASE_URL + "/", timeout=3.0)

    @patch("urllib.request.urlopen")
    def test_register_returns_player_id(self, urlopen):
        urlopen.return_value = _json_response({"id": 7})

        result = self.client.register("Wobbly Toucan", "10.0.0.2:9000")

        self.assertEqual(result.id, 7)
        request = urlopen.call_args[0][0]
        self.assertEqual(request.full_url, BASE_URL + "/player")
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(json.loads(request.data), {"name": "Wobbly Toucan", "endpoint": "10.0.0.2:9000"})
        self.assertEqual(request.get_header("Content-type"), "application/json")
        self.assertEqual(urlopen.call_args[1]["timeout"], 3.0)

    @patch("urllib.request.urlopen")
    def test_locked_means_game_full(self, urlopen):
        urlopen.side_effect = _http_error(423, b"locked")

        with self.assertRaises(GameFullError) as ctx:
            self.client.register("team", "10.0.0.2:9000")

        self.assertEqual(ctx.exception.status_code, 423)
        self.assertEqual(ctx.exception.operation, "register")
        self.assertNotIsInstance(ctx.exception, MediatorUnreachableError)

    @patch("urllib.request.urlopen")
    def test_other_status_is_unexpected(self, urlopen):
        urlopen.side_effect = _http_error(500, b"boom")

        with self.assertRaises(UnexpectedStatusError) as ctx:
            self.client.register("team", "10.0.0.2:9000")

        self.assertNotIsInstance(ctx.exception, GameFullError)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("boom", str(ctx.exception))

    @patch("urllib.request.urlopen")
    def test_payload_without_id_is_malformed(self, urlopen):
        urlopen.return_value = _json_response({"name": "team"})

        with self.assertRaises(MalformedResponseError):
            self.client.register("team", "10.0.0.2:9000")


class TestGameState(unittest.TestCase):

    def setUp(self):
        self.client = MediatorClient(BASE_URL)

    @patch("urllib.request.urlopen")
    def test_game_state_is_parsed(self, urlopen):
        urlopen.return_value = _json_response({"map": [[0, 1], [2, 3]], "gamers": [{"id": 3}]})

        state = self.client.game_state()

        self.assertEqual(state.map, [[0, 1], [2, 3]])
        self.assertEqual(state.players[0].id, 3)
        request = urlopen.call_args[0][0]
        self.assertEqual(request.get_method(), "GET")
        self.assertEqual(request.full_url, BASE_URL + "/map")

    @patch("urllib.request.urlopen")
    def test_invalid_json_is_malformed(self, urlopen):
        urlopen.return_value = _response(200, b"<html>")

        with self.assertRaises(MalformedResponseError):
            self.client.game_state()

    @patch("urllib.request.urlopen")
    def test_connection_refused_is_unreachable(self, urlopen):
        urlopen.side_effect = urllib.error.URLError(ConnectionRefusedError(111, "Connection refused"))

        with self.assertRaises(MediatorUnreachableError) as ctx:
            self.client.game_state()

        self.assertEqual(ctx.exception.url, BASE_URL + "/map")
        self.assertEqual(ctx.exception.method, "GET")

    @patch("urllib.request.urlopen")
    def test_timeout_is_unreachable(self, urlopen):
        urlopen.side_effect = socket.timeout("timed out")

        with self.assertRaises(MediatorUnreachableError):
            self.client.game_state()

    def test_non_http_answer_is_malformed(self):
        client = MediatorClient(_garbage_server(b"NOT-HTTP garbage\r\n\r\n"), timeout=5.0)

        with self.assertRaises(MalformedResponseError) as ctx:
            client.game_state()

        self.assertIsInstance(ctx.exception.__cause__, http.client.BadStatusLine)

    def test_hang_up_without_answer_is_unreachable(self):
        client = MediatorClient(_garbage_server(b""), timeout=5.0)

        with self.assertRaises(MediatorUnreachableError):
            client.game_state()

    @patch("urllib.request.urlopen")
    def test_truncated_body_is_unreachable(self, urlopen):
        response = _response(200)
        response.read.side_effect = http.client.IncompleteRead(b"{\"map\": [", 20)
        urlopen.return_value = response

        with self.assertRaises(MediatorUnreachableError) as ctx:
            self.client.game_state()

        self.assertIn("IncompleteRead", str(ctx.exception))

    @patch("urllib.request.urlopen")
    def test_non_2xx_success_status_is_unexpected(self, urlopen):
        urlopen.return_value = _response(304, b"")

        with self.assertRaises(UnexpectedStatusError) as ctx:
            self.client.game_state()

        self.assertEqual(ctx.exception.status_code, 304)


class TestMove(unittest.TestCase):

    def setUp(self):
        self.client = MediatorClient(BASE_URL)

    @patch("urllib.request.urlopen")
    def test_accepted_move(self, urlopen):
        urlopen.return_value = _response(200, b"")

        result = self.client.move("move-42", Direction.NORTH)

        self.assertTrue(result.accepted)
        request = urlopen.call_args[0][0]
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(request.full_url, BASE_URL + "/map")
        self.assertEqual(request.get_header("Uuid"), "move-42")
        self.assertEqual(json.loads(request.data), {"move": "N"})

    @patch("urllib.request.urlopen")
    def test_bad_request_means_refused(self, urlopen):
        urlopen.side_effect = _http_error(400)

        result = self.client.move("move-42", Direction.NONE)

        self.assertFalse(result.accepted)

    @patch("urllib.request.urlopen")
    def test_other_errors_are_raised(self, urlopen):
        for status in (401, 404, 500, 503):
            urlopen.side_effect = _http_error(status)
            with self.assertRaises(UnexpectedStatusError) as ctx:
                self.client.move("move-42", Direction.EAST)
            self.assertEqual(ctx.exception.status_code, status)

    @patch("urllib.request.urlopen")
    def test_unreachable_move(self, urlopen):
        urlopen.side_effect = urllib.error.URLError("Name or service not known")

        with self.assertRaises(MediatorError) as ctx:
            self.client.move("move-42", Direction.EAST)

        self.assertIsInstance(ctx.exception, MediatorUnreachableError)
        self.assertEqual(ctx.exception.operation, "move")


if __name__ == "__main__":
    unittest.main()

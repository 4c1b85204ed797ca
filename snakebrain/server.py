"""
Minimal HTTP server speaking the game platform's snake API.

Routes:
    GET  /        liveness
    POST /ping    liveness
    POST /start   cosmetic choices for the new game
    POST /move    {"move": "up" | "down" | "left" | "right"}
    POST /end     acknowledged, nothing kept
"""

import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer

from snakebrain.config import ServerConfig
from snakebrain.models import GameState, InvalidGameState
from snakebrain.strategies import choose_move, safe_default_move

logger = logging.getLogger(__name__)


class SnakeHandler(BaseHTTPRequestHandler):
    config = ServerConfig()

    def do_GET(self):
        if self.path == "/":
            self._reply(200, {"apiversion": "1"})
        else:
            self._reply(404, {"error": f"no route for GET {self.path}"})

    def do_POST(self):
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            length = -1
        if length < 0:
            logger.warning("rejected %s: bad Content-Length", self.path)
            self._reply(400, {"error": "invalid Content-Length"})
            return
        raw = self.rfile.read(length) if length else b""

        if self.path == "/ping":
            self._reply(200, {})
        elif self.path == "/start":
            self._reply(200, {
                "color": self.config.color,
                "headType": self.config.head_type,
                "tailType": self.config.tail_type,
            })
        elif self.path == "/move":
            self._move(raw)
        elif self.path == "/end":
            self._reply(200, {})
        else:
            self._reply(404, {"error": f"no route for POST {self.path}"})

    def _move(self, raw: bytes):
        try:
            state = GameState.from_dict(json.loads(raw or b"{}"))
        except (json.JSONDecodeError, UnicodeDecodeError, InvalidGameState) as e:
            logger.warning("rejected move request: %s", e)
            self._reply(400, {"error": str(e)})
            return

        try:
            move = choose_move(state, self.config.search)
        except Exception:
            logger.exception("policy %s failed on turn %d", self.config.search.policy, state.turn)
            move = safe_default_move(state)
        logger.debug("game %s turn %d: %s", state.game_id, state.turn, move)
        self._reply(200, {"move": move})

    def _reply(self, status: int, payload: dict):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


def make_server(config: ServerConfig) -> HTTPServer:
    """Bind a server whose handler answers with `config`."""
    handler = type("ConfiguredSnakeHandler", (SnakeHandler,), {"config": config})
    return HTTPServer((config.host, config.port), handler)


def serve(config: ServerConfig) -> None:
    server = make_server(config)
    host, port = server.server_address[:2]
    logger.info("snake server on %s:%d (policy=%s)", host, port, config.search.policy)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
    finally:
        server.server_close()

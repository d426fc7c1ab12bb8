"""
Tests for the per-session event loop.
"""

import asyncio
import base64
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from conftest import FakeChatModel, make_image_bytes
from google import genai
from google.genai import types

from landing_gen.orchestration import Orchestrator, Ready
from landing_gen.pipeline.generation import GenerationClient
from landing_gen.utils.session_loop import SessionLoop

PROXY_VARIABLES = ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy")


class GenerateContentHandler(BaseHTTPRequestHandler):
    """Answers every POST with a one-image generate_content reply, keeping the connection alive."""

    protocol_version = "HTTP/1.1"

    def do_POST(self):
        self._read_body()
        self.server.requests.append(self.path)
        body = json.dumps(self.server.reply).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_body(self):
        if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
            while True:
                size = int(self.rfile.readline().split(b";")[0].strip() or b"0", 16)
                if size == 0:
                    self.rfile.readline()
                    return
                self.rfile.read(size)
                self.rfile.readline()
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def image_service(monkeypatch):
    """Local HTTP/1.1 server standing in for the Gemini API."""
    for name in PROXY_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.delenv("GOOGLE_GENAI_USE_VERTEXAI", raising=False)

    server = ThreadingHTTPServer(("127.0.0.1", 0), GenerateContentHandler)
    server.requests = []
    server.reply = {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": "image/png",
                                "data": base64.b64encode(make_image_bytes()).decode("ascii"),
                            }
                        }
                    ],
                },
                "finishReason": "STOP",
            }
        ]
    }
    server.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def test_run_returns_coroutine_results():
    session_loop = SessionLoop()

    async def double(value):
        await asyncio.sleep(0)
        return value * 2

    try:
        assert session_loop.run(double(2)) == 4
        assert session_loop.run(double(5)) == 10
    finally:
        session_loop.close()


def test_every_run_uses_the_same_loop():
    session_loop = SessionLoop()

    async def current_loop():
        return asyncio.get_running_loop()

    try:
        assert session_loop.run(current_loop()) is session_loop.run(current_loop())
    finally:
        session_loop.close()


def test_closed_loop_refuses_work():
    session_loop = SessionLoop()
    session_loop.close()
    session_loop.close()

    assert session_loop.closed
    with pytest.raises(RuntimeError):
        session_loop.run(asyncio.sleep(0))


def test_repeated_submissions_through_real_genai_client(image_service, settings, cafe_with_images):
    genai_client = genai.Client(
        api_key="test-key",
        http_options=types.HttpOptions(base_url=image_service.url),
    )
    client = GenerationClient(settings, genai_client=genai_client, llm=FakeChatModel())
    orchestrator = Orchestrator(client)
    session_loop = SessionLoop()

    try:
        states = [session_loop.run(orchestrator.submit(cafe_with_images)) for _ in range(3)]
    finally:
        session_loop.close()

    assert all(isinstance(state, Ready) for state in states)
    assert len(image_service.requests) == 3
    assert all(":generateContent" in path for path in image_service.requests)
    assert orchestrator.artifact.image_data_uri.startswith("data:image/png;base64,")
    assert orchestrator.store.live_count == 1

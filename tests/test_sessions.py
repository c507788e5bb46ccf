import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
from fakes import FakeClock, FakeResponse, FakeSession

from stream_resolver.sessions import build_session, read_with_deadline

URL = "https://mirror.example/streams/dQw4w9WgXcQ"


def test_reads_whole_body_and_closes():
    response = FakeResponse(payload={"title": "t"}, chunk_size=3)
    session = FakeSession({URL: response})

    resp, body = read_with_deadline(session, URL, timeout=1.0, clock=FakeClock())

    assert resp.status_code == 200
    assert body == b'{"title": "t"}'
    assert response.closed


def test_non_success_body_is_not_read():
    clock = FakeClock()
    response = FakeResponse(status_code=503, text="down", on_chunk=lambda: clock.advance(10))
    session = FakeSession({URL: response})

    resp, body = read_with_deadline(session, URL, timeout=1.0, clock=clock)

    assert resp.status_code == 503
    assert body == b""
    assert response.closed


def test_trickling_body_raises_timeout():
    clock = FakeClock()
    response = FakeResponse(text="x" * 40, chunk_size=1, on_chunk=lambda: clock.advance(0.1))
    session = FakeSession({URL: response})

    with pytest.raises(requests.Timeout):
        read_with_deadline(session, URL, timeout=1.0, clock=clock)

    assert response.closed
    assert clock.now - 1000.0 <= 1.1


def test_slow_connect_counts_against_deadline():
    clock = FakeClock()

    def slow_headers():
        clock.advance(2.0)
        return FakeResponse(payload={"title": "t"})

    session = FakeSession({URL: slow_headers})

    with pytest.raises(requests.Timeout):
        read_with_deadline(session, URL, timeout=1.0, clock=clock)


class _TrickleHandler(BaseHTTPRequestHandler):
    body = b'{"title": "trickle", "videoStreams": []}'

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for byte in self.body:
                self.wfile.write(bytes([byte]))
                self.wfile.flush()
                time.sleep(0.1)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, *args):
        pass


@pytest.fixture
def trickle_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/streams/x"
    server.shutdown()
    server.server_close()


def test_real_trickling_server_is_cut_off(trickle_server):
    session = build_session(retries=0)
    started = time.monotonic()

    with pytest.raises(requests.Timeout):
        read_with_deadline(session, trickle_server, timeout=0.5)

    assert time.monotonic() - started < 2.0

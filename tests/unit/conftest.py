import http.server
import json
import os
import socket
import sys
import threading
import urllib.parse

import pytest
import requests

# Get the directory of the current conftest.py file
current_dir = os.path.dirname(os.path.abspath(__file__))

# Calculate the project root (adjust the number of ".." if needed)
project_root = os.path.abspath(os.path.join(current_dir, '../../'))

# Insert the project root at the beginning of sys.path
if project_root not in sys.path:
    sys.path.insert(0, project_root)


def can_bind(port):
    """True if nothing is listening on the loopback port anymore."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        s.bind(('127.0.0.1', port))
        s.listen(1)
        return True
    except OSError:
        return False
    finally:
        s.close()


@pytest.fixture
def free_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(('127.0.0.1', 0))
    port = s.getsockname()[1]
    s.close()
    return port


class StubServer:
    """Tiny stand-in for the gust server.

    Routes map (method, path) to either a (status, headers, body) tuple or a
    callable receiving the recorded request and returning such a tuple.
    A dict or list body is sent as JSON.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []
        stub = self

        class Handler(http.server.BaseHTTPRequestHandler):
            def _handle(self, method):
                parsed = urllib.parse.urlparse(self.path)
                length = int(self.headers.get('Content-Length') or 0)
                raw = self.rfile.read(length) if length else b''
                request = {
                    'method': method,
                    'path': parsed.path,
                    'query': dict(urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)),
                    'headers': dict(self.headers),
                    'body': raw.decode('utf-8'),
                }
                stub.requests.append(request)

                route = stub.routes.get((method, parsed.path))
                if route is None:
                    status, headers, body = 404, {}, 'no route'
                elif callable(route):
                    status, headers, body = route(request)
                else:
                    status, headers, body = route

                if isinstance(body, (dict, list)):
                    body = json.dumps(body)
                    headers = dict(headers, **{'Content-Type': 'application/json'})
                data = (body or '').encode('utf-8')

                self.send_response(status)
                for k, v in headers.items():
                    self.send_header(k, v)
                self.send_header('Content-Length', str(len(data)))
                self.end_headers()
                self.wfile.write(data)

            def do_GET(self):
                self._handle('GET')

            def do_POST(self):
                self._handle('POST')

            def log_message(self, format, *args):
                pass

        self._server = http.server.ThreadingHTTPServer(('127.0.0.1', 0), Handler)
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self):
        return 'http://127.0.0.1:%d' % (self._server.server_address[1],)

    def route(self, method, path, status=200, body=None, headers=None):
        self.routes[(method, path)] = (status, headers or {}, body)

    def requests_to(self, path):
        return [r for r in self.requests if r['path'] == path]

    def start(self):
        self._thread.start()

    def stop(self):
        self._server.shutdown()
        self._server.server_close()


@pytest.fixture
def stub_server():
    server = StubServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def auth_server(stub_server):
    """Stub gust server with a working login: any code is exchanged for a key."""
    stub_server.routes[('GET', '/api/auth/request')] = lambda r: (
        200, {}, {'url': 'https://github.com/login/oauth/authorize?port=%s' % (r['query'].get('callback_port'),)})
    stub_server.route('POST', '/api/auth/exchange',
                      body={'api_key': 'gust_live_0123456789abcdef', 'github_user': 'octocat'})
    return stub_server


class FakeBrowser:
    """Replaces the real browser: visits the callback paths on the loopback port."""

    def __init__(self, port, paths):
        self.port = port
        self.paths = list(paths)
        self.opened = []
        self.responses = []
        self._thread = None
        self._session = requests.Session()
        self._session.trust_env = False

    def open(self, url):
        self.opened.append(url)
        self._thread = threading.Thread(target=self._visit, daemon=True)
        self._thread.start()
        return True

    def _visit(self):
        for path in self.paths:
            try:
                resp = self._session.get('http://127.0.0.1:%d%s' % (self.port, path), timeout=5)
                self.responses.append((resp.status_code, resp.text))
            except requests.exceptions.RequestException as e:
                self.responses.append((None, str(e)))

    def join(self):
        if self._thread is not None:
            self._thread.join(timeout=10)


@pytest.fixture
def fake_browser(monkeypatch):
    """Factory installing a FakeBrowser as the browser used by gust.auth."""
    def _install(port, paths=('/callback?code=test-code',)):
        browser = FakeBrowser(port, paths)
        monkeypatch.setattr('gust.auth.open_browser', browser.open)
        return browser
    return _install


@pytest.fixture
def http_session():
    """requests session ignoring proxy settings from the environment."""
    session = requests.Session()
    session.trust_env = False
    yield session
    session.close()

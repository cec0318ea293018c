import http.server
import io
import threading
import time
import typing

import pytest

from httprequest import ClientConfig, Headers
from httprequest._backends import Backend, Connection
from httprequest._backends.sync import RequestBody


class RecordedRequest(typing.NamedTuple):
    method: str
    path: str
    headers: typing.Any
    body: bytes


class Route(typing.NamedTuple):
    status: int
    headers: typing.Sequence[typing.Tuple[str, str]]
    body: bytes
    delay: float


class RequestHandler(http.server.BaseHTTPRequestHandler):
    def log_message(self, format: str, *args: typing.Any) -> None:
        pass

    def read_body(self) -> bytes:
        if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
            body = b""
            while True:
                size = int(self.rfile.readline().split(b";")[0].strip(), 16)
                if size == 0:
                    self.rfile.readline()
                    return body
                body += self.rfile.read(size)
                self.rfile.readline()
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def handle_request(self) -> None:
        body = self.read_body()
        self.server.requests.append(  # type: ignore
            RecordedRequest(self.command, self.path, self.headers, body)
        )

        route = self.server.routes.get(  # type: ignore
            self.path.split("?")[0], Route(200, (), b"", 0)
        )
        if route.delay:
            time.sleep(route.delay)

        self.send_response(route.status)
        for name, value in route.headers:
            self.send_header(name, value)
        if not any(name.lower() == "content-length" for name, _ in route.headers):
            self.send_header("Content-Length", str(len(route.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(route.body)

    do_GET = handle_request
    do_POST = handle_request
    do_PUT = handle_request
    do_DELETE = handle_request
    do_HEAD = handle_request
    do_OPTIONS = handle_request
    do_TRACE = handle_request


class Server:
    """Local HTTP server recording every request it receives
    and answering with the route registered for the path.
    """

    def __init__(self) -> None:
        self.httpd = http.server.ThreadingHTTPServer(("127.0.0.1", 0), RequestHandler)
        self.httpd.daemon_threads = True
        self.httpd.requests = []  # type: ignore
        self.httpd.routes = {}  # type: ignore
        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)

    @property
    def port(self) -> int:
        return self.httpd.server_address[1]

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    @property
    def requests(self) -> typing.List[RecordedRequest]:
        return self.httpd.requests  # type: ignore

    @property
    def last_request(self) -> RecordedRequest:
        return self.requests[-1]

    def route(
        self,
        path: str,
        status: int = 200,
        body: bytes = b"",
        headers: typing.Sequence[typing.Tuple[str, str]] = (),
        delay: float = 0,
    ) -> None:
        self.httpd.routes[path] = Route(status, headers, body, delay)  # type: ignore


@pytest.fixture()
def server():
    server = Server()
    server.thread.start()
    try:
        yield server
    finally:
        server.httpd.shutdown()
        server.httpd.server_close()


@pytest.fixture()
def config():
    # Keep proxies from the environment away from the local server.
    return ClientConfig(trust_env=False)


class FakeConnection(Connection):
    """Connection that captures the request body and returns a canned response"""

    def __init__(self, url, method, proxy, response):
        super().__init__(url, method, proxy)
        self.response = response
        self.body: typing.Optional[RequestBody] = None
        self.sent = False
        self.disconnected = False

    def get_output_stream(self):
        if self.body is None:
            self.body = RequestBody(self.fixed_length)
        return self.body

    def sent_body(self) -> bytes:
        if self.body is None:
            return b""
        return self.body.open_for_sending().read()

    def _send(self):
        self.sent = True
        return self.response

    @property
    def response_code(self):
        return self._send().status

    @property
    def response_message(self):
        return self._send().message

    @property
    def response_headers(self):
        return Headers(self._send().headers)

    def get_input_stream(self):
        response = self._send()
        if response.input_error is not None:
            raise response.input_error
        return io.BytesIO(response.body)

    def get_error_stream(self):
        response = self._send()
        if response.error_body is None:
            return None
        return io.BytesIO(response.error_body)

    def disconnect(self):
        self.disconnected = True


class FakeResponse(typing.NamedTuple):
    status: int = 200
    message: str = "OK"
    headers: typing.Sequence[typing.Tuple[str, str]] = ()
    body: bytes = b""
    error_body: typing.Optional[bytes] = None
    input_error: typing.Optional[Exception] = None


class FakeBackend(Backend):
    def __init__(self, response: FakeResponse = FakeResponse()):
        self.response = response
        self.connections: typing.List[FakeConnection] = []

    def connect(self, url, method, proxy, config):
        connection = FakeConnection(url, method, proxy, self.response)
        self.connections.append(connection)
        return connection


@pytest.fixture()
def fake_backend():
    return FakeBackend()


@pytest.fixture()
def fake_config(fake_backend):
    return ClientConfig(backend=fake_backend)


@pytest.fixture()
def fake_response_config():
    """Creates a config whose requests all get the given canned response"""

    def make(**kwargs):
        return ClientConfig(backend=FakeBackend(FakeResponse(**kwargs)))

    return make

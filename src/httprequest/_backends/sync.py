import email.utils
import functools
import http.client
import io
import logging
import socket
import tempfile
import typing
import urllib.request

from .base import Backend, Connection, wrap_exceptions
from httprequest.exceptions import HttpRequestError
from httprequest.models import (
    HEADER_CONTENT_LENGTH,
    HEADER_IF_MODIFIED_SINCE,
    HEADER_TRANSFER_ENCODING,
    Headers,
)
from httprequest.utils import DEFAULT_BUFFER_SIZE

if typing.TYPE_CHECKING:
    from httprequest.config import ClientConfig

logger = logging.getLogger(__name__)

# Request bodies larger than this are spooled to a temporary file.
SPOOL_MAX_SIZE = 1024 * 1024


class RequestBody(io.RawIOBase):
    """Sink the request body is written into before it's sent.
    Closing the sink only marks the body as complete, the
    spooled content is released by 'discard()'.
    """

    def __init__(self, fixed_length: typing.Optional[int] = None):
        self.fixed_length = fixed_length
        self.size = 0
        self._spool = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)

    def writable(self) -> bool:
        return True

    def write(self, data: typing.Any) -> int:
        if self.closed:
            raise ValueError("write to closed request body")
        length = memoryview(data).nbytes
        if self.fixed_length is not None and self.size + length > self.fixed_length:
            raise OSError(
                f"too many bytes written, expected {self.fixed_length} bytes"
            )
        self._spool.write(data)
        self.size += length
        return length

    def open_for_sending(self) -> typing.BinaryIO:
        if self.fixed_length is not None and self.size != self.fixed_length:
            raise HttpRequestError(
                f"insufficient data written, expected {self.fixed_length} "
                f"bytes but got {self.size}"
            )
        self._spool.seek(0)
        return typing.cast(typing.BinaryIO, self._spool)

    def discard(self) -> None:
        self._spool.close()


class _HTTPConnection(http.client.HTTPConnection):
    """Uses the urlopen() timeout for connecting only and
    switches the socket to the read timeout once connected.
    """

    def __init__(
        self, *args: typing.Any, read_timeout: typing.Any, **kwargs: typing.Any
    ):
        super().__init__(*args, **kwargs)
        self.read_timeout = read_timeout

    def connect(self) -> None:
        with wrap_exceptions(is_connect=True):
            super().connect()
        self.sock.settimeout(self.read_timeout)


class _HTTPSConnection(http.client.HTTPSConnection):
    def __init__(
        self, *args: typing.Any, read_timeout: typing.Any, **kwargs: typing.Any
    ):
        super().__init__(*args, **kwargs)
        self.read_timeout = read_timeout

    def connect(self) -> None:
        with wrap_exceptions(is_connect=True):
            super().connect()
        self.sock.settimeout(self.read_timeout)


class _HTTPHandler(urllib.request.HTTPHandler):
    def __init__(self, connection: "SyncConnection"):
        super().__init__()
        self.connection = connection

    def http_open(self, req: urllib.request.Request) -> http.client.HTTPResponse:
        return self.do_open(
            functools.partial(
                _HTTPConnection,
                read_timeout=self.connection.read_timeout,
                blocksize=self.connection.block_size,
            ),
            req,
        )


class _HTTPSHandler(urllib.request.HTTPSHandler):
    def __init__(self, connection: "SyncConnection"):
        super().__init__(context=connection.ssl_context)
        self.connection = connection

    def https_open(self, req: urllib.request.Request) -> http.client.HTTPResponse:
        return self.do_open(
            functools.partial(
                _HTTPSConnection,
                read_timeout=self.connection.read_timeout,
                blocksize=self.connection.block_size,
            ),
            req,
            context=self.connection.ssl_context,
        )


def is_redirectable(method: str, code: int) -> bool:
    """Whether a redirect is followed automatically. Only GET and HEAD
    follow every redirect, POST follows the ones that switch to GET.
    """
    if method in ("GET", "HEAD"):
        return code in (301, 302, 303, 307, 308)
    return method == "POST" and code in (301, 302, 303)


class _RedirectHandler(urllib.request.HTTPRedirectHandler):
    def __init__(self, follow_redirects: bool):
        super().__init__()
        self.follow_redirects = follow_redirects

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore
        # Redirects that urllib refuses to follow are handed back as the
        # response instead of being raised as an error.
        if not self.follow_redirects or not is_redirectable(req.get_method(), code):
            return None
        return super().redirect_request(req, fp, code, msg, headers, newurl)


class _ResponseErrorHandler(urllib.request.HTTPDefaultErrorHandler):
    """Hands back 4XX and 5XX responses like any other response
    instead of raising 'urllib.error.HTTPError'.
    """

    def http_error_default(self, req, fp, code, msg, hdrs):  # type: ignore
        return fp


class SyncConnection(Connection):
    """Blocking connection built on 'urllib.request' and 'http.client'"""

    def __init__(
        self,
        url: str,
        method: str,
        proxy: typing.Optional[str],
        config: "ClientConfig",
    ):
        super().__init__(url, method, proxy)
        self.config = config
        self.ssl_context = config.ssl_context()

        self._body: typing.Optional[RequestBody] = None
        self._response: typing.Optional[http.client.HTTPResponse] = None
        self._response_headers: typing.Optional[Headers] = None

    @property
    def block_size(self) -> int:
        return self.chunk_size or DEFAULT_BUFFER_SIZE

    def get_output_stream(self) -> RequestBody:
        if self._response is not None:
            raise HttpRequestError("cannot write request body after response")
        if self._body is None:
            self._body = RequestBody(self.fixed_length)
        return self._body

    @property
    def response_code(self) -> int:
        return self._get_response().status

    @property
    def response_message(self) -> typing.Optional[str]:
        return self._get_response().reason or None

    @property
    def response_headers(self) -> Headers:
        response = self._get_response()
        if self._response_headers is None:
            self._response_headers = Headers(response.headers.items())
        return self._response_headers

    def get_input_stream(self) -> typing.BinaryIO:
        return typing.cast(typing.BinaryIO, self._get_response())

    def get_error_stream(self) -> typing.Optional[typing.BinaryIO]:
        response = self._get_response()
        if response.status < 400:
            return None
        return typing.cast(typing.BinaryIO, response)

    def disconnect(self) -> None:
        if self._response is not None:
            self._response.close()
        if self._body is not None:
            self._body.discard()

    def _get_response(self) -> http.client.HTTPResponse:
        if self._response is None:
            self._response = self._send()
        return self._response

    def _send(self) -> http.client.HTTPResponse:
        request = urllib.request.Request(self.url, method=self.method)
        for name, value in self.request_headers.items():
            request.add_header(name, value or "")

        if self.if_modified_since:
            request.add_header(
                HEADER_IF_MODIFIED_SINCE,
                email.utils.formatdate(self.if_modified_since, usegmt=True),
            )

        if self._body is not None:
            # Assigning 'data' drops any Content-Length already on the request.
            request.data = self._body.open_for_sending()
            if self.chunk_size is not None:
                request.add_header(HEADER_TRANSFER_ENCODING, "chunked")
            else:
                request.add_header(HEADER_CONTENT_LENGTH, str(self._body.size))

        connect_timeout = self.connect_timeout
        if connect_timeout is None:
            connect_timeout = socket.getdefaulttimeout()

        logger.debug("Sending request [%s] %s", self.method, self.url)
        with wrap_exceptions(is_connect=False):
            response = self._opener().open(request, timeout=connect_timeout)
        logger.debug(
            "Received response [%s] %s: %s %s",
            self.method,
            self.url,
            response.status,
            response.reason,
        )
        return typing.cast(http.client.HTTPResponse, response)

    def _opener(self) -> urllib.request.OpenerDirector:
        if self.proxy is not None:
            proxy_handler = urllib.request.ProxyHandler(
                {"http": self.proxy, "https": self.proxy}
            )
        elif self.config.trust_env:
            proxy_handler = urllib.request.ProxyHandler()
        else:
            proxy_handler = urllib.request.ProxyHandler({})

        opener = urllib.request.build_opener(
            proxy_handler,
            _HTTPHandler(self),
            _HTTPSHandler(self),
            _RedirectHandler(self.follow_redirects),
            _ResponseErrorHandler(),
        )
        opener.addheaders = [("User-agent", self.config.user_agent)]
        return opener


class SyncBackend(Backend):
    def connect(
        self,
        url: str,
        method: str,
        proxy: typing.Optional[str],
        config: "ClientConfig",
    ) -> SyncConnection:
        return SyncConnection(url, method, proxy, config)

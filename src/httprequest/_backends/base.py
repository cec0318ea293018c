import contextlib
import http.client
import socket
import ssl
import typing
import urllib.error

from httprequest.exceptions import (
    CertificateError,
    CertificateHostnameMismatch,
    ConnectionError,
    ConnectTimeout,
    ExpiredCertificate,
    HttpRequestError,
    NameResolutionError,
    ProxyError,
    ReadTimeout,
    SelfSignedCertificate,
    TLSError,
    URLError,
)
from httprequest.models import Headers

if typing.TYPE_CHECKING:
    from httprequest.config import ClientConfig


@contextlib.contextmanager
def wrap_exceptions(is_connect: bool) -> typing.Iterator[None]:
    """Wraps socket, TLS and 'http.client' exceptions into
    'httprequest.HttpRequestError'. TLS and certificate errors
    get their own sub-classes so callers can tell a missing CA
    bundle apart from a server presenting a bad certificate.
    """

    def rewrite_exception(err: BaseException) -> None:
        nonlocal is_connect

        # 'urllib' wraps failures while sending inside URLError.reason
        if isinstance(err, urllib.error.URLError) and isinstance(
            err.reason, BaseException
        ):
            if isinstance(err.reason, HttpRequestError):
                raise err.reason from err
            err = err.reason

        if isinstance(err, socket.gaierror):
            raise NameResolutionError("dns error", error=err) from err
        elif isinstance(err, socket.timeout):
            if is_connect:
                raise ConnectTimeout("connect timeout", error=err) from err
            else:
                raise ReadTimeout("read timeout", error=err) from err
        elif isinstance(err, ssl.SSLCertVerificationError):
            msg = str(err).lower()
            if "self" in msg and "signed" in msg:
                raise SelfSignedCertificate("self signed", error=err) from err
            elif "hostname" in msg and "mismatch" in msg:
                raise CertificateHostnameMismatch(
                    "hostname mismatch", error=err
                ) from err
            elif "expired" in msg:
                raise ExpiredCertificate("cert is expired", error=err) from err
            else:
                raise CertificateError("cert error", error=err) from err
        elif isinstance(err, ssl.SSLError):
            raise TLSError("tls error", error=err) from err
        elif isinstance(err, OSError) and str(err).startswith("Tunnel connection"):
            raise ProxyError(str(err), error=err) from err
        elif isinstance(err, http.client.HTTPException):
            raise HttpRequestError(
                str(err) or type(err).__name__, error=err
            ) from err
        elif isinstance(err, urllib.error.URLError):
            raise URLError(str(err.reason), error=err) from err
        elif isinstance(err, OSError):
            message = str(err) or type(err).__name__
            if is_connect:
                raise ConnectionError(message, error=err) from err
            raise HttpRequestError(message, error=err) from err

    try:
        yield
    except HttpRequestError:
        raise
    except Exception as err:
        rewrite_exception(err)
        # Anything that wasn't rewritten propagates untouched.
        raise


class Connection:
    """A single HTTP exchange with the server.

    Request settings are plain attributes that must be set before
    the request body is written or the response is first accessed.
    The exchange happens at most once, the first response accessor
    triggers it and the result is kept for every later call.
    """

    def __init__(self, url: str, method: str, proxy: typing.Optional[str] = None):
        self.url = url
        self.method = method
        self.proxy = proxy

        self.request_headers = Headers()
        self.connect_timeout: typing.Optional[float] = None
        self.read_timeout: typing.Optional[float] = None
        self.use_caches = True
        self.follow_redirects = True
        self.ssl_context: typing.Optional[ssl.SSLContext] = None
        self.if_modified_since = 0
        self.fixed_length: typing.Optional[int] = None
        self.chunk_size: typing.Optional[int] = None

    def set_header(self, name: str, value: str) -> None:
        self.request_headers[name] = value

    def get_request_header(self, name: str) -> typing.Optional[str]:
        return self.request_headers.get_one(name)

    def set_fixed_length_streaming_mode(self, length: int) -> None:
        self.fixed_length = length
        self.chunk_size = None

    def set_chunked_streaming_mode(self, chunk_size: int) -> None:
        self.chunk_size = chunk_size
        self.fixed_length = None

    def get_output_stream(self) -> typing.BinaryIO:
        raise NotImplementedError()

    @property
    def response_code(self) -> int:
        raise NotImplementedError()

    @property
    def response_message(self) -> typing.Optional[str]:
        raise NotImplementedError()

    @property
    def response_headers(self) -> Headers:
        raise NotImplementedError()

    def get_input_stream(self) -> typing.BinaryIO:
        raise NotImplementedError()

    def get_error_stream(self) -> typing.Optional[typing.BinaryIO]:
        raise NotImplementedError()

    def disconnect(self) -> None:
        raise NotImplementedError()


class Backend:
    def connect(
        self,
        url: str,
        method: str,
        proxy: typing.Optional[str],
        config: "ClientConfig",
    ) -> Connection:
        raise NotImplementedError()

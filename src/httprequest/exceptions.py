import typing

if typing.TYPE_CHECKING:
    from .request import HttpRequest


class HttpRequestError(Exception):
    """Base error type for 'httprequest'. Every I/O failure that escapes
    the library is raised as this type (or a sub-class of it) and carries
    the 'HttpRequest' that was being executed along with the encapsulated
    error if this error wraps a different exception.
    """

    def __init__(
        self,
        message: str,
        request: typing.Optional["HttpRequest"] = None,
        error: typing.Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.request = request
        self.error = error


class InvalidUsageError(ValueError):
    """Error raised immediately when the library is called in a way that
    violates a precondition: bad arguments, calling methods in the wrong
    state or mixing request body modes.
    """


class URLError(HttpRequestError):
    """Error while parsing or encoding a URL"""


class ConnectionError(HttpRequestError):
    """Generic error raised while attempting to setup a connection"""


class NameResolutionError(ConnectionError):
    """Error raised when DNS fails to resolve a hostname"""


class ProxyError(ConnectionError):
    """Error raised when a proxy fails to establish a connection"""


class TimeoutError(HttpRequestError):
    """Error raised when an operation times out"""


class ReadTimeout(TimeoutError):
    """Error raised when reading from a socket times out"""


class ConnectTimeout(TimeoutError):
    """Error raised when a socket connection times out"""


class TLSError(ConnectionError):
    """Generic error related to the TLS protocol"""


class CertificateError(TLSError):
    """Generic error related to certificate verification"""


class CertificateHostnameMismatch(CertificateError):
    """Certificate was valid but didn't have the correct
    'subjectAltName' or 'commonName' (if no subjectAltName)
    """


class SelfSignedCertificate(CertificateError):
    """Certificate was self-signed, can't verify unless
    used with 'trust_all_certs()'
    """


class ExpiredCertificate(CertificateError):
    """Certificate is no longer valid"""


class DecodeError(HttpRequestError):
    """Error raised when a response body can't be decompressed or decoded"""

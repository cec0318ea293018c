from .api import delete, get, head, options, post, put, request, trace
from .auth import BasicAuth
from .config import ClientConfig, default_config
from .exceptions import (
    HttpRequestError,
    InvalidUsageError,
    URLError,
    ConnectionError,
    NameResolutionError,
    ProxyError,
    TimeoutError,
    ReadTimeout,
    ConnectTimeout,
    TLSError,
    CertificateError,
    CertificateHostnameMismatch,
    SelfSignedCertificate,
    ExpiredCertificate,
    DecodeError,
)
from .models import Headers, Method, TLSVersion, NO_VALUE
from .multipart import BOUNDARY
from .request import HttpRequest
from .status_codes import StatusCode
from .streams import UploadProgress
from .urls import append_params, encode_url
from .utils import get_header_param, get_header_params

__all__ = [
    "HttpRequest",
    "ClientConfig",
    "default_config",
    "request",
    "get",
    "post",
    "put",
    "delete",
    "head",
    "options",
    "trace",
    "append_params",
    "encode_url",
    "get_header_param",
    "get_header_params",
    "BasicAuth",
    "Headers",
    "Method",
    "TLSVersion",
    "StatusCode",
    "UploadProgress",
    "BOUNDARY",
    "NO_VALUE",
    "HttpRequestError",
    "InvalidUsageError",
    "URLError",
    "ConnectionError",
    "NameResolutionError",
    "ProxyError",
    "TimeoutError",
    "ReadTimeout",
    "ConnectTimeout",
    "TLSError",
    "CertificateError",
    "CertificateHostnameMismatch",
    "SelfSignedCertificate",
    "ExpiredCertificate",
    "DecodeError",
]

__version__ = "0.1.0"

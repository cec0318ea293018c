import enum
import os
import pathlib
import ssl
import typing

from .exceptions import InvalidUsageError


CHARSET_UTF8 = "UTF-8"

CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_JSON = "application/json"

ENCODING_GZIP = "gzip"

HEADER_ACCEPT = "Accept"
HEADER_ACCEPT_CHARSET = "Accept-Charset"
HEADER_ACCEPT_ENCODING = "Accept-Encoding"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CACHE_CONTROL = "Cache-Control"
HEADER_CONTENT_ENCODING = "Content-Encoding"
HEADER_CONTENT_LENGTH = "Content-Length"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_DATE = "Date"
HEADER_ETAG = "ETag"
HEADER_EXPIRES = "Expires"
HEADER_IF_MODIFIED_SINCE = "If-Modified-Since"
HEADER_IF_NONE_MATCH = "If-None-Match"
HEADER_LAST_MODIFIED = "Last-Modified"
HEADER_LOCATION = "Location"
HEADER_PROXY_AUTHORIZATION = "Proxy-Authorization"
HEADER_REFERER = "Referer"
HEADER_SERVER = "Server"
HEADER_TRANSFER_ENCODING = "Transfer-Encoding"
HEADER_USER_AGENT = "User-Agent"

PARAM_CHARSET = "charset"

PathType = typing.Union[str, pathlib.Path]
CACertsType = typing.Union[PathType, bytes]
URLType = typing.Union[str, "os.PathLike[str]"]
HeadersType = typing.Union[
    typing.Mapping[str, typing.Optional[str]],
    typing.Mapping[bytes, typing.Optional[bytes]],
    typing.Iterable[typing.Tuple[str, typing.Optional[str]]],
    typing.Iterable[typing.Tuple[bytes, typing.Optional[bytes]]],
    "Headers",
]
ParamsType = typing.Mapping[typing.Any, typing.Any]
UploadProgressCallback = typing.Callable[[int, int], None]


class _NoValue(object):
    """Default for accessors that read a value when called without one
    and set it when called with one.
    """

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "httprequest.NO_VALUE"

    __str__ = __repr__


NO_VALUE: typing.Any = _NoValue()


class Method(enum.Enum):
    """The request methods a 'HttpRequest' can be created with."""

    GET = "GET"
    HEAD = "HEAD"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    def __str__(self) -> str:
        return self.value


KT = typing.TypeVar("KT")
VT = typing.TypeVar("VT")
NormKT = typing.TypeVar("NormKT")
NormVT = typing.TypeVar("NormVT")
MultiMappingType = typing.Union[
    typing.Mapping[KT, VT], typing.Sequence[typing.Tuple[KT, VT]]
]


class MultiMapping(typing.Generic[KT, VT, NormKT, NormVT]):
    """Mapping that allows multiple values per key. Lookups go through
    the normalized key while iteration gives back the key as it was
    first added so header names keep the case the peer sent.
    """

    def __init__(self, values: MultiMappingType = ()):
        self._internal: typing.Dict[
            NormKT, typing.List[typing.Tuple[KT, NormVT]]
        ] = {}
        if values:
            self.extend(values)

    def get_one(
        self, key: KT, default: typing.Optional[NormVT] = None
    ) -> typing.Optional[NormVT]:
        try:
            return self._internal[self._normalize_key(key)][0][1]
        except (KeyError, IndexError):
            return default

    get = get_one

    def get_all(self, key: KT) -> typing.List[NormVT]:
        try:
            return [x[1] for x in self._internal[self._normalize_key(key)]]
        except KeyError:
            return []

    def pop_all(self, key: KT) -> typing.List[NormVT]:
        try:
            return [x[1] for x in self._internal.pop(self._normalize_key(key))]
        except KeyError:
            return []

    def add(self, key: KT, value: VT) -> None:
        self._internal.setdefault(self._normalize_key(key), []).append(
            (self._display_key(key), self._normalize_value(value))
        )

    def extend(self, items: MultiMappingType) -> None:
        for k, v in items.items() if hasattr(items, "items") else items:
            self.add(k, v)

    def keys(self) -> typing.Iterable[KT]:
        for items in self._internal.values():
            if items:
                yield items[0][0]

    def values(self) -> typing.Iterable[NormVT]:
        for items in self._internal.values():
            for _, value in items:
                yield value

    def items(self) -> typing.Iterable[typing.Tuple[KT, NormVT]]:
        for items in self._internal.values():
            for k, v in items:
                yield k, v

    def copy(self) -> "MultiMapping[KT, VT, NormKT, NormVT]":
        return type(self)(list(self.items()))

    def __contains__(self, item: KT) -> bool:
        return bool(self._internal.get(self._normalize_key(item), None))

    def __getitem__(self, item: KT) -> NormVT:
        try:
            return self._internal[self._normalize_key(item)][0][1]
        except (KeyError, IndexError):
            raise KeyError(item) from None

    def __setitem__(self, key: KT, value: VT) -> None:
        self._internal[self._normalize_key(key)] = [
            (self._display_key(key), self._normalize_value(value))
        ]

    def __delitem__(self, key: KT) -> None:
        self._internal.pop(self._normalize_key(key), None)

    def __iter__(self) -> typing.Iterator[KT]:
        return iter(list(self.keys()))

    def __len__(self) -> int:
        return sum(1 for items in self._internal.values() if items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiMapping):
            return NotImplemented
        return self._internal.keys() == other._internal.keys() and all(
            [v for _, v in items] == [v for _, v in other._internal[k]]
            for k, items in self._internal.items()
        )

    def _normalize_key(self, key: KT) -> NormKT:
        return key

    def _display_key(self, key: KT) -> KT:
        return key

    def _normalize_value(self, value: VT) -> NormVT:
        return value


class Headers(
    MultiMapping[
        typing.Union[str, bytes],
        typing.Optional[typing.Union[str, bytes]],
        str,
        typing.Optional[str],
    ]
):
    def _normalize_key(self, key: typing.Union[str, bytes]) -> str:
        return self._display_key(key).lower()

    def _display_key(self, key: typing.Union[str, bytes]) -> str:
        if isinstance(key, bytes):
            key = key.decode("latin-1")
        return key

    def _normalize_value(
        self, value: typing.Optional[typing.Union[str, bytes]]
    ) -> typing.Optional[str]:
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return value

    def __repr__(self) -> str:
        # Smart repr that switches to list-of-tuple mode when
        # multiple values for one key are detected. Most of the
        # time it's easier to read the dictionary.
        if any(len(x) > 1 for x in self._internal.values()):
            internal_repr = repr([(k, v) for k, v in self.items()])
        else:
            # Note the unpacking within (k, v),
            internal_repr = repr({k: v for (k, v), in self._internal.values()})
        return f"<Headers {internal_repr}>"

    __str__ = __repr__


class TLSVersion(enum.Enum):
    """Version specifier for TLS. Unless attempting to connect
    with only a single TLS version 'tls_max_version' should
    be 'MAXIMUM_SUPPORTED'
    """

    MINIMUM_SUPPORTED = "MINIMUM_SUPPORTED"
    TLSv1 = "TLSv1"
    TLSv1_1 = "TLSv1.1"
    TLSv1_2 = "TLSv1.2"
    TLSv1_3 = "TLSv1.3"
    MAXIMUM_SUPPORTED = "MAXIMUM_SUPPORTED"

    def to_ssl(self) -> ssl.TLSVersion:
        return getattr(ssl.TLSVersion, self.name)


def create_ssl_context(
    ca_certs: typing.Optional[CACertsType],
    tls_min_version: TLSVersion,
    tls_max_version: TLSVersion,
    verify_certs: bool = True,
    verify_hostname: bool = True,
) -> ssl.SSLContext:
    """Creates the 'ssl.SSLContext' used for HTTPS connections. Turning
    off 'verify_certs' accepts any certificate chain and implies no
    hostname checking, turning off only 'verify_hostname' still requires
    a trusted chain but accepts it for any host.
    """
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

    if ca_certs:
        if isinstance(ca_certs, bytes):
            ctx.load_verify_locations(cadata=ca_certs.decode("ascii"))
        elif os.path.isdir(ca_certs):
            ctx.load_verify_locations(capath=ca_certs)
        elif os.path.isfile(ca_certs):
            ctx.load_verify_locations(cafile=ca_certs)
        else:
            raise InvalidUsageError(f"'ca_certs' path '{ca_certs}' doesn't exist")
    else:
        ctx.load_default_certs()

    ctx.minimum_version = tls_min_version.to_ssl()
    ctx.maximum_version = tls_max_version.to_ssl()

    # 'check_hostname' must be disabled before 'verify_mode' can be relaxed.
    ctx.check_hostname = verify_certs and verify_hostname
    ctx.verify_mode = ssl.CERT_REQUIRED if verify_certs else ssl.CERT_NONE

    return ctx

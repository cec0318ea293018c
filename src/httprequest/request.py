import contextlib
import datetime
import email.utils
import io
import logging
import os
import pathlib
import typing
import urllib.parse

from ._backends import Connection, wrap_exceptions
from .auth import BasicAuth
from .config import ClientConfig, default_config
from .decoders import DecodingReader, get_content_decoder, is_supported_encoding
from .exceptions import HttpRequestError, InvalidUsageError, URLError
from .models import (
    CHARSET_UTF8,
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    ENCODING_GZIP,
    HEADER_ACCEPT,
    HEADER_ACCEPT_CHARSET,
    HEADER_ACCEPT_ENCODING,
    HEADER_AUTHORIZATION,
    HEADER_CACHE_CONTROL,
    HEADER_CONTENT_ENCODING,
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_DATE,
    HEADER_ETAG,
    HEADER_EXPIRES,
    HEADER_IF_NONE_MATCH,
    HEADER_LAST_MODIFIED,
    HEADER_LOCATION,
    HEADER_PROXY_AUTHORIZATION,
    HEADER_REFERER,
    HEADER_SERVER,
    HEADER_USER_AGENT,
    NO_VALUE,
    PARAM_CHARSET,
    Headers,
    HeadersType,
    Method,
    UploadProgressCallback,
    URLType,
)
from .multipart import CONTENT_TYPE_MULTIPART, MultipartWriter, PartPayloadType
from .status_codes import StatusCode
from .streams import (
    RequestOutputStream,
    RequestWriter,
    UploadProgress,
    close_operation,
    io_error,
)
from .urls import append_params, encode_url
from .utils import (
    compact_json_dumps,
    encoding_detector,
    form_urlencode,
    get_header_param,
    get_header_params,
    is_known_encoding,
    to_str,
    valid_charset,
)

logger = logging.getLogger(__name__)

MethodType = typing.Union[Method, str]
SendType = typing.Union[str, bytes, pathlib.Path, typing.BinaryIO, typing.TextIO]
ReceiveType = typing.Union[str, "os.PathLike[str]", typing.BinaryIO, typing.TextIO]

# Body modes, a request can only use one of them.
_PLAIN = "plain"
_FORM = "form"
_MULTIPART = "multipart"


class HttpRequest:
    """A single HTTP request built up with chainable calls.

    Every builder call returns the request so calls can be chained.
    The request is sent the first time anything about the response is
    read, e.g. 'code()' or 'body()', and any body written so far is
    finished off before that happens. A request can only be sent once.

        >>> response = HttpRequest.post("https://example.com/login")
        >>> response.form({"name": "user"}).ok()
        True
    """

    def __init__(
        self,
        url: URLType,
        method: MethodType = Method.GET,
        config: typing.Optional[ClientConfig] = None,
    ):
        url = to_str(url)
        try:
            parts = urllib.parse.urlsplit(url)
            # Raises for a port that isn't a number.
            parts.port
        except ValueError as e:
            raise URLError(f"malformed URL '{url}'", error=e) from e
        if not parts.scheme or not parts.netloc:
            raise URLError(f"malformed URL '{url}'")

        self._url = url
        if isinstance(method, str):
            method = method.upper()
        try:
            self._method = str(Method(method))
        except ValueError:
            raise InvalidUsageError(f"unsupported request method '{method}'") from None
        self._config = config or default_config()

        self._connection: typing.Optional[Connection] = None
        self._proxy: typing.Optional[str] = None
        self._verify_certs = True
        self._verify_hostname = True

        self._output: typing.Optional[RequestOutputStream] = None
        self._multipart: typing.Optional[MultipartWriter] = None
        self._body_mode: typing.Optional[str] = None
        self._progress = UploadProgress()
        self._content: typing.Optional[bytes] = None

        self._buffer_size = self._config.buffer_size
        self._ignore_close_exceptions = self._config.ignore_close_exceptions
        self._uncompress = self._config.uncompress

        logger.debug("Request -> [%s] %s", self._method, self._url)

    @classmethod
    def create(
        cls,
        method: MethodType,
        url: URLType,
        *params: typing.Any,
        encode: bool = False,
        config: typing.Optional[ClientConfig] = None,
    ) -> "HttpRequest":
        """Creates a request after appending the given query parameters
        to the URL and optionally percent-encoding the result.
        """
        if params:
            url = append_params(url, *params)
        if encode:
            url = encode_url(url)
        return cls(url, method, config=config)

    @classmethod
    def get(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.GET, url, *params, **kwargs)

    @classmethod
    def post(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.POST, url, *params, **kwargs)

    @classmethod
    def put(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.PUT, url, *params, **kwargs)

    @classmethod
    def delete(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.DELETE, url, *params, **kwargs)

    @classmethod
    def head(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.HEAD, url, *params, **kwargs)

    @classmethod
    def options(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.OPTIONS, url, *params, **kwargs)

    @classmethod
    def trace(
        cls, url: URLType, *params: typing.Any, **kwargs: typing.Any
    ) -> "HttpRequest":
        return cls.create(Method.TRACE, url, *params, **kwargs)

    @property
    def url(self) -> str:
        return self._url

    @property
    def method(self) -> str:
        return self._method

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def connection(self) -> Connection:
        """The underlying connection, created on first access. Settings
        that affect how the connection is opened must be made before.
        """
        if self._connection is None:
            self._connection = self._config.backend.connect(
                self._url, self._method, self._proxy or self._config.proxy, self._config
            )
        return self._connection

    def __str__(self) -> str:
        return f"{self._method} {self._url}"

    def __repr__(self) -> str:
        return f"<HttpRequest [{self._method}] {self._url}>"

    def __enter__(self) -> "HttpRequest":
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.disconnect()

    # Request headers

    @typing.overload
    def header(self, name: str) -> typing.Optional[str]:
        ...

    @typing.overload
    def header(self, name: str, value: typing.Any) -> "HttpRequest":
        ...

    def header(
        self, name: str, value: typing.Any = NO_VALUE
    ) -> typing.Union["HttpRequest", typing.Optional[str]]:
        """Sets a request header when given a value, otherwise gets the
        value of a response header. For a response header appearing more
        than once the last value is returned.
        """
        if name is None:
            raise InvalidUsageError("header name cannot be None")
        if value is NO_VALUE:
            values = self.headers().get_all(name)
            return values[-1] if values else None

        if value is None:
            logger.warning("Header '%s' set to None, sending an empty value", name)
            value = ""
        self.connection.set_header(name, to_str(value))
        return self

    @typing.overload
    def headers(self) -> Headers:
        ...

    @typing.overload
    def headers(self, values: HeadersType) -> "HttpRequest":
        ...

    def headers(
        self, values: typing.Any = NO_VALUE
    ) -> typing.Union["HttpRequest", Headers]:
        """Sets every request header in the mapping when given one,
        otherwise gets all response headers.
        """
        if values is NO_VALUE:
            with self._request_errors():
                self._close_output()
                return self.connection.response_headers

        items = values.items() if hasattr(values, "items") else values
        for name, value in items:
            self.header(name, value)
        return self

    def user_agent(self, user_agent: str) -> "HttpRequest":
        return self.header(HEADER_USER_AGENT, user_agent)

    def referer(self, referer: str) -> "HttpRequest":
        return self.header(HEADER_REFERER, referer)

    def accept(self, accept: str) -> "HttpRequest":
        return self.header(HEADER_ACCEPT, accept)

    def accept_json(self) -> "HttpRequest":
        return self.accept(CONTENT_TYPE_JSON)

    def accept_encoding(self, accept_encoding: str) -> "HttpRequest":
        return self.header(HEADER_ACCEPT_ENCODING, accept_encoding)

    def accept_gzip_encoding(self) -> "HttpRequest":
        return self.accept_encoding(ENCODING_GZIP)

    def accept_charset(self, accept_charset: str) -> "HttpRequest":
        return self.header(HEADER_ACCEPT_CHARSET, accept_charset)

    def authorization(self, authorization: str) -> "HttpRequest":
        return self.header(HEADER_AUTHORIZATION, authorization)

    def proxy_authorization(self, proxy_authorization: str) -> "HttpRequest":
        return self.header(HEADER_PROXY_AUTHORIZATION, proxy_authorization)

    def basic(self, username: str, password: str) -> "HttpRequest":
        return self.authorization(BasicAuth(username, password).header)

    def proxy_basic(self, username: str, password: str) -> "HttpRequest":
        return self.proxy_authorization(BasicAuth(username, password).header)

    def if_modified_since(
        self, if_modified_since: typing.Union[datetime.datetime, int, float]
    ) -> "HttpRequest":
        """Sets the 'If-Modified-Since' header from a datetime or
        from seconds since the epoch.
        """
        if isinstance(if_modified_since, datetime.datetime):
            if_modified_since = if_modified_since.timestamp()
        self.connection.if_modified_since = int(if_modified_since)
        return self

    def if_none_match(self, if_none_match: str) -> "HttpRequest":
        return self.header(HEADER_IF_NONE_MATCH, if_none_match)

    @typing.overload
    def content_type(self) -> typing.Optional[str]:
        ...

    @typing.overload
    def content_type(
        self, content_type: str, charset: typing.Optional[str] = None
    ) -> "HttpRequest":
        ...

    def content_type(
        self, content_type: typing.Any = NO_VALUE, charset: typing.Optional[str] = None
    ) -> typing.Union["HttpRequest", typing.Optional[str]]:
        """Sets the request 'Content-Type' header, with a 'charset'
        parameter if one is given. Without arguments gets the response
        'Content-Type' header.
        """
        if content_type is NO_VALUE:
            return self.header(HEADER_CONTENT_TYPE)
        if charset:
            content_type = f"{content_type}; {PARAM_CHARSET}={charset}"
        return self.header(HEADER_CONTENT_TYPE, content_type)

    @typing.overload
    def content_length(self) -> typing.Optional[int]:
        ...

    @typing.overload
    def content_length(self, content_length: typing.Union[int, str]) -> "HttpRequest":
        ...

    def content_length(
        self, content_length: typing.Any = NO_VALUE
    ) -> typing.Union["HttpRequest", typing.Optional[int]]:
        """Streams the request body with a fixed 'Content-Length' when
        given a length, otherwise gets the response 'Content-Length'.
        """
        if content_length is NO_VALUE:
            return self.int_header(HEADER_CONTENT_LENGTH)
        self.connection.set_fixed_length_streaming_mode(int(content_length))
        return self

    # Connection settings

    def chunk(self, size: int) -> "HttpRequest":
        """Streams the request body with chunked transfer-encoding"""
        self.connection.set_chunked_streaming_mode(size)
        return self

    @typing.overload
    def buffer_size(self) -> int:
        ...

    @typing.overload
    def buffer_size(self, size: int) -> "HttpRequest":
        ...

    def buffer_size(
        self, size: typing.Any = NO_VALUE
    ) -> typing.Union["HttpRequest", int]:
        if size is NO_VALUE:
            return self._buffer_size
        if size < 1:
            raise InvalidUsageError("Size must be greater than zero")
        self._buffer_size = size
        return self

    @typing.overload
    def ignore_close_exceptions(self) -> bool:
        ...

    @typing.overload
    def ignore_close_exceptions(self, ignore: bool) -> "HttpRequest":
        ...

    def ignore_close_exceptions(
        self, ignore: typing.Any = NO_VALUE
    ) -> typing.Union["HttpRequest", bool]:
        if ignore is NO_VALUE:
            return self._ignore_close_exceptions
        self._ignore_close_exceptions = ignore
        return self

    def uncompress(self, uncompress: bool = True) -> "HttpRequest":
        """Decompresses the response body when its 'Content-Encoding'
        is one that can be decoded, 'gzip' and 'deflate' always are.
        """
        self._uncompress = uncompress
        return self

    def read_timeout(self, timeout: typing.Optional[float]) -> "HttpRequest":
        """Seconds to wait for data from the server, 'None' waits forever"""
        self.connection.read_timeout = timeout
        return self

    def connect_timeout(self, timeout: typing.Optional[float]) -> "HttpRequest":
        """Seconds to wait for the connection, 'None' waits forever"""
        self.connection.connect_timeout = timeout
        return self

    def use_caches(self, use_caches: bool) -> "HttpRequest":
        self.connection.use_caches = use_caches
        return self

    def follow_redirects(self, follow_redirects: bool) -> "HttpRequest":
        self.connection.follow_redirects = follow_redirects
        return self

    def use_proxy(self, proxy_host: str, proxy_port: int) -> "HttpRequest":
        """Sends the request through an HTTP proxy. Use 'proxy_basic()'
        if the proxy requires authentication.
        """
        if self._connection is not None:
            raise InvalidUsageError(
                "The connection has already been created. This method must "
                "be called before reading or writing to the request."
            )
        self._proxy = f"http://{proxy_host}:{proxy_port}"
        return self

    def trust_all_certs(self) -> "HttpRequest":
        """Accepts any certificate from the server. Has no effect
        on requests that aren't HTTPS.
        """
        if self._is_https():
            self._verify_certs = False
            self._update_ssl_context()
        return self

    def trust_all_hosts(self) -> "HttpRequest":
        """Accepts a trusted certificate for any hostname. Has no effect
        on requests that aren't HTTPS.
        """
        if self._is_https():
            self._verify_hostname = False
            self._update_ssl_context()
        return self

    def progress(
        self, callback: typing.Optional[UploadProgressCallback]
    ) -> "HttpRequest":
        """Calls 'callback(uploaded, total)' as the request body is written.
        'total' is -1 when the size of what's being written isn't known.
        """
        self._progress.callback = callback
        return self

    # Request body

    def send(self, value: SendType) -> "HttpRequest":
        """Writes to the request body. Text is encoded with the charset
        of the request 'Content-Type' or UTF-8. Files and streams are
        copied in 'buffer_size()' chunks and closed afterwards.
        """
        if value is None:
            raise InvalidUsageError("cannot send None")

        self._set_body_mode(_PLAIN)
        with self._request_errors():
            output = self._open_output()
            if isinstance(value, str):
                output.write_text(value)
            elif isinstance(value, (bytes, bytearray)):
                self._progress.add_total_size(len(value))
                output.copy_from(
                    io.BytesIO(value), self._progress, self._ignore_close_exceptions
                )
            elif isinstance(value, pathlib.Path):
                self._progress.add_total_size(value.stat().st_size)
                output.copy_from(
                    value.open("rb"), self._progress, self._ignore_close_exceptions
                )
            elif isinstance(value, io.TextIOBase):
                output.copy_text_from(
                    typing.cast(typing.TextIO, value),
                    self._progress,
                    self._ignore_close_exceptions,
                )
            elif hasattr(value, "read"):
                output.copy_from(
                    typing.cast(typing.BinaryIO, value),
                    self._progress,
                    self._ignore_close_exceptions,
                )
            else:
                raise InvalidUsageError(f"cannot send {type(value).__name__!r}")
        return self

    def json(self, value: typing.Any) -> "HttpRequest":
        """Sends a JSON body. Strings are sent as-is, anything else
        is serialized first.
        """
        self._set_body_mode(_PLAIN)
        self.content_type(CONTENT_TYPE_JSON)
        if not isinstance(value, str):
            value = compact_json_dumps(value)
        return self.send(value)

    def writer(self) -> RequestWriter:
        """Gets a text writer for the request body. Closing the writer
        only flushes it, the body is finished when the response is read.
        """
        self._set_body_mode(_PLAIN)
        with self._request_errors():
            return self._open_output().writer()

    def form(
        self,
        name: typing.Any,
        value: typing.Any = None,
        charset: typing.Optional[str] = CHARSET_UTF8,
    ) -> "HttpRequest":
        """Writes a form-encoded name/value pair to the request body,
        or every pair when given a mapping. The first pair sets the
        request 'Content-Type' to 'application/x-www-form-urlencoded'.
        """
        if hasattr(name, "items"):
            for key, val in name.items():
                self.form(key, val, charset)
            return self

        first = self._body_mode != _FORM
        self._set_body_mode(_FORM)
        if first:
            self.content_type(CONTENT_TYPE_FORM, charset)
        charset = valid_charset(charset)

        with self._request_errors():
            try:
                pair = form_urlencode(to_str(name), charset) + "="
                if value is not None:
                    pair += form_urlencode(to_str(value), charset)
            except (LookupError, UnicodeEncodeError) as e:
                raise io_error(e) from e

            output = self._open_output()
            if not first:
                output.write_text("&")
            output.write_text(pair)
        return self

    def part(
        self,
        name: str,
        payload: PartPayloadType,
        filename: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
        headers: typing.Optional[HeadersType] = None,
    ) -> "HttpRequest":
        """Writes a part of a 'multipart/form-data' request body.
        Parts are written in the order they're added.
        """
        self._set_body_mode(_MULTIPART)
        with self._request_errors():
            if self._multipart is None:
                self.content_type(CONTENT_TYPE_MULTIPART)
                self._multipart = MultipartWriter(
                    self._open_output(),
                    self._progress,
                    self._ignore_close_exceptions,
                )
            self._multipart.write_part(name, payload, filename, content_type, headers)
        return self

    # Response

    def code(self) -> int:
        """Gets the status code of the response, sending the request
        if it hasn't been sent yet.
        """
        with self._request_errors():
            self._close_output()
            return self.connection.response_code

    def message(self) -> typing.Optional[str]:
        with self._request_errors():
            self._close_output()
            return self.connection.response_message

    def ok(self) -> bool:
        return self.code() == StatusCode.OK

    def created(self) -> bool:
        return self.code() == StatusCode.CREATED

    def no_content(self) -> bool:
        return self.code() == StatusCode.NO_CONTENT

    def server_error(self) -> bool:
        return self.code() == StatusCode.INTERNAL_SERVER_ERROR

    def bad_request(self) -> bool:
        return self.code() == StatusCode.BAD_REQUEST

    def not_found(self) -> bool:
        return self.code() == StatusCode.NOT_FOUND

    def not_modified(self) -> bool:
        return self.code() == StatusCode.NOT_MODIFIED

    def header_values(self, name: str) -> typing.List[str]:
        return [value for value in self.headers().get_all(name) if value is not None]

    def int_header(
        self, name: str, default: typing.Optional[int] = None
    ) -> typing.Optional[int]:
        value = self.header(name)
        try:
            return int(value) if value is not None else default
        except ValueError:
            return default

    def date_header(
        self, name: str, default: typing.Optional[datetime.datetime] = None
    ) -> typing.Optional[datetime.datetime]:
        value = self.header(name)
        if value is None:
            return default
        try:
            return email.utils.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return default

    def parameter(self, header_name: str, param_name: str) -> typing.Optional[str]:
        return get_header_param(self.header(header_name), param_name)

    def parameters(self, header_name: str) -> typing.Dict[str, str]:
        return get_header_params(self.header(header_name))

    def charset(self) -> typing.Optional[str]:
        """Gets the 'charset' parameter of the response 'Content-Type'"""
        return self.parameter(HEADER_CONTENT_TYPE, PARAM_CHARSET)

    def apparent_charset(self) -> typing.Optional[str]:
        """Guesses the charset of the response body from its content.
        Useful when the response doesn't declare a charset.
        """
        detector = encoding_detector()
        detector.feed(self.data())
        detector.close()
        encoding: typing.Optional[str] = detector.result["encoding"]
        return encoding

    def content_encoding(self) -> typing.Optional[str]:
        return self.header(HEADER_CONTENT_ENCODING)

    def server(self) -> typing.Optional[str]:
        return self.header(HEADER_SERVER)

    def date(self) -> typing.Optional[datetime.datetime]:
        return self.date_header(HEADER_DATE)

    def cache_control(self) -> typing.Optional[str]:
        return self.header(HEADER_CACHE_CONTROL)

    def etag(self) -> typing.Optional[str]:
        return self.header(HEADER_ETAG)

    def expires(self) -> typing.Optional[datetime.datetime]:
        return self.date_header(HEADER_EXPIRES)

    def last_modified(self) -> typing.Optional[datetime.datetime]:
        return self.date_header(HEADER_LAST_MODIFIED)

    def location(self) -> typing.Optional[str]:
        return self.header(HEADER_LOCATION)

    def stream(self) -> typing.BinaryIO:
        """Gets the response body as a binary stream. Responses with an
        error status are read from the error stream. The caller is
        responsible for closing the stream.
        """
        if self._content is not None:
            return io.BytesIO(self._content)

        with self._request_errors():
            stream: typing.Optional[typing.BinaryIO]
            if self.code() < StatusCode.BAD_REQUEST:
                stream = self.connection.get_input_stream()
            else:
                stream = self.connection.get_error_stream()
                if stream is None:
                    try:
                        stream = self.connection.get_input_stream()
                    except HttpRequestError:
                        if (self.content_length() or 0) > 0:
                            raise
                        stream = io.BytesIO()

            content_encoding = self.content_encoding()
            if not self._uncompress or not is_supported_encoding(content_encoding):
                return stream

            reader = DecodingReader(
                stream, get_content_decoder(content_encoding), self._buffer_size
            )
            return typing.cast(
                typing.BinaryIO, io.BufferedReader(reader, self._buffer_size)
            )

    def buffer(self) -> typing.BinaryIO:
        """Same as 'stream()' but buffered with 'buffer_size()'"""
        stream = typing.cast(io.RawIOBase, self.stream())
        return typing.cast(
            typing.BinaryIO, io.BufferedReader(stream, self._buffer_size)
        )

    def reader(self, charset: typing.Optional[str] = None) -> typing.TextIO:
        """Gets a text reader for the response body using the given
        charset, the response charset or UTF-8 in that order.
        """
        charset = valid_charset(charset or self.charset())
        if is_known_encoding(charset) is None:
            raise HttpRequestError(
                f"unsupported charset '{charset}'",
                request=self,
                error=LookupError(charset),
            )
        return io.TextIOWrapper(self.buffer(), encoding=charset, errors="replace")

    def data(self) -> bytes:
        """Gets the response body as bytes. The body is only
        read once, later calls return the same bytes.
        """
        if self._content is None:
            with self._request_errors():
                stream = self.buffer()
                with close_operation(stream, self._ignore_close_exceptions):
                    with wrap_exceptions(is_connect=False):
                        self._content = stream.read()
        return self._content

    def body(self, charset: typing.Optional[str] = None) -> str:
        """Gets the response body as text decoded with the given
        charset, the response charset or UTF-8 in that order.
        """
        charset = valid_charset(charset or self.charset())
        with self._request_errors():
            try:
                return self.data().decode(charset, errors="replace")
            except LookupError as e:
                raise io_error(e, f"unsupported charset '{charset}'") from e

    def is_body_empty(self) -> bool:
        return self.content_length() == 0

    def receive(self, target: ReceiveType) -> "HttpRequest":
        """Copies the response body to a file path, a binary stream
        or a text stream. Streams given by the caller are left open.
        """
        with self._request_errors():
            if isinstance(target, (str, os.PathLike)):
                with close_operation(
                    open(target, "wb"), self._ignore_close_exceptions
                ) as output:
                    self._copy_body(output)
            elif isinstance(target, io.TextIOBase):
                with close_operation(
                    self.reader(), self._ignore_close_exceptions
                ) as reader:
                    self._copy_chunks(reader, target)
            else:
                self._copy_body(typing.cast(typing.BinaryIO, target))
        return self

    def disconnect(self) -> "HttpRequest":
        if self._connection is not None:
            self._connection.disconnect()
        return self

    def _copy_body(self, output: typing.BinaryIO) -> None:
        with close_operation(self.buffer(), self._ignore_close_exceptions) as stream:
            self._copy_chunks(stream, output)

    def _copy_chunks(
        self, source: typing.IO[typing.Any], target: typing.IO[typing.Any]
    ) -> None:
        while True:
            with wrap_exceptions(is_connect=False):
                chunk = source.read(self._buffer_size)
            if not chunk:
                break
            target.write(chunk)

    def _is_https(self) -> bool:
        return self._url.lower().startswith("https:")

    def _update_ssl_context(self) -> None:
        self.connection.ssl_context = self._config.ssl_context(
            verify_certs=self._verify_certs, verify_hostname=self._verify_hostname
        )

    def _set_body_mode(self, mode: str) -> None:
        if self._body_mode is not None and self._body_mode != mode:
            raise InvalidUsageError(
                f"cannot add a {mode} body to a request with a {self._body_mode} body"
            )
        self._body_mode = mode

    def _open_output(self) -> RequestOutputStream:
        if self._output is None:
            charset = get_header_param(
                self.connection.get_request_header(HEADER_CONTENT_TYPE), PARAM_CHARSET
            )
            self._output = RequestOutputStream(
                self.connection.get_output_stream(), charset, self._buffer_size
            )
        return self._output

    def _close_output(self) -> None:
        """Finishes the request body. Runs before the response is first
        read and does nothing on later calls.
        """
        self._progress.callback = None
        if self._output is None:
            return

        try:
            if self._multipart is not None:
                self._multipart.finish()
            self._output.flush()
            if self._ignore_close_exceptions:
                try:
                    self._output.close()
                except OSError:
                    pass
            else:
                self._output.close()
        finally:
            # A failed body is never finished a second time.
            self._output = None

    @contextlib.contextmanager
    def _request_errors(self) -> typing.Iterator[None]:
        """Translates I/O errors to 'HttpRequestError' and attaches
        this request to every 'HttpRequestError' raised.
        """
        try:
            with wrap_exceptions(is_connect=False):
                yield
        except HttpRequestError as e:
            if e.request is None:
                e.request = self
            raise

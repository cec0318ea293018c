import datetime
import gzip
import io

import pytest

import httprequest


def test_body(server, config):
    server.route("/", body=b"hello")
    request = httprequest.get(server.url + "/", config=config)
    assert request.body() == "hello"
    assert request.data() == b"hello"
    assert request.content_length() == 5
    assert not request.is_body_empty()


def test_body_is_cached(server, config):
    server.route("/", body=b"hello")
    request = httprequest.get(server.url + "/", config=config)
    data = request.data()
    assert request.data() is data
    assert request.body() == "hello"
    assert request.stream().read() == b"hello"


def test_body_charset(server, config):
    server.route(
        "/",
        body="caf\xe9".encode("latin-1"),
        headers=[("Content-Type", "text/plain; charset=latin-1")],
    )
    request = httprequest.get(server.url + "/", config=config)
    assert request.charset() == "latin-1"
    assert request.parameter("Content-Type", "charset") == "latin-1"
    assert request.parameters("Content-Type") == {"charset": "latin-1"}
    assert request.body() == "caf\xe9"


def test_body_explicit_charset(server, config):
    server.route("/", body="✓".encode("utf-8"))
    request = httprequest.get(server.url + "/", config=config)
    assert request.charset() is None
    assert request.body("UTF-8") == "✓"


def test_body_unknown_charset(server, config):
    server.route("/", body=b"hello")
    request = httprequest.get(server.url + "/", config=config)
    with pytest.raises(httprequest.HttpRequestError) as e:
        request.body("not-a-charset")
    assert e.value.request is request


def test_apparent_charset(server, config):
    server.route("/", body=b"plain ascii text")
    request = httprequest.get(server.url + "/", config=config)
    assert request.apparent_charset() == "ascii"


def test_is_body_empty(server, config):
    request = httprequest.get(server.url + "/", config=config)
    assert request.is_body_empty()
    assert request.body() == ""


def test_head_has_no_body(server, config):
    server.route("/", body=b"hello")
    request = httprequest.head(server.url + "/", config=config)
    assert request.ok()
    assert request.data() == b""


def test_reader(server, config):
    server.route("/", body=b"line one\nline two\n")
    request = httprequest.get(server.url + "/", config=config)
    with request.reader() as reader:
        assert reader.readlines() == ["line one\n", "line two\n"]


def test_reader_unknown_charset(server, config):
    request = httprequest.get(server.url + "/", config=config)
    with pytest.raises(httprequest.HttpRequestError):
        request.reader("not-a-charset")


def test_buffer(server, config):
    server.route("/", body=b"hello world")
    request = httprequest.get(server.url + "/", config=config)
    with request.buffer() as stream:
        assert stream.read(5) == b"hello"
        assert stream.read() == b" world"


def test_receive_file(server, config, tmp_path):
    server.route("/", body=b"contents")
    path = tmp_path / "out.bin"
    request = httprequest.get(server.url + "/", config=config).receive(path)
    assert request.ok()
    assert path.read_bytes() == b"contents"


def test_receive_str_path(server, config, tmp_path):
    server.route("/", body=b"contents")
    path = tmp_path / "out.bin"
    httprequest.get(server.url + "/", config=config).receive(str(path))
    assert path.read_bytes() == b"contents"


def test_receive_binary_stream(server, config):
    server.route("/", body=b"contents")
    output = io.BytesIO()
    httprequest.get(server.url + "/", config=config).receive(output)
    assert not output.closed
    assert output.getvalue() == b"contents"


def test_receive_text_stream(server, config):
    server.route(
        "/",
        body="✓".encode("utf-8"),
        headers=[("Content-Type", "text/plain; charset=UTF-8")],
    )
    output = io.StringIO()
    httprequest.get(server.url + "/", config=config).receive(output)
    assert not output.closed
    assert output.getvalue() == "✓"


def test_uncompress_gzip(server, config):
    server.route(
        "/", body=gzip.compress(b"hello" * 10), headers=[("Content-Encoding", "gzip")]
    )
    request = (
        httprequest.get(server.url + "/", config=config)
        .accept_gzip_encoding()
        .uncompress(True)
    )
    assert request.content_encoding() == "gzip"
    assert request.body() == "hello" * 10
    assert server.last_request.headers["Accept-Encoding"] == "gzip"


def test_gzip_not_uncompressed_by_default(server, config):
    compressed = gzip.compress(b"hello")
    server.route("/", body=compressed, headers=[("Content-Encoding", "gzip")])
    request = httprequest.get(server.url + "/", config=config)
    assert request.data() == compressed


def test_uncompress_from_config(server):
    config = httprequest.ClientConfig(trust_env=False, uncompress=True)
    server.route(
        "/", body=gzip.compress(b"hello"), headers=[("Content-Encoding", "gzip")]
    )
    assert httprequest.get(server.url + "/", config=config).body() == "hello"


def test_uncompress_invalid_body(server, config):
    server.route("/", body=b"not gzip", headers=[("Content-Encoding", "gzip")])
    request = httprequest.get(server.url + "/", config=config).uncompress(True)
    with pytest.raises(httprequest.DecodeError):
        request.body()


def test_uncompress_unknown_encoding(server, config):
    server.route("/", body=b"hello", headers=[("Content-Encoding", "unknown")])
    request = httprequest.get(server.url + "/", config=config).uncompress(True)
    assert request.body() == "hello"


@pytest.mark.parametrize(
    ["status", "predicate"],
    [
        (200, "ok"),
        (201, "created"),
        (204, "no_content"),
        (304, "not_modified"),
        (400, "bad_request"),
        (404, "not_found"),
        (500, "server_error"),
    ],
)
def test_status_predicates(server, config, status, predicate):
    server.route("/", status=status)
    request = httprequest.get(server.url + "/", config=config)
    assert request.code() == status
    assert getattr(request, predicate)()
    if predicate != "ok":
        assert not request.ok()


def test_error_body(server, config):
    server.route("/missing", status=404, body=b"not here")
    request = httprequest.get(server.url + "/missing", config=config)
    assert request.not_found()
    assert request.message() == "Not Found"
    assert request.body() == "not here"


def test_server_error_body(server, config):
    server.route("/", status=500, body=b"error")
    request = httprequest.post(server.url + "/", config=config).send("data")
    assert request.server_error()
    assert request.body() == "error"


def test_error_without_error_stream(fake_response_config):
    config = fake_response_config(
        status=500, input_error=httprequest.HttpRequestError("closed")
    )
    request = httprequest.get("http://example.com", config=config)
    assert request.body() == ""


def test_error_without_error_stream_and_content(fake_response_config):
    config = fake_response_config(
        status=500,
        headers=[("Content-Length", "5")],
        input_error=httprequest.HttpRequestError("closed"),
    )
    request = httprequest.get("http://example.com", config=config)
    with pytest.raises(httprequest.HttpRequestError, match="closed"):
        request.body()


def test_error_stream_is_preferred(fake_response_config):
    config = fake_response_config(status=404, body=b"input", error_body=b"error")
    assert httprequest.get("http://example.com", config=config).body() == "error"


def test_response_headers(server, config):
    server.route(
        "/",
        headers=[
            ("X-Multi", "a"),
            ("X-Multi", "b"),
            ("Cache-Control", "no-cache"),
            ("ETag", '"abc"'),
            ("Location", "http://example.com"),
        ],
    )
    request = httprequest.get(server.url + "/", config=config)
    assert request.header("X-Multi") == "b"
    assert request.header("x-multi") == "b"
    assert request.header_values("X-Multi") == ["a", "b"]
    assert request.header("X-Missing") is None
    assert request.header_values("X-Missing") == []
    assert request.headers().get_all("X-Multi") == ["a", "b"]
    assert request.cache_control() == "no-cache"
    assert request.etag() == '"abc"'
    assert request.location() == "http://example.com"
    assert request.server().startswith("BaseHTTP")
    assert isinstance(request.date(), datetime.datetime)


def test_int_header(server, config):
    server.route("/", headers=[("X-Int", "42"), ("X-Bad", "forty-two")])
    request = httprequest.get(server.url + "/", config=config)
    assert request.int_header("X-Int") == 42
    assert request.int_header("X-Bad") is None
    assert request.int_header("X-Bad", -1) == -1
    assert request.int_header("X-Missing", 7) == 7


def test_date_header(server, config):
    server.route(
        "/",
        headers=[
            ("Last-Modified", "Wed, 21 Oct 2015 07:28:00 GMT"),
            ("Expires", "not a date"),
        ],
    )
    request = httprequest.get(server.url + "/", config=config)
    assert request.last_modified() == datetime.datetime(
        2015, 10, 21, 7, 28, tzinfo=datetime.timezone.utc
    )
    assert request.expires() is None
    default = datetime.datetime(2000, 1, 1)
    assert request.date_header("Expires", default) is default
    assert request.date_header("X-Missing") is None

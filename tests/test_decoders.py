import gzip
import io
import zlib

import pytest

import httprequest
from httprequest.decoders import (
    DecodingReader,
    DeflateDecoder,
    GzipDecoder,
    IdentityDecoder,
    get_content_decoder,
    is_supported_encoding,
)

DATA = b"hello world " * 100


@pytest.mark.parametrize(
    ["content_encoding", "decoder_type"],
    [
        ("gzip", GzipDecoder),
        ("x-gzip", GzipDecoder),
        (" GZIP ", GzipDecoder),
        ("deflate", DeflateDecoder),
        ("identity", IdentityDecoder),
        ("compress", IdentityDecoder),
        (None, IdentityDecoder),
    ],
)
def test_get_content_decoder(content_encoding, decoder_type):
    assert isinstance(get_content_decoder(content_encoding), decoder_type)


def test_is_supported_encoding():
    assert is_supported_encoding("gzip")
    assert is_supported_encoding("deflate")
    assert not is_supported_encoding("identity")
    assert not is_supported_encoding(None)


def test_gzip_decoder():
    decoder = GzipDecoder()
    assert decoder.decompress(gzip.compress(DATA)) + decoder.flush() == DATA


def test_gzip_decoder_multiple_members():
    decoder = GzipDecoder()
    data = gzip.compress(b"foo") + gzip.compress(b"bar")
    assert decoder.decompress(data) == b"foobar"


@pytest.mark.parametrize("wbits", [zlib.MAX_WBITS, -zlib.MAX_WBITS])
def test_deflate_decoder(wbits):
    compressor = zlib.compressobj(wbits=wbits)
    data = compressor.compress(DATA) + compressor.flush()

    decoder = DeflateDecoder()
    assert decoder.decompress(data) + decoder.flush() == DATA


def test_decoding_reader():
    source = io.BytesIO(gzip.compress(DATA))
    reader = io.BufferedReader(DecodingReader(source, GzipDecoder(), 16))

    assert reader.read() == DATA
    reader.close()
    assert source.closed


def test_decoding_reader_invalid_data():
    reader = DecodingReader(io.BytesIO(b"not gzip"), GzipDecoder(), 16)
    with pytest.raises(httprequest.DecodeError):
        reader.read()

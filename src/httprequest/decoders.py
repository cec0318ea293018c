"""Decoders for response Content-Encoding values"""
import enum
import io
import types
import typing
import zlib

from .exceptions import DecodeError

brotli: typing.Optional[types.ModuleType]
zstandard: typing.Optional[types.ModuleType]
try:
    import brotli
except ImportError:
    brotli = None

try:
    import zstandard
except ImportError:
    zstandard = None

_DECODE_ERRORS: typing.Tuple[typing.Type[BaseException], ...] = (zlib.error,)
if brotli is not None:
    _DECODE_ERRORS += (getattr(brotli, "error", zlib.error),)
if zstandard is not None:
    _DECODE_ERRORS += (zstandard.ZstdError,)


class Decoder:
    def decompress(self, data: bytes) -> bytes:
        raise NotImplementedError()

    def flush(self) -> bytes:
        raise NotImplementedError()


class IdentityDecoder(Decoder):
    def decompress(self, data: bytes) -> bytes:
        return data

    def flush(self) -> bytes:
        return b""


class DeflateDecoder(Decoder):
    """Accepts both zlib-wrapped and raw deflate streams as
    servers are split on which one 'deflate' means.
    """

    def __init__(self) -> None:
        self._first_try = True
        self._data = bytearray()
        self._obj = zlib.decompressobj()

    def decompress(self, data: bytes) -> bytes:
        if not data:
            return data

        if not self._first_try:
            return self._obj.decompress(data)

        self._data += data
        try:
            decompressed = self._obj.decompress(data)
            if decompressed:
                self._first_try = False
                self._data = bytearray()
            return decompressed
        except zlib.error:
            self._first_try = False
            self._obj = zlib.decompressobj(-zlib.MAX_WBITS)
            data = bytes(self._data)
            self._data = bytearray()
            return self.decompress(data)

    def flush(self) -> bytes:
        return self._obj.flush()


class GzipDecoderState(enum.Enum):
    FIRST_MEMBER = 0
    OTHER_MEMBERS = 1
    SWALLOW_DATA = 2


class GzipDecoder(Decoder):
    """Decodes multi-member gzip streams, ignoring trailing
    garbage after the first member like other gzip clients.
    """

    def __init__(self) -> None:
        self._obj = zlib.decompressobj(16 + zlib.MAX_WBITS)
        self._state = GzipDecoderState.FIRST_MEMBER

    def decompress(self, data: bytes) -> bytes:
        ret = bytearray()
        if self._state == GzipDecoderState.SWALLOW_DATA or not data:
            return bytes(ret)
        while True:
            try:
                ret += self._obj.decompress(data)
            except zlib.error:
                previous_state = self._state
                self._state = GzipDecoderState.SWALLOW_DATA
                if previous_state == GzipDecoderState.OTHER_MEMBERS:
                    return bytes(ret)
                raise
            data = self._obj.unused_data
            if not data:
                return bytes(ret)
            self._state = GzipDecoderState.OTHER_MEMBERS
            self._obj = zlib.decompressobj(16 + zlib.MAX_WBITS)

    def flush(self) -> bytes:
        return self._obj.flush()


if brotli is not None:

    class BrotliDecoder(Decoder):
        def __init__(self) -> None:
            self._obj = brotli.Decompressor()

        def decompress(self, data: bytes) -> bytes:
            if hasattr(self._obj, "decompress"):
                return self._obj.decompress(data)
            return self._obj.process(data)

        def flush(self) -> bytes:
            if hasattr(self._obj, "flush"):
                return self._obj.flush()
            return b""


if zstandard is not None:

    class ZstdDecoder(Decoder):
        def __init__(self) -> None:
            self._obj = zstandard.ZstdDecompressor().decompressobj()

        def decompress(self, data: bytes) -> bytes:
            return self._obj.decompress(data)

        def flush(self) -> bytes:
            return self._obj.flush() or b""


def get_content_decoder(content_encoding: typing.Optional[str]) -> Decoder:
    content_encoding = (content_encoding or "").strip().lower()
    if content_encoding in ("gzip", "x-gzip"):
        return GzipDecoder()
    if content_encoding in ("deflate", "x-deflate"):
        return DeflateDecoder()
    if brotli is not None and content_encoding == "br":
        return BrotliDecoder()
    if zstandard is not None and content_encoding == "zstd":
        return ZstdDecoder()
    # Unknown or 'identity' encodings are handed back untouched.
    return IdentityDecoder()


def is_supported_encoding(content_encoding: typing.Optional[str]) -> bool:
    return not isinstance(get_content_decoder(content_encoding), IdentityDecoder)


class DecodingReader(io.RawIOBase):
    """Read-only raw stream that decompresses another binary
    stream on the fly. Closing the reader closes the source.
    """

    def __init__(
        self, source: typing.BinaryIO, decoder: Decoder, chunk_size: int
    ) -> None:
        self._source = source
        self._decoder = decoder
        self._chunk_size = chunk_size
        self._pending = b""
        self._eof = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: typing.Any) -> int:
        while not self._pending and not self._eof:
            self._pending = self._decode_next_chunk()

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            try:
                self._source.close()
            finally:
                super().close()

    def _decode_next_chunk(self) -> bytes:
        chunk = self._source.read(self._chunk_size)
        try:
            if chunk:
                return self._decoder.decompress(chunk)
            self._eof = True
            return self._decoder.flush()
        except _DECODE_ERRORS as e:
            raise DecodeError("unable to decode response body", error=e) from e

import contextlib
import io
import typing

from .exceptions import HttpRequestError
from .models import UploadProgressCallback
from .utils import DEFAULT_BUFFER_SIZE, is_known_encoding, valid_charset

R = typing.TypeVar("R")


def io_error(
    err: BaseException, message: typing.Optional[str] = None
) -> HttpRequestError:
    """Wraps an I/O or codec failure into an 'HttpRequestError'"""
    return HttpRequestError(message or str(err) or type(err).__name__, error=err)


@contextlib.contextmanager
def close_operation(
    resource: R, ignore_close_exceptions: bool = True
) -> typing.Iterator[R]:
    """Runs the body of the 'with' block against a resource and then
    flushes and closes the resource however the block exits.

    An error raised by the block always wins over an error raised while
    flushing or closing. Close errors are swallowed entirely when
    'ignore_close_exceptions' is set. 'OSError' is re-raised as
    'HttpRequestError'.
    """
    thrown = False
    try:
        yield resource
    except HttpRequestError:
        thrown = True
        raise
    except OSError as e:
        thrown = True
        raise io_error(e) from e
    except BaseException:
        thrown = True
        raise
    finally:
        try:
            if not getattr(resource, "closed", False) and hasattr(resource, "flush"):
                resource.flush()
            if ignore_close_exceptions:
                try:
                    resource.close()
                except OSError:
                    pass
            else:
                resource.close()
        except OSError as e:
            if not thrown:
                raise io_error(e) from e


@contextlib.contextmanager
def flush_operation(resource: R) -> typing.Iterator[R]:
    """Same as 'close_operation()' but only flushes the resource
    afterwards, leaving it open.
    """
    thrown = False
    try:
        yield resource
    except HttpRequestError:
        thrown = True
        raise
    except OSError as e:
        thrown = True
        raise io_error(e) from e
    except BaseException:
        thrown = True
        raise
    finally:
        try:
            resource.flush()
        except OSError as e:
            if not thrown:
                raise io_error(e) from e


class UploadProgress:
    """Tracks how much of the request body has been written and reports
    it to a callback as '(uploaded, total)'. 'total' is -1 until a payload
    with a known size is added.
    """

    def __init__(self, callback: typing.Optional[UploadProgressCallback] = None):
        self.callback = callback
        self.total_size = -1
        self.total_written = 0

    def add_total_size(self, size: int) -> None:
        if self.total_size == -1:
            self.total_size = 0
        self.total_size += size

    def update(self, written: int, sized: bool = True) -> None:
        self.total_written += written
        if self.callback is not None:
            self.callback(self.total_written, self.total_size if sized else -1)


class RequestOutputStream(io.BufferedWriter):
    """Buffered request body writer bound to a single charset which is used
    to encode all text written with 'write_text()'.
    """

    def __init__(
        self,
        raw: io.RawIOBase,
        charset: typing.Optional[str] = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        charset = valid_charset(charset)
        if is_known_encoding(charset) is None:
            raise HttpRequestError(
                f"unsupported charset '{charset}'", error=LookupError(charset)
            )

        super().__init__(raw, buffer_size)
        self.charset = charset
        self.buffer_size = buffer_size

    def write_text(self, value: str) -> "RequestOutputStream":
        self.write(self._encode(value))
        return self

    def _encode(self, value: str) -> bytes:
        try:
            return value.encode(self.charset)
        except UnicodeEncodeError as e:
            raise io_error(e, f"unable to encode text as '{self.charset}'") from e

    def copy_from(
        self,
        source: typing.BinaryIO,
        progress: UploadProgress,
        ignore_close_exceptions: bool = True,
    ) -> None:
        """Drains a binary stream into the request body in 'buffer_size'
        chunks and closes the stream afterwards.
        """
        with close_operation(source, ignore_close_exceptions):
            while True:
                chunk = source.read(self.buffer_size)
                if not chunk:
                    break
                self.write(chunk)
                progress.update(len(chunk))

    def copy_text_from(
        self,
        source: typing.TextIO,
        progress: UploadProgress,
        ignore_close_exceptions: bool = True,
    ) -> None:
        """Same as 'copy_from()' for text streams. The total reported
        to the progress callback is always unknown.
        """
        with close_operation(source, ignore_close_exceptions), flush_operation(self):
            while True:
                chunk = source.read(self.buffer_size)
                if not chunk:
                    break
                data = self._encode(chunk)
                self.write(data)
                progress.update(len(data), sized=False)

    def writer(self) -> "RequestWriter":
        return RequestWriter(self)


class RequestWriter(io.TextIOBase):
    """Text view of a 'RequestOutputStream'. Closing the writer only
    flushes, the request owns closing the underlying output.
    """

    def __init__(self, output: RequestOutputStream) -> None:
        self._output = output

    @property
    def encoding(self) -> str:
        return self._output.charset

    def writable(self) -> bool:
        return True

    def write(self, s: str) -> int:
        self._output.write_text(s)
        return len(s)

    def flush(self) -> None:
        if not self._output.closed:
            self._output.flush()

    def close(self) -> None:
        if not self.closed:
            try:
                self.flush()
            finally:
                super().close()

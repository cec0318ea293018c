"""Writes a multipart/form-data request body part by part
straight into the request output.
"""
import io
import numbers
import pathlib
import typing

from .exceptions import InvalidUsageError
from .models import Headers, HeadersType
from .streams import RequestOutputStream, UploadProgress
from .utils import to_str

BOUNDARY = "00content0boundary00"
CONTENT_TYPE_MULTIPART = f"multipart/form-data; boundary={BOUNDARY}"

PartPayloadType = typing.Union[
    str,
    numbers.Number,
    bytes,
    pathlib.Path,
    typing.BinaryIO,
    typing.TextIO,
]


def render_part_headers(
    name: str,
    filename: typing.Optional[str] = None,
    content_type: typing.Optional[str] = None,
    headers: typing.Optional[HeadersType] = None,
) -> str:
    """Renders the headers for a multipart field including the blank
    line that separates them from the field's content.
    """
    disposition = f'form-data; name="{name}"'
    if filename is not None:
        disposition += f'; filename="{filename}"'

    lines = [f"Content-Disposition: {disposition}"]
    if content_type is not None:
        lines.append(f"Content-Type: {content_type}")

    # Extra headers are rendered after the ones defined in the standard.
    priority_headers = ("content-disposition", "content-type")
    for header, value in Headers(headers or ()).items():
        if value is not None and header.lower() not in priority_headers:
            lines.append(f"{header}: {value}")

    lines.append("\r\n")
    return "\r\n".join(lines)


class MultipartWriter:
    """Frames parts with the fixed boundary as they're added.
    Nothing is buffered, each part's content is written to the
    output as soon as the part is added.
    """

    def __init__(
        self,
        output: RequestOutputStream,
        progress: UploadProgress,
        ignore_close_exceptions: bool = True,
    ):
        self.output = output
        self.progress = progress
        self.ignore_close_exceptions = ignore_close_exceptions
        self._parts = 0

    def start_part(self) -> None:
        if self._parts == 0:
            self.output.write_text(f"--{BOUNDARY}\r\n")
        else:
            self.output.write_text(f"\r\n--{BOUNDARY}\r\n")
        self._parts += 1

    def write_part(
        self,
        name: str,
        payload: PartPayloadType,
        filename: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
        headers: typing.Optional[HeadersType] = None,
    ) -> None:
        self.start_part()
        self.output.write_text(
            render_part_headers(name, filename, content_type, headers)
        )
        self.write_payload(payload)

    def write_payload(self, payload: PartPayloadType) -> None:
        if isinstance(payload, str):
            self.output.write_text(payload)
        elif isinstance(payload, (bytes, bytearray)):
            self.progress.add_total_size(len(payload))
            self.output.copy_from(
                io.BytesIO(payload), self.progress, self.ignore_close_exceptions
            )
        elif isinstance(payload, pathlib.Path):
            self.progress.add_total_size(payload.stat().st_size)
            self.output.copy_from(
                payload.open("rb"), self.progress, self.ignore_close_exceptions
            )
        elif isinstance(payload, io.TextIOBase):
            self.output.copy_text_from(
                payload, self.progress, self.ignore_close_exceptions
            )
        elif hasattr(payload, "read"):
            self.output.copy_from(
                typing.cast(typing.BinaryIO, payload),
                self.progress,
                self.ignore_close_exceptions,
            )
        elif isinstance(payload, numbers.Number):
            self.output.write_text(to_str(payload))
        else:
            raise InvalidUsageError(
                f"unsupported part payload type {type(payload).__name__!r}"
            )

    def finish(self) -> None:
        """Writes the closing boundary. Does nothing if no part was added."""
        if self._parts:
            self.output.write_text(f"\r\n--{BOUNDARY}--\r\n")

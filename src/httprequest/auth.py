import base64
import typing

from .utils import to_bytes


class BasicAuth:
    """Implements RFC 7617 - Basic Authentication"""

    def __init__(
        self,
        username: typing.Union[str, bytes],
        password: typing.Union[str, bytes],
        *,
        encoding: str = "latin-1",
    ):
        username = to_bytes(username, encoding=encoding)
        password = to_bytes(password, encoding=encoding)

        self.header = (
            f"Basic {base64.b64encode(b'%b:%b' % (username, password)).decode()}"
        )

    def __str__(self) -> str:
        return self.header

import codecs
import functools
import json
import typing

import chardet

DEFAULT_BUFFER_SIZE = 8192


def _int_to_urlenc() -> typing.Dict[int, str]:
    """Creates a mapping of ordinals to text encoded via url-encoding"""
    values = {}
    special = {0x2A, 0x2D, 0x2E, 0x5F}
    for byte in range(256):
        if (
            (0x61 <= byte <= 0x7A)
            or (0x41 <= byte <= 0x5A)
            or (0x30 <= byte <= 0x39)
            or (byte in special)
        ):  # Keep the ASCII
            values[byte] = chr(byte)
        elif byte == 0x20:  # Space -> '+'
            values[byte] = "+"
        else:  # Percent-encoded
            values[byte] = "%" + hex(byte)[2:].upper().zfill(2)
    return values


INT_TO_URLENC = _int_to_urlenc()


def form_urlencode(value: str, charset: str) -> str:
    """Encodes a value for an 'application/x-www-form-urlencoded' body
    after converting it to bytes with the given charset.
    """
    return "".join([INT_TO_URLENC[byte] for byte in value.encode(charset)])


def compact_json_dumps(obj: typing.Any) -> str:
    """Function that doesn't add extra whitespace when encoding JSON"""
    return json.dumps(obj, separators=(",", ":"))


def to_bytes(
    value: typing.Union[str, bytes], encoding: str = "utf-8"
) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode(encoding)


def to_str(value: typing.Any) -> str:
    """Renders a parameter value as text. Booleans are rendered
    in lowercase as most servers expect 'true' / 'false'.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@functools.lru_cache(128)
def is_known_encoding(encoding: str) -> typing.Optional[str]:
    """Given an encoding type, return either it's normalized name
    if we understand the codec otherwise return 'None'.
    """
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        return None


def valid_charset(charset: typing.Optional[str]) -> str:
    """Returns the given charset or 'UTF-8' when none was given"""
    if charset:
        return charset
    return "UTF-8"


def encoding_detector() -> chardet.UniversalDetector:
    return chardet.UniversalDetector()


def user_agent() -> str:
    from . import __version__

    return f"httprequest/{__version__}"


def _header_param_segments(
    value: typing.Optional[str],
) -> typing.Iterator[typing.Tuple[str, str]]:
    """Yields each 'name=value' pair following the first ';' of
    a header value with whitespace trimmed and one layer of
    surrounding double quotes removed from the value.
    Segments without a '=', without a name or without a value
    are skipped.
    """
    if not value:
        return

    start = value.find(";") + 1
    if start == 0 or start == len(value):
        return

    for segment in value[start:].split(";"):
        name, sep, param = segment.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        param = param.strip()
        if not param:
            continue
        if len(param) > 2 and param[0] == '"' and param[-1] == '"':
            param = param[1:-1]
        yield name, param


def get_header_param(value: typing.Optional[str], name: str) -> typing.Optional[str]:
    """Gets a single parameter value from a header value like
    'text/html; charset=UTF-8'. Returns 'None' if the parameter
    isn't present or is present with an empty value.
    """
    for param_name, param in _header_param_segments(value):
        if param_name == name:
            return param
    return None


def get_header_params(value: typing.Optional[str]) -> typing.Dict[str, str]:
    """Gets all parameters from a header value as an ordered dictionary.
    Parameters with empty values are left out, same as 'get_header_param()'.
    """
    params: typing.Dict[str, str] = {}
    for name, param in _header_param_segments(value):
        params[name] = param
    return params

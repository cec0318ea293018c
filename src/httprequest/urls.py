"""Helpers for building request URLs: appending query parameters
and normalizing a URL into strict ASCII percent-encoding.
"""

import typing
import urllib.parse

from .exceptions import InvalidUsageError, URLError
from .utils import to_str

# Characters left as-is when percent-encoding each component.
_PATH_SAFE = "/;:@&=+$,!~*'()"
_QUERY_SAFE = _PATH_SAFE + "?[]"


def append_params(url: typing.Any, *params: typing.Any) -> str:
    """Appends query parameters to the base URL.

    'params' is either a single mapping of names to values or a flat
    sequence of alternating names and values. A 'None' value renders
    as 'name=' and values that are lists, tuples or other iterables
    render as repeated 'name[]=value' pairs. Values are rendered
    unescaped; use 'encode_url()' on the result to escape them.
    """
    base_url = to_str(url)
    pairs = _param_pairs(params)
    if not pairs:
        return base_url

    result = [_add_path_separator(base_url)]
    if "?" not in base_url:
        result.append("?")
    elif not base_url.endswith(("?", "&")):
        result.append("&")

    result.append("&".join(_render_param(key, value) for key, value in pairs))
    return "".join(result)


def encode_url(url: typing.Any) -> str:
    """Encodes the given URL as an ASCII string.

    The path and query are percent-encoded so ' ' becomes '%20' and
    non-ASCII characters become their UTF-8 escapes. Any '+' within the
    query is escaped to '%2B' so it isn't mistaken for an encoded space.
    The fragment and user information are dropped, the host keeps
    its case unless it has to be IDNA-encoded.
    """
    url = to_str(url)
    try:
        parts = urllib.parse.urlsplit(url)
        port = parts.port
        if not parts.scheme or not parts.hostname:
            raise ValueError("URL must have a scheme and a host")
        host = _host_from_netloc(parts.netloc)
        if not host.isascii():
            host = host.encode("idna").decode("ascii")
    except (ValueError, UnicodeError) as e:
        raise URLError(f"malformed URL '{url}'", error=e) from e

    if port is not None:
        host = f"{host}:{port}"

    encoded = [
        parts.scheme,
        "://",
        host,
        urllib.parse.quote(parts.path, safe=_PATH_SAFE),
    ]
    # 'urlsplit()' can't tell 'http://host/?' from 'http://host/'
    if "?" in url.split("#", 1)[0]:
        query = urllib.parse.quote(parts.query, safe=_QUERY_SAFE)
        encoded.append("?" + query.replace("+", "%2B"))
    return "".join(encoded)


def _host_from_netloc(netloc: str) -> str:
    """Gets the host of an authority without lowercasing it.
    IPv6 literals keep their brackets.
    """
    hostinfo = netloc.rpartition("@")[2]
    if hostinfo.startswith("["):
        return hostinfo[: hostinfo.index("]") + 1]
    return hostinfo.partition(":")[0]


def _param_pairs(
    params: typing.Sequence[typing.Any],
) -> typing.List[typing.Tuple[typing.Any, typing.Any]]:
    if len(params) == 1 and (params[0] is None or hasattr(params[0], "items")):
        return list(params[0].items()) if params[0] else []
    if len(params) % 2 != 0:
        raise InvalidUsageError(
            "Must specify an even number of parameter names/values"
        )
    return list(zip(params[::2], params[1::2]))


def _add_path_separator(base_url: str) -> str:
    """Adds a '/' if the base URL doesn't have any path segments,
    placing it ahead of a query string if there is one.
    """
    authority_start = base_url.find("://")
    if authority_start == -1:
        return base_url
    authority_start += 3
    query_start = base_url.find("?", authority_start)
    authority_end = len(base_url) if query_start == -1 else query_start
    if "/" in base_url[authority_start:authority_end]:
        return base_url
    return base_url[:authority_end] + "/" + base_url[authority_end:]


def _is_multi_value(value: typing.Any) -> bool:
    return (
        value is not None
        and not isinstance(value, (str, bytes, bytearray))
        and not hasattr(value, "items")
        and hasattr(value, "__iter__")
    )


def _render_value(value: typing.Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return to_str(value)


def _render_param(key: typing.Any, value: typing.Any) -> str:
    key = to_str(key)
    if _is_multi_value(value):
        return "&".join(f"{key}[]={_render_value(element)}" for element in value)
    return f"{key}={_render_value(value)}"

import typing

from .config import ClientConfig
from .models import Method, URLType
from .request import HttpRequest, MethodType


def request(
    method: MethodType,
    url: URLType,
    *params: typing.Any,
    encode: bool = False,
    config: typing.Optional[ClientConfig] = None,
) -> HttpRequest:
    """Starts a request with the given method.

    'params' are query parameters appended to the URL, either a single
    mapping or alternating names and values. With 'encode=True' the
    resulting URL is percent-encoded before the request is created.
    """
    return HttpRequest.create(method, url, *params, encode=encode, config=config)


def get(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.GET, url, *params, **kwargs)


def post(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.POST, url, *params, **kwargs)


def put(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.PUT, url, *params, **kwargs)


def delete(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.DELETE, url, *params, **kwargs)


def head(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.HEAD, url, *params, **kwargs)


def options(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.OPTIONS, url, *params, **kwargs)


def trace(url: URLType, *params: typing.Any, **kwargs: typing.Any) -> HttpRequest:
    return request(Method.TRACE, url, *params, **kwargs)

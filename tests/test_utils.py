import pytest

from httprequest.utils import (
    form_urlencode,
    get_header_param,
    get_header_params,
    to_str,
    valid_charset,
)


@pytest.mark.parametrize(
    ["value", "name", "expected"],
    [
        ("text/html; charset=UTF-8", "charset", "UTF-8"),
        ("text/html;charset=UTF-8", "charset", "UTF-8"),
        ("text/html; charset = UTF-8 ", "charset", "UTF-8"),
        ('text/html; charset="UTF-8"', "charset", "UTF-8"),
        ("text/html; a=1; charset=UTF-8; b=2", "charset", "UTF-8"),
        ("text/html; charset=UTF-8; charset=ascii", "charset", "UTF-8"),
        ("text/html", "charset", None),
        ("text/html;", "charset", None),
        ("text/html; other=1", "charset", None),
        ("text/html; charset", "charset", None),
        ("text/html; =UTF-8", "charset", None),
        ("text/html; charset=", "charset", None),
        ("text/html; charset=  ", "charset", None),
        ("text/html;; ;charset=UTF-8", "charset", "UTF-8"),
        ('text/html; charset=""', "charset", '""'),
        ("", "charset", None),
        (None, "charset", None),
    ],
)
def test_get_header_param(value, name, expected):
    assert get_header_param(value, name) == expected


def test_get_header_param_is_case_sensitive():
    assert get_header_param("text/html; Charset=UTF-8", "charset") is None


def test_get_header_params():
    value = 'multipart/form-data; boundary="abc"; charset=UTF-8; empty=; flag'
    assert get_header_params(value) == {"boundary": "abc", "charset": "UTF-8"}


def test_get_header_params_last_value_wins():
    assert get_header_params("a/b; x=1; x=2") == {"x": "2"}


@pytest.mark.parametrize("value", [None, "", "text/plain", "text/plain;"])
def test_get_header_params_none(value):
    assert get_header_params(value) == {}


@pytest.mark.parametrize(
    ["value", "expected"],
    [
        ("user", "user"),
        ("a b", "a+b"),
        ("a+b", "a%2Bb"),
        ("a&b=c", "a%26b%3Dc"),
        ("*-._", "*-._"),
        ("~:;<>?@", "%7E%3A%3B%3C%3E%3F%40"),
        ("\u2713", "%E2%9C%93"),
    ],
)
def test_form_urlencode(value, expected):
    assert form_urlencode(value, "UTF-8") == expected


def test_form_urlencode_charset():
    assert form_urlencode("\xe9", "latin-1") == "%E9"
    assert form_urlencode("\xe9", "UTF-8") == "%C3%A9"


@pytest.mark.parametrize(
    ["value", "expected"], [(True, "true"), (False, "false"), (1, "1"), ("x", "x")]
)
def test_to_str(value, expected):
    assert to_str(value) == expected


@pytest.mark.parametrize(
    ["charset", "expected"], [(None, "UTF-8"), ("", "UTF-8"), ("ascii", "ascii")]
)
def test_valid_charset(charset, expected):
    assert valid_charset(charset) == expected

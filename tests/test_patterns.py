import pytest

from castroutes.exceptions import ConfigurationError
from castroutes.routing.patterns import Param, compile_pattern, match_path, normalize_path


@pytest.mark.parametrize(
    "path,expected",
    [
        ("", "/"),
        ("/", "/"),
        ("browse", "/browse"),
        ("/browse/", "/browse"),
        ("/a/42/raw", "/a/42/raw"),
    ],
)
def test_normalize_path(path, expected):
    assert normalize_path(path) == expected


def test_static_pattern():
    pattern = compile_pattern("/browse")
    assert pattern.is_static
    assert pattern.param_names == ()
    assert pattern.match("/browse") == {}
    assert pattern.match("/browse/") == {}
    assert pattern.match("/browse/comedy") is None
    assert pattern.match("/browser") is None


def test_root_pattern():
    pattern = compile_pattern("/")
    assert pattern.match("/") == {}
    assert pattern.match("") == {}
    assert pattern.match("/about") is None


def test_named_segment_binds_one_segment():
    pattern = compile_pattern("/browse/:category")
    assert pattern.param_names == ("category",)
    assert pattern.match("/browse/comedy") == {"category": "comedy"}
    assert pattern.match("/browse") is None
    assert pattern.match("/browse/comedy/extra") is None


def test_multiple_segments():
    pattern = compile_pattern("/auth/:provider/callback")
    assert pattern.match("/auth/github/callback") == {"provider": "github"}
    assert pattern.match("/auth/github") is None


def test_prefixed_segment():
    pattern = compile_pattern("/~:nickname")
    assert pattern.parts == ("/~", Param("nickname"))
    assert pattern.match("/~bob") == {"nickname": "bob"}
    assert pattern.match("/bob") is None
    assert pattern.match("/~") is None
    assert pattern.match("/~bob/casts") is None


def test_glob_binds_remainder():
    pattern = compile_pattern("/files/*path")
    assert pattern.parts == ("/files/", Param("path", glob=True))
    assert pattern.match("/files/a/b/c.txt") == {"path": "a/b/c.txt"}
    assert pattern.match("/files") is None


def test_literals_are_escaped():
    pattern = compile_pattern("/a.json")
    assert pattern.match("/a.json") == {}
    assert pattern.match("/aXjson") is None


def test_pattern_source_is_normalized():
    assert compile_pattern("docs/:page/").source == "/docs/:page"


@pytest.mark.parametrize(
    "pattern",
    [
        "/a/:",
        "/files/*",
        "/a/:id/b/:id",
        "/files/*path/raw",
    ],
)
def test_invalid_patterns(pattern):
    with pytest.raises(ConfigurationError):
        compile_pattern(pattern)


def test_match_path():
    assert match_path("/a/42/raw", "/a/:id/raw") == {"id": "42"}
    assert match_path("/a/42", "/a/:id/raw") is None


def test_bound_values_are_decoded():
    assert compile_pattern("/~:nickname").match("/~zo%C3%AB") == {"nickname": "zoë"}
    assert compile_pattern("/docs/:page").match("/docs/a%2Fb") == {"page": "a/b"}
    assert compile_pattern("/files/*path").match("/files/a/b%20c.txt") == {"path": "a/b c.txt"}


def test_encoded_slash_stays_in_its_segment():
    assert compile_pattern("/docs/:page").match("/docs/a%2Fb/c") is None

"""Tests for replacement map construction."""

import pytest

from rewrite.errors import ParseError
from rewrite.replacements import build_replacements, isolation_segment

HOST = "goclone.example.com"

B_GO_MOD = (
    b"module example.com/b\n"
    b"\n"
    b"require (\n"
    b"\texample.com/a v1.0.0 // goclone:recursive\n"
    b"\tgolang.org/x/text v0.3.0\n"
    b")\n"
)


@pytest.mark.parametrize("path,expected", [
    ("_bt/example.com/b", "_bt"),
    ("_one/golang.org/x/text", "_one"),
    ("example.com/b", None),
    ("_bt", None),
    ("_bt/", None),
    ("example.com/_bt/b", None),
])
def test_isolation_segment(path, expected):
    assert isolation_segment(path) == expected


class TestBuildReplacements:
    """Tests for build_replacements."""

    def test_module_only(self):
        out = build_replacements("example.com/mod", "example.com/mod", b"module example.com/mod\n", HOST)
        assert out == {"example.com/mod": f"{HOST}/example.com/mod"}

    def test_recursive_without_isolation(self):
        out = build_replacements("example.com/b", "example.com/b", B_GO_MOD, HOST)
        assert out == {
            "example.com/b": f"{HOST}/example.com/b",
            "example.com/a": f"{HOST}/example.com/a",
        }

    def test_recursive_with_isolation(self):
        out = build_replacements("_bt/example.com/b", "example.com/b", B_GO_MOD, HOST)
        assert out == {
            "example.com/b": f"{HOST}/_bt/example.com/b",
            "example.com/a": f"{HOST}/_bt/example.com/a",
        }

    def test_isolation_segments_do_not_share(self):
        one = build_replacements("_one/example.com/b", "example.com/b", B_GO_MOD, HOST)
        two = build_replacements("_two/example.com/b", "example.com/b", B_GO_MOD, HOST)
        assert one["example.com/a"] == f"{HOST}/_one/example.com/a"
        assert two["example.com/a"] == f"{HOST}/_two/example.com/a"

    def test_vanity_path_differs_from_upstream(self):
        out = build_replacements("_x/golang.org/x/text", "golang.org/x/text", b"module golang.org/x/text\n", HOST)
        assert out == {"golang.org/x/text": f"{HOST}/_x/golang.org/x/text"}

    def test_malformed_go_mod(self):
        with pytest.raises(ParseError):
            build_replacements("example.com/b", "example.com/b", b"require (\n", HOST)

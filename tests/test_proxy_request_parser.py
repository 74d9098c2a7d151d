"""Tests for module proxy path parsing."""

import pytest

from proxy.errors import NotFound
from proxy.request_parser import RequestKind, RequestParser, classify, unescape_path

HOST = "goclone.example.com"


class TestRequestParser:
    """Tests for RequestParser.parse."""

    def setup_method(self):
        self.parser = RequestParser(HOST)

    def test_plain_module(self):
        parsed = self.parser.parse(f"/_mod/{HOST}/golang.org/x/text/@v/v0.3.0.zip")
        assert parsed.requested_path == "golang.org/x/text"
        assert parsed.upstream_path == "golang.org/x/text"
        assert parsed.rest == "v0.3.0.zip"
        assert parsed.kind == RequestKind.ZIP

    def test_isolation_segment(self):
        parsed = self.parser.parse(f"/_mod/{HOST}/_two/golang.org/x/text/@v/list")
        assert parsed.requested_path == "_two/golang.org/x/text"
        assert parsed.upstream_path == "golang.org/x/text"
        assert parsed.rest == "list"
        assert parsed.kind == RequestKind.LIST

    def test_reserved_prefix_rejected(self):
        with pytest.raises(NotFound):
            self.parser.parse(f"/_mod/{HOST}/_mod/golang.org/x/text/@v/list")

    def test_lone_isolation_segment_rejected(self):
        with pytest.raises(NotFound):
            self.parser.parse(f"/_mod/{HOST}/_x/@v/list")

    @pytest.mark.parametrize("path", [
        f"/_mod/{HOST}/golang.org/x/text",
        f"/_mod/{HOST}/golang.org/x/text/@v/",
        f"/_mod/{HOST}/@v/list",
        "/_mod/",
    ])
    def test_not_a_proxy_path(self, path):
        with pytest.raises(NotFound):
            self.parser.parse(path)

    def test_case_escaped_path(self):
        parsed = self.parser.parse(f"/_mod/{HOST}/github.com/!azure/sdk/@v/v1.0.0.mod")
        assert parsed.upstream_path == "github.com/!azure/sdk"
        assert parsed.upstream_module == "github.com/Azure/sdk"
        assert parsed.requested_module == "github.com/Azure/sdk"

    def test_invalid_escaping_rejected(self):
        with pytest.raises(NotFound):
            self.parser.parse(f"/_mod/{HOST}/github.com/Azure/sdk/@v/list")

    def test_raw_path_kept(self):
        path = f"/_mod/{HOST}/example.com/m/@v/v1.0.0.info"
        assert self.parser.parse(path).raw_path == path


@pytest.mark.parametrize("rest,kind", [
    ("list", RequestKind.LIST),
    ("v1.0.0.info", RequestKind.INFO),
    ("v1.0.0.mod", RequestKind.MOD),
    ("v1.0.0.zip", RequestKind.ZIP),
    ("v1.0.0.ziphash", RequestKind.OTHER),
])
def test_classify(rest, kind):
    assert classify(rest) == kind


def test_only_mod_and_zip_are_rewritten():
    assert [k for k in RequestKind if k.is_rewritten] == [RequestKind.MOD, RequestKind.ZIP]


@pytest.mark.parametrize("escaped,expected", [
    ("github.com/!burnt!sushi/toml", "github.com/BurntSushi/toml"),
    ("golang.org/x/text", "golang.org/x/text"),
])
def test_unescape_path(escaped, expected):
    assert unescape_path(escaped) == expected


@pytest.mark.parametrize("escaped", ["a/!", "a/!1", "a/B"])
def test_unescape_path_invalid(escaped):
    with pytest.raises(NotFound):
        unescape_path(escaped)

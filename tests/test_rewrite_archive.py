"""Tests for module zip repackaging."""

import io
import zipfile

import pytest

from rewrite.archive import extract_manifest, rewrite_archive
from rewrite.errors import ArchiveError, ParseError

GO_MOD = "module old/mod\n\nrequire old/mod/dep v1.0.0\n"
PKG_GO = 'package pkg\n\nimport (\n\t"fmt"\n\t"old/mod/pkg/internal"\n)\n'


class TestRewriteArchive:
    """Tests for rewrite_archive."""

    def test_names_and_contents(self, make_zip, unzip):
        data = make_zip([
            ("old/mod@v1.0.0/go.mod", GO_MOD),
            ("old/mod@v1.0.0/pkg/pkg.go", PKG_GO),
            ("old/mod@v1.0.0/LICENSE", "do what you want\nold/mod\n"),
        ])
        out = unzip(rewrite_archive(data, {"old/mod": "host/clone/old/mod"}))

        assert [name for name, _, _ in out] == [
            "host/clone/old/mod@v1.0.0/go.mod",
            "host/clone/old/mod@v1.0.0/pkg/pkg.go",
            "host/clone/old/mod@v1.0.0/LICENSE",
        ]
        assert out[0][1] == b"module host/clone/old/mod\n\nrequire host/clone/old/mod/dep v1.0.0\n"
        assert out[1][1] == PKG_GO.replace("old/mod/pkg", "host/clone/old/mod/pkg").encode()
        assert out[2][1] == b"do what you want\nold/mod\n"

    def test_compression_kept_per_member(self, make_zip, unzip):
        data = make_zip([
            ("old/mod@v1.0.0/go.mod", GO_MOD, zipfile.ZIP_STORED),
            ("old/mod@v1.0.0/pkg/pkg.go", PKG_GO, zipfile.ZIP_DEFLATED),
        ])
        out = unzip(rewrite_archive(data, {"old/mod": "new/mod"}))
        assert [ctype for _, _, ctype in out] == [zipfile.ZIP_STORED, zipfile.ZIP_DEFLATED]

    def test_timestamps_kept(self, make_zip):
        data = make_zip([("old/mod@v1.0.0/go.mod", GO_MOD)])
        out = rewrite_archive(data, {"old/mod": "new/mod"})
        with zipfile.ZipFile(io.BytesIO(out)) as zf:
            assert zf.infolist()[0].date_time == (2020, 1, 2, 3, 4, 6)

    def test_substring_paths_untouched(self, make_zip, unzip):
        data = make_zip([
            ("somethingelse/old/mod@v1.0.0/go.mod", "module somethingelse/old/mod\n"),
            ("somethingelse/old/mod@v1.0.0/a.go", 'package a\nimport "somethingelse/old/mod/b"\n'),
        ])
        out = unzip(rewrite_archive(data, {"old/mod": "new/mod"}))
        assert [(name, content) for name, content, _ in out] == [
            ("somethingelse/old/mod@v1.0.0/go.mod", b"module somethingelse/old/mod\n"),
            ("somethingelse/old/mod@v1.0.0/a.go", b'package a\nimport "somethingelse/old/mod/b"\n'),
        ]

    def test_nested_go_mod_rewritten(self, make_zip, unzip):
        data = make_zip([
            ("old/mod@v1.0.0/go.mod", GO_MOD),
            ("old/mod@v1.0.0/testdata/x/go.mod", "module old/mod/testdata/x\n"),
        ])
        out = unzip(rewrite_archive(data, {"old/mod": "new/mod"}))
        assert out[1] == (
            "new/mod@v1.0.0/testdata/x/go.mod",
            b"module new/mod/testdata/x\n",
            zipfile.ZIP_DEFLATED,
        )

    def test_duplicate_member_names_kept(self, make_zip, unzip):
        data = make_zip([
            ("old/mod@v1.0.0/a.txt", "one"),
            ("old/mod@v1.0.0/a.txt", "two"),
        ])
        out = unzip(rewrite_archive(data, {"old/mod": "new/mod"}))
        assert [(name, content) for name, content, _ in out] == [
            ("new/mod@v1.0.0/a.txt", b"one"),
            ("new/mod@v1.0.0/a.txt", b"two"),
        ]

    def test_empty_archive(self, make_zip, unzip):
        assert unzip(rewrite_archive(make_zip([]), {"old/mod": "new/mod"})) == []

    def test_malformed_zip(self):
        with pytest.raises(ArchiveError):
            rewrite_archive(b"this is not a zip", {"old/mod": "new/mod"})

    def test_malformed_go_source(self, make_zip):
        data = make_zip([("old/mod@v1.0.0/bad.go", "this is not go")])
        with pytest.raises(ParseError, match="bad.go"):
            rewrite_archive(data, {"old/mod": "new/mod"})

    def test_malformed_go_mod(self, make_zip):
        data = make_zip([("old/mod@v1.0.0/go.mod", "bogus directive\n")])
        with pytest.raises(ParseError):
            rewrite_archive(data, {"old/mod": "new/mod"})


class TestExtractManifest:
    """Tests for extract_manifest."""

    def test_first_go_mod(self, make_zip):
        data = make_zip([
            ("old/mod@v1.0.0/a.go", "package a\n"),
            ("old/mod@v1.0.0/go.mod", "module old/mod\n"),
            ("old/mod@v1.0.0/sub/go.mod", "module old/mod/sub\n"),
        ])
        assert extract_manifest(data) == b"module old/mod\n"

    def test_root_go_mod_preferred(self, make_zip):
        data = make_zip([
            ("old/mod@v1.0.0/testdata/x/go.mod", "module old/mod/testdata/x\n"),
            ("old/mod@v1.0.0/go.mod", "module old/mod\n"),
        ])
        assert extract_manifest(data) == b"module old/mod\n"

    def test_nested_go_mod_when_root_missing(self, make_zip):
        data = make_zip([
            ("old/mod@v1.0.0/a.go", "package a\n"),
            ("old/mod@v1.0.0/sub/go.mod", "module old/mod/sub\n"),
        ])
        assert extract_manifest(data) == b"module old/mod/sub\n"

    def test_missing(self, make_zip):
        data = make_zip([("old/mod@v1.0.0/a.go", "package a\n")])
        with pytest.raises(ArchiveError, match="go.mod not found"):
            extract_manifest(data)

    def test_malformed_zip(self):
        with pytest.raises(ArchiveError):
            extract_manifest(b"PK\x03\x04 truncated")

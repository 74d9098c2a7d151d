"""Tests for longest-prefix path substitution."""

from rewrite.paths import rewrite_file_name, rewrite_path


class TestRewritePath:
    """Tests for rewrite_path."""

    def test_exact_match(self):
        assert rewrite_path("old/mod", {"old/mod": "new/mod"}) == "new/mod"

    def test_subpackage(self):
        assert rewrite_path("old/mod/pkg/sub", {"old/mod": "new/mod"}) == "new/mod/pkg/sub"

    def test_requires_segment_boundary(self):
        """A key never matches inside a path segment."""
        assert rewrite_path("a/bc", {"a/b": "x"}) == "a/bc"
        assert rewrite_path("old/module", {"old/mod": "new/mod"}) == "old/module"

    def test_not_a_substring_match(self):
        assert rewrite_path("somethingelse/old/mod", {"old/mod": "new/mod"}) == "somethingelse/old/mod"

    def test_longest_key_wins(self):
        replacements = {"a": "x", "a/b": "y", "a/b/c": "z"}
        assert rewrite_path("a/b/c/d", replacements) == "z/d"
        assert rewrite_path("a/b/e", replacements) == "y/e"
        assert rewrite_path("a/q", replacements) == "x/q"

    def test_no_match_returns_input(self):
        assert rewrite_path("fmt", {"old/mod": "new/mod"}) == "fmt"
        assert rewrite_path("old/mod", {}) == "old/mod"

    def test_at_is_not_a_boundary(self):
        assert rewrite_path("old/mod@v1.0.0", {"old/mod": "new/mod"}) == "old/mod@v1.0.0"


class TestRewriteFileName:
    """Tests for rewrite_file_name."""

    def test_version_boundary(self):
        name = "old/mod@v1.0.0/pkg/pkg.go"
        assert rewrite_file_name(name, {"old/mod": "host/clone/old/mod"}) == (
            "host/clone/old/mod@v1.0.0/pkg/pkg.go"
        )

    def test_slash_boundary(self):
        assert rewrite_file_name("old/mod/go.mod", {"old/mod": "new/mod"}) == "new/mod/go.mod"

    def test_requires_boundary(self):
        assert rewrite_file_name("old/modx@v1.0.0/go.mod", {"old/mod": "new/mod"}) == (
            "old/modx@v1.0.0/go.mod"
        )

    def test_longest_key_wins(self):
        replacements = {"example.com/a": "h/a", "example.com/a/b": "h/b"}
        assert rewrite_file_name("example.com/a/b@v1.0.0/x.go", replacements) == "h/b@v1.0.0/x.go"

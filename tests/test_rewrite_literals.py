"""Tests for Go string literal helpers."""

import pytest

from rewrite.errors import ParseError
from rewrite.literals import auto_quote, must_quote, quote, unquote


class TestUnquote:
    """Tests for unquote."""

    def test_plain(self):
        assert unquote('"example.com/mod"') == "example.com/mod"

    def test_raw(self):
        assert unquote("`example.com/mod`") == "example.com/mod"

    def test_raw_drops_carriage_returns(self):
        assert unquote("`a\rb`") == "ab"

    def test_escapes(self):
        assert unquote(r'"a\tb\\c\"d"') == 'a\tb\\c"d'

    def test_numeric_escapes(self):
        assert unquote(r'"\x41\101é\U0001F600"') == "AAé\U0001F600"

    def test_utf8_bytes_from_hex_escapes(self):
        assert unquote(r'"\xc3\xa9"') == "é"

    @pytest.mark.parametrize("literal", [
        '"',
        '"abc',
        "`abc",
        r'"\q"',
        r'"\x4"',
        r'"\400"',
        r'"\ud800"',
        r'"\xff"',
        "'a'",
    ])
    def test_malformed(self, literal):
        with pytest.raises(ParseError):
            unquote(literal)


class TestQuote:
    """Tests for quote and auto_quote."""

    def test_quote(self):
        assert quote("a\"b\\c\n") == r'"a\"b\\c\n"'

    def test_quote_control_char(self):
        assert quote("a\x01") == r'"a\x01"'

    def test_quote_unicode_kept(self):
        assert quote("héllo") == '"héllo"'

    def test_quote_is_inverse_of_unquote(self):
        value = "weird path/with \"quotes\" and \ttabs"
        assert unquote(quote(value)) == value

    def test_must_quote(self):
        assert not must_quote("example.com/mod")
        assert must_quote("")
        assert must_quote("has space")
        assert must_quote("a//b")
        assert must_quote("a,b")

    def test_auto_quote(self):
        assert auto_quote("example.com/mod") == "example.com/mod"
        assert auto_quote("has space") == '"has space"'

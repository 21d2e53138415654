"""Tests for codesync.inflect - case style conversion."""

import pytest

from codesync.inflect import (
    CASE_STYLES,
    capitalize_acronyms,
    is_style,
    normalize_style,
    split_words,
    to_style,
)

# ---------------------------------------------------------------------------
# split_words()
# ---------------------------------------------------------------------------


class TestSplitWords:
    def test_camel_humps(self) -> None:
        assert split_words("fooBarBaz") == ["foo", "bar", "baz"]

    def test_separators_collapse(self) -> None:
        assert split_words("__foo--bar  baz__") == ["foo", "bar", "baz"]

    def test_acronym_is_one_word(self) -> None:
        assert split_words("parseXML") == ["parse", "xml"]

    def test_acronym_followed_by_word(self) -> None:
        assert split_words("HTTPServer") == ["http", "server"]

    def test_digit_then_upper(self) -> None:
        assert split_words("v2Api") == ["v2", "api"]

    def test_empty(self) -> None:
        assert split_words("") == []
        assert split_words("--__") == []


# ---------------------------------------------------------------------------
# to_style()
# ---------------------------------------------------------------------------


class TestToStyle:
    @pytest.mark.parametrize(
        "style,expected",
        [
            ("camel", "fooBarBaz"),
            ("pascal", "FooBarBaz"),
            ("snake", "foo_bar_baz"),
            ("screaming_snake", "FOO_BAR_BAZ"),
            ("kebab", "foo-bar-baz"),
            ("train", "Foo-Bar-Baz"),
        ],
    )
    def test_each_style(self, style: str, expected: str) -> None:
        assert to_style("foo bar baz", style) == expected

    def test_snake_suggestion(self) -> None:
        assert to_style("Foo_Bar", "snake") == "foo_bar"

    def test_from_camel(self) -> None:
        assert to_style("someLabelName", "kebab") == "some-label-name"

    @pytest.mark.parametrize("style", CASE_STYLES)
    def test_empty_input(self, style: str) -> None:
        assert to_style("", style) == ""

    def test_unknown_style(self) -> None:
        with pytest.raises(ValueError, match="Unknown case style"):
            to_style("foo", "sponge")

    @pytest.mark.parametrize("style", CASE_STYLES)
    @pytest.mark.parametrize(
        "text",
        [
            "foo bar",
            "fooBar",
            "HTTPServer",
            "XMLHttpRequest",
            "some_long-label name",
            "Foo_Bar",
            "already-kebab",
            "v2 api",
            "  --padded__  ",
            "a b c",
            "a b",
            "x_y_z",
            "a_http",
        ],
    )
    def test_output_is_in_its_own_style(self, text: str, style: str) -> None:
        assert is_style(to_style(text, style), style)

    @pytest.mark.parametrize(
        "text,style,expected",
        [
            ("a b c", "camel", "aBc"),
            ("a b", "pascal", "Ab"),
            ("x_y_z", "pascal", "Xyz"),
            ("get_a_value", "camel", "getAValue"),
        ],
    )
    def test_single_letter_words_settle(self, text: str, style: str, expected: str) -> None:
        assert to_style(text, style) == expected
        assert to_style(expected, style) == expected


# ---------------------------------------------------------------------------
# is_style()
# ---------------------------------------------------------------------------


class TestIsStyle:
    def test_snake(self) -> None:
        assert is_style("foo_bar", "snake")
        assert not is_style("Foo_Bar", "snake")
        assert not is_style("foo__bar", "snake")

    def test_kebab(self) -> None:
        assert is_style("foo-bar", "kebab")
        assert not is_style("foo_bar", "kebab")

    def test_camel_vs_pascal(self) -> None:
        assert is_style("fooBar", "camel")
        assert not is_style("FooBar", "camel")
        assert is_style("FooBar", "pascal")


# ---------------------------------------------------------------------------
# normalize_style()
# ---------------------------------------------------------------------------


class TestNormalizeStyle:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("snake", "snake"),
            ("snake_case", "snake"),
            ("SCREAMING_SNAKE_CASE", "screaming_snake"),
            ("kebab-case", "kebab"),
            ("PascalCase", "pascal"),
            ("camelCase", "camel"),
            ("Train-Case", "train"),
        ],
    )
    def test_aliases(self, name: str, expected: str) -> None:
        assert normalize_style(name) == expected

    @pytest.mark.parametrize("name", ["bogus", "case", ""])
    def test_unknown(self, name: str) -> None:
        with pytest.raises(ValueError):
            normalize_style(name)


# ---------------------------------------------------------------------------
# Acronyms
# ---------------------------------------------------------------------------


class TestAcronyms:
    def test_camel_acronym(self) -> None:
        assert to_style("parse_http_value", "camel", ["HTTP"]) == "parseHTTPValue"

    def test_acronym_label_is_in_style(self) -> None:
        assert is_style("parseHTTPValue", "camel", ["HTTP"])
        assert not is_style("parseHTTPValue", "camel")

    def test_pascal_trailing_acronym(self) -> None:
        assert to_style("user_id", "pascal", ["ID"]) == "UserID"

    def test_blind_rewrite_hits_inside_words(self) -> None:
        # "id" inside "valid" is rewritten too
        assert to_style("valid_user", "camel", ["ID"]) == "valIDUser"

    def test_blind_rewrite_leading_word(self) -> None:
        assert to_style("id_value", "camel", ["ID"]) == "IDValue"

    def test_word_aware_skips_partial_words(self) -> None:
        assert to_style("valid_user", "camel", ["ID"], word_aware=True) == "validUser"

    def test_word_aware_whole_word(self) -> None:
        assert to_style("user_id", "pascal", ["ID"], word_aware=True) == "UserID"

    def test_word_aware_leading_word_stays_lower(self) -> None:
        assert to_style("id_value", "camel", ["ID"], word_aware=True) == "idValue"

    def test_snake_ignores_acronyms(self) -> None:
        assert to_style("userID", "snake", ["ID"]) == "user_id"

    def test_capitalize_acronyms_case_insensitive(self) -> None:
        assert capitalize_acronyms("getUrlAndHttp", ["url", "HTTP"]) == "getURLAndHTTP"

    def test_empty_acronym_ignored(self) -> None:
        assert to_style("foo_bar", "camel", [""]) == "fooBar"

    def test_word_aware_output_is_in_style(self) -> None:
        out = to_style("a_http", "pascal", ["HTTP"], word_aware=True)
        assert is_style(out, "pascal", ["HTTP"], word_aware=True)

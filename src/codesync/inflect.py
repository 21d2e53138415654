"""inflect.py - Case style conversion and detection for annotation labels.

Supported styles (canonical names)::

    camel            fooBarBaz
    pascal           FooBarBaz
    snake            foo_bar_baz
    screaming_snake  FOO_BAR_BAZ
    kebab            foo-bar-baz
    train            Foo-Bar-Baz

All styles share one word splitter (:func:`split_words`), so a label is
"in style S" exactly when converting it to S leaves it unchanged.

Acronyms only affect camel and Pascal output.  By default they are applied
as a case-insensitive substring rewrite over the finished string, which also
hits matches that straddle word boundaries (``["ID"]`` turns ``"valid"`` into
``"valID"``).  Pass ``word_aware=True`` to uppercase whole words only.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

CASE_STYLES = ("camel", "pascal", "snake", "screaming_snake", "kebab", "train")

# Compact spellings (lowercase, letters only, "case" suffix removed) -> canonical
_STYLE_ALIASES = {
    "camel": "camel",
    "lowercamel": "camel",
    "pascal": "pascal",
    "uppercamel": "pascal",
    "snake": "snake",
    "screamingsnake": "screaming_snake",
    "uppersnake": "screaming_snake",
    "constant": "screaming_snake",
    "kebab": "kebab",
    "train": "train",
}

# Human-readable style names for diagnostics.
STYLE_EXAMPLES = {
    "camel": "camelCase",
    "pascal": "PascalCase",
    "snake": "snake_case",
    "screaming_snake": "SCREAMING_SNAKE_CASE",
    "kebab": "kebab-case",
    "train": "Train-Case",
}

_SEPARATORS = {
    "snake": "_",
    "screaming_snake": "_",
    "kebab": "-",
    "train": "-",
}


def normalize_style(name: str) -> str:
    """Map a user-supplied style name to its canonical form.

    Accepts ``"snake"``, ``"snake_case"``, ``"PascalCase"``,
    ``"SCREAMING_SNAKE_CASE"``, ``"kebab-case"`` and similar spellings.
    Raises ``ValueError`` for anything unrecognised.
    """
    key = re.sub(r"[^a-z]", "", name.lower())
    if key.endswith("case") and key != "case":
        key = key[: -len("case")]
    try:
        return _STYLE_ALIASES[key]
    except KeyError:
        raise ValueError(
            f"Unknown case style: {name!r} (expected one of {', '.join(CASE_STYLES)})"
        ) from None


def split_words(text: str) -> list[str]:
    """Split *text* into lowercased words.

    Non-alphanumeric characters separate words and are dropped; a lowercase
    letter or digit followed by an uppercase letter also starts a new word.
    A run of capitals (an acronym) stays inside a single word, except that
    its last capital opens the next word when a lowercase letter follows
    (``"HTTPServer"`` -> ``["http", "server"]``).
    """
    words: list[str] = []
    current: list[str] = []
    prev = ""
    for i, ch in enumerate(text):
        if not ch.isalnum():
            if current:
                words.append("".join(current))
                current = []
            prev = ""
            continue
        if current and ch.isupper():
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if prev.islower() or prev.isdigit() or (prev.isupper() and nxt.islower()):
                words.append("".join(current))
                current = []
        current.append(ch)
        prev = ch
    if current:
        words.append("".join(current))
    return [w.lower() for w in words]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def capitalize_acronyms(text: str, acronyms: Iterable[str]) -> str:
    """Uppercase every case-insensitive occurrence of each acronym in *text*."""
    for acronym in sorted(set(acronyms)):
        if not acronym:
            continue
        text = re.sub(
            re.escape(acronym), lambda m: m.group(0).upper(), text, flags=re.IGNORECASE
        )
    return text


def _join_camel(words: list[str], style: str, acronyms: list[str], word_aware: bool) -> str:
    if word_aware and acronyms:
        wanted = {a.lower() for a in acronyms}
        cased = [w.upper() if w in wanted else _capitalize(w) for w in words]
    else:
        cased = [_capitalize(w) for w in words]

    if style == "camel" and words:
        # The leading word stays lowercase, acronym or not
        cased[0] = words[0]
    result = "".join(cased)

    if acronyms and not word_aware:
        result = capitalize_acronyms(result, acronyms)
    return result


def to_style(
    text: str,
    style: str,
    acronyms: Iterable[str] = (),
    word_aware: bool = False,
) -> str:
    """Convert *text* to *style*.

    Every input has an output; empty (or all-separator) input gives ``""``.
    The output is always in *style*: converting it again changes nothing.
    """
    style = normalize_style(style)
    words = split_words(text)

    if style in _SEPARATORS:
        sep = _SEPARATORS[style]
        if style == "screaming_snake":
            words = [w.upper() for w in words]
        elif style == "train":
            words = [_capitalize(w) for w in words]
        return sep.join(words)

    acronyms = [a for a in acronyms if a]
    result = _join_camel(words, style, acronyms, word_aware)
    # Adjacent one-letter words ("a b c" -> "aBC") merge into a capital run
    # that splits back as fewer words; rebuilding from that split is stable.
    return _join_camel(split_words(result), style, acronyms, word_aware)


def is_style(
    text: str,
    style: str,
    acronyms: Iterable[str] = (),
    word_aware: bool = False,
) -> bool:
    """True if *text* is already in *style*."""
    return to_style(text, style, acronyms, word_aware) == text

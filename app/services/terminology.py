"""Replace studio-equipment nouns with descriptive light language.

Image models tend to paint the equipment itself when a prompt names it
("a softbox" becomes a softbox in frame). Every prompt sent for synthesis is
passed through ``substitute_equipment_terms`` first.
"""

from __future__ import annotations

import re

EQUIPMENT_PARAPHRASES: dict[str, str] = {
    "spotlight": "a focused beam of light",
    "softbox": "a gentle diffused glow",
    "key light": "the primary light source",
    "back light": "a luminous rim from behind",
    "fill light": "a soft secondary light that lifts the shadows",
    "rim light": "a delicate edge of light tracing the outline",
    "hair light": "a soft glow catching the hair from above",
    "strip light": "a long ribbon of light",
    "beauty dish": "a sculpted, flattering glow",
    "reflector": "softly bounced light",
    "snoot": "a tightly focused pool of light",
    "bare bulb": "crisp unfiltered light",
    "strobe": "a crisp burst of light",
    "scrim": "a veil of diffused light",
}

_ARTICLE = r"(?:(?:a|an|the)\s+)?"


def _term_pattern(term: str) -> str:
    # "key light" also matches "key-light" and "keylight"
    body = r"[\s-]?".join(re.escape(word) for word in term.split())
    return rf"{body}(?:es|s)?"


_TERMS_LONGEST_FIRST = sorted(EQUIPMENT_PARAPHRASES, key=len, reverse=True)
_TERM_RE = re.compile(
    rf"\b{_ARTICLE}(?P<term>{'|'.join(_term_pattern(t) for t in _TERMS_LONGEST_FIRST)})\b",
    re.IGNORECASE,
)
_LOOKUP: dict[str, str] = {
    re.sub(r"[\s-]", "", term): paraphrase for term, paraphrase in EQUIPMENT_PARAPHRASES.items()
}


def _canonical(matched: str) -> str:
    key = re.sub(r"[\s-]", "", matched.lower())
    if key in _LOOKUP:
        return key
    for suffix in ("es", "s"):
        if key.endswith(suffix) and key[: -len(suffix)] in _LOOKUP:
            return key[: -len(suffix)]
    return key


def _replace(match: re.Match[str]) -> str:
    paraphrase = _LOOKUP[_canonical(match.group("term"))]
    if match.group(0)[:1].isupper():
        return paraphrase[:1].upper() + paraphrase[1:]
    return paraphrase


def substitute_equipment_terms(text: str) -> str:
    """Return text with every equipment noun replaced by its paraphrase."""
    return _TERM_RE.sub(_replace, text)


def find_equipment_terms(text: str) -> list[str]:
    """Return the equipment nouns still present in text, lowercased."""
    return [match.group("term").lower() for match in _TERM_RE.finditer(text)]


def contains_equipment_terms(text: str) -> bool:
    return _TERM_RE.search(text) is not None

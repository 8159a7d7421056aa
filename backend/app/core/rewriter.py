"""Protagonist rewriting: swap a story's name and pronoun family in one pass.

All replacement spans are found against the source text by a single
alternation pattern, so a word produced by one rule is never matched again by
another rule (``she`` -> ``he`` followed by ``he`` -> ``they`` cannot happen).

Rule precedence, earliest wins when several rules match at the same offset:

1. the original name, exact case
2. the original name, lowercase
3. subject, object, possessive adjective, possessive, reflexive pronoun

Name rules are case-sensitive. Pronoun rules match case-insensitively and
capitalize the replacement when the matched word starts with an uppercase
letter.

Some source words stand for two forms (``her``: object or possessive
adjective; ``his``: possessive adjective or possessive). When the target family
spells those forms differently, the word that follows decides: a content word
means possessive adjective (``her hands``), anything else means object or
possessive (``followed her.``, ``was his.``).
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache

from backend.app.core.pronouns import PronounFamily, get_pronoun_family

logger = logging.getLogger(__name__)

# Word edges that also hold for names which start or end with punctuation.
_WORD_START = r"(?<!\w)"
_WORD_END = r"(?!\w)"

# Next word on the same line or the wrapped line after it (a blank line ends
# the sentence), past any blockquote prefix and emphasis or code markers.
_NEXT_WORD_RE = re.compile(r"(?:[ \t]+|[ \t]*\n[ \t]*(?:>[ \t]*)?)[*_`]*([A-Za-z]+)")

# Words that can follow an object pronoun ("gave her a map", "took his away").
_FUNCTION_WORDS = frozenset(
    """
    a an the this that these those
    to and or but nor so yet if when while because before after until than as
    with at in on into onto up down out off over under for from of by about
    around through across along behind toward towards past
    again back away too now then there here also all both some any
    is was were be been being are am has had have do did does will would
    can could should not never
    """.split()
)


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def match_case(matched: str, replacement: str) -> str:
    """Capitalize ``replacement`` when ``matched`` starts with an uppercase letter."""
    if matched[:1].isupper():
        return capitalize_first(replacement)
    return replacement


def pronoun_substitutions(original: PronounFamily, target: PronounFamily) -> dict[str, dict[str, str]]:
    """Map each source pronoun word to ``{form: target word}``, forms in precedence order."""
    table: dict[str, dict[str, str]] = {}
    for form, word in original.forms():
        table.setdefault(word, {})[form] = target.form(form)
    return table


def _followed_by_content_word(text: str, end: int) -> bool:
    m = _NEXT_WORD_RE.match(text, end)
    return bool(m) and m.group(1).lower() not in _FUNCTION_WORDS


def choose_form(candidates: dict[str, str], text: str, end: int) -> str:
    """Target word for a source pronoun ending at ``text[end]``."""
    targets = list(candidates.values())
    if len(set(targets)) == 1:
        return targets[0]
    if "possessive_adjective" in candidates and _followed_by_content_word(text, end):
        return candidates["possessive_adjective"]
    for form in ("object", "possessive"):
        if form in candidates:
            return candidates[form]
    return targets[0]


@lru_cache(maxsize=64)
def _compile(original_name: str, rename: bool, pronoun_words: tuple[str, ...]) -> re.Pattern[str] | None:
    alternatives: list[str] = []
    if rename:
        alternatives.append(f"(?P<name>{re.escape(original_name)})")
        alternatives.append(f"(?P<lname>{re.escape(original_name.lower())})")
    if pronoun_words:
        # Longest first so "himself" is preferred over "him" at the same offset.
        words = sorted(pronoun_words, key=lambda w: (-len(w), w))
        joined = "|".join(re.escape(w) for w in words)
        alternatives.append(f"(?i:(?P<pronoun>{joined}))")
    if not alternatives:
        return None
    return re.compile(f"{_WORD_START}(?:{'|'.join(alternatives)}){_WORD_END}")


def rewrite_pronouns(
    text: str,
    original_name: str,
    target_name: str,
    original_family: PronounFamily | str,
    target_family: PronounFamily | str,
) -> str:
    """Return ``text`` with the protagonist renamed and their pronouns swapped.

    Families may be given as :class:`PronounFamily` or as family ids; unknown
    ids fall back to the default family.
    """
    source = original_family if isinstance(original_family, PronounFamily) else get_pronoun_family(original_family)
    target = target_family if isinstance(target_family, PronounFamily) else get_pronoun_family(target_family)

    original_name = (original_name or "").strip()
    target_name = (target_name or "").strip() or original_name
    rename = bool(original_name) and target_name != original_name

    substitutions = pronoun_substitutions(source, target) if source != target else {}
    pattern = _compile(original_name, rename, tuple(sorted(substitutions)))
    if pattern is None:
        return text

    def _replace(match: re.Match[str]) -> str:
        # Named groups only exist for the rules that are active.
        groups = match.groupdict()
        word = groups.get("pronoun")
        if word is not None:
            replacement = choose_form(substitutions[word.lower()], match.string, match.end())
            return match_case(word, replacement)
        if groups.get("name") is not None:
            return target_name
        return target_name.lower()

    result = pattern.sub(_replace, text)
    logger.debug(
        "Rewrote protagonist %r -> %r (%s -> %s)",
        original_name,
        target_name,
        source.key,
        target.key,
    )
    return result

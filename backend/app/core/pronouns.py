"""Pronoun families for story protagonists."""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PRONOUN_FAMILY = "they"

# Precedence order used by the rewriter when a word belongs to several forms.
PRONOUN_FORMS: tuple[str, ...] = (
    "subject",
    "object",
    "possessive_adjective",
    "possessive",
    "reflexive",
)


@dataclass(frozen=True)
class PronounFamily:
    """The five grammatical forms of one pronoun choice (all lowercase)."""

    key: str
    subject: str
    object: str
    possessive_adjective: str
    possessive: str
    reflexive: str

    def form(self, name: str) -> str:
        return getattr(self, name)

    def forms(self) -> tuple[tuple[str, str], ...]:
        """(form_name, word) pairs in precedence order."""
        return tuple((name, self.form(name)) for name in PRONOUN_FORMS)

    @property
    def label(self) -> str:
        """Short label such as ``she/her`` for banners and catalogs."""
        return f"{self.subject}/{self.object}"


PRONOUN_FAMILIES: dict[str, PronounFamily] = {
    "he": PronounFamily(
        key="he",
        subject="he",
        object="him",
        possessive_adjective="his",
        possessive="his",
        reflexive="himself",
    ),
    "she": PronounFamily(
        key="she",
        subject="she",
        object="her",
        possessive_adjective="her",
        possessive="hers",
        reflexive="herself",
    ),
    "they": PronounFamily(
        key="they",
        subject="they",
        object="them",
        possessive_adjective="their",
        possessive="theirs",
        reflexive="themselves",
    ),
}


def normalize_pronoun_key(value: str | None) -> str:
    return str(value or "").strip().lower()


def is_valid_pronoun(key: str | None) -> bool:
    return normalize_pronoun_key(key) in PRONOUN_FAMILIES


def valid_pronoun_keys() -> list[str]:
    """Family ids in a stable, display-friendly order."""
    return sorted(PRONOUN_FAMILIES)


def get_pronoun_family(key: str | None, default: str = DEFAULT_PRONOUN_FAMILY) -> PronounFamily:
    """Return the family for ``key``; unknown or empty keys fall back to ``default``."""
    family = PRONOUN_FAMILIES.get(normalize_pronoun_key(key))
    if family is not None:
        return family
    return PRONOUN_FAMILIES[default]

"""
Naming conventions used to guess a referenced table from a column name or a
polymorphic type tag.

The default algorithm follows the Rails-style conventions these schemas were
usually generated with:

- `order_id` -> strip the foreign key suffix -> `order` -> pluralize -> `orders`
- `LineItem` -> underscore -> `line_item` -> singularize -> pluralize -> `line_items`

Only the last word of an underscored name is inflected. The guess is a
heuristic: callers only use it when the derived table actually exists, and can
always supply an explicit mapping instead.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

UNCOUNTABLE = frozenset(
    {
        "equipment",
        "information",
        "rice",
        "money",
        "species",
        "series",
        "fish",
        "sheep",
        "jeans",
        "police",
        "news",
        "metadata",
    }
)

IRREGULAR = {
    "person": "people",
    "man": "men",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
    "zombie": "zombies",
}

# First match wins.
PLURAL_RULES: list[tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"^(oxen)$", r"\1"),
    (r"^(ox)$", r"\1en"),
    (r"^(m|l)ice$", r"\1ice"),
    (r"^(m|l)ouse$", r"\1ice"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive)$", r"\1s"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])a$", r"\1a"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat)o$", r"\1oes"),
    (r"(bu)s$", r"\1ses"),
    (r"(alias|status)$", r"\1es"),
    (r"(octop|vir)i$", r"\1i"),
    (r"(octop|vir)us$", r"\1i"),
    (r"^(ax|test)is$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
]

SINGULAR_RULES: list[tuple[str, str]] = [
    (r"(database)s$", r"\1"),
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"^(ox)en", r"\1"),
    (r"(alias|status)(es)?$", r"\1"),
    (r"(octop|vir)(us|i)$", r"\1us"),
    (r"^(a)x[ie]s$", r"\1xis"),
    (r"(cris|test)(is|es)$", r"\1is"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(bus)(es)?$", r"\1"),
    (r"^(m|l)ice$", r"\1ouse"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(s)eries$", r"\1eries"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"(tive)s$", r"\1"),
    (r"(hive)s$", r"\1"),
    (r"([^f])ves$", r"\1fe"),
    (r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)(sis|ses)$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"(ss)$", r"\1"),
    (r"s$", ""),
]


def underscore(name: str) -> str:
    """`LineItem` -> `line_item`, `Admin::User` -> `admin_user`."""
    word = re.sub(r"::|[.\-/\s]+", "_", name.strip())
    word = re.sub(r"([A-Z\d]+)([A-Z][a-z])", r"\1_\2", word)
    word = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", word)
    return word.lower()


def _irregular_match(last: str, forms: Iterable[str]) -> str | None:
    """Longest irregular form that `last` ends with (`salesperson` -> `person`)."""
    lowered = last.lower()
    for form in sorted(forms, key=len, reverse=True):
        if lowered.endswith(form):
            return form
    return None


def _inflect(
    word: str, rules: list[tuple[str, str]], irregular: dict[str, str]
) -> str:
    head, sep, last = word.rpartition("_")
    if not last or last.lower() in UNCOUNTABLE:
        return word
    form = _irregular_match(last, irregular)
    if form is not None:
        return head + sep + last[: len(last) - len(form)] + irregular[form]
    for pattern, replacement in rules:
        if re.search(pattern, last, flags=re.IGNORECASE):
            return head + sep + re.sub(
                pattern, replacement, last, count=1, flags=re.IGNORECASE
            )
    return word


def pluralize(word: str) -> str:
    if _irregular_match(word.rpartition("_")[2], IRREGULAR.values()):
        return word
    return _inflect(word, PLURAL_RULES, IRREGULAR)


def singularize(word: str) -> str:
    if _irregular_match(word.rpartition("_")[2], IRREGULAR):
        return word
    singular_irregular = {v: k for k, v in IRREGULAR.items()}
    return _inflect(word, SINGULAR_RULES, singular_irregular)


def strip_suffix(name: str, suffix: str) -> str:
    if suffix and name.endswith(suffix) and len(name) > len(suffix):
        return name[: -len(suffix)]
    return name


@dataclass(frozen=True)
class TableNamingConvention:
    """Derive candidate table names. Both hooks can be swapped independently."""

    foreign_key_suffix: str = "_id"
    pluralizer: Callable[[str], str] = pluralize
    singularizer: Callable[[str], str] = singularize

    def table_for_foreign_key(self, column: str) -> str:
        return self.pluralizer(strip_suffix(column, self.foreign_key_suffix))

    def table_for_type(self, type_name: str) -> str:
        return self.pluralizer(self.singularizer(underscore(type_name)))

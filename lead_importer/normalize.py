"""String normalisation primitives for header matching, lead text and phones."""
from __future__ import annotations

import logging
import re
import unicodedata
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional

LOGGER = logging.getLogger(__name__)

REPLACEMENT_CHARACTER = "\ufffd"

_PORTUGUESE_CHARACTERS = "áàâãäéèêëíìîïóòôõöúùûüçñÁÀÂÃÄÉÈÊËÍÌÎÏÓÒÔÕÖÚÙÛÜÇÑºª°"
_TYPOGRAPHIC_PUNCTUATION = "–—‘’“”•…"
# Codecs that UTF-8 bytes are commonly mis-decoded with by spreadsheet tools.
_CORRUPTING_CODECS = ("mac_roman", "cp1252", "latin-1")

_UNSAFE_TEXT = re.compile(r"[^\w\s,.;:\-/@()+&'#]")
_UNSAFE_ADDRESS = re.compile(r"[^\w\s,.\-/]")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGITS = re.compile(r"\D")


def build_default_mojibake_table() -> Dict[str, str]:
    """Return the corrupted-sequence -> character table for Portuguese text.

    Each accented letter and typographic punctuation mark is encoded as UTF-8
    and decoded with every codec in ``_CORRUPTING_CODECS``; the resulting
    garbled sequence (``"S√£o"``, ``"SÃ£o"``) maps back to the original.
    """

    table: Dict[str, str] = {}
    for char in _PORTUGUESE_CHARACTERS + _TYPOGRAPHIC_PUNCTUATION:
        encoded = char.encode("utf-8")
        for codec in _CORRUPTING_CODECS:
            try:
                corrupted = encoded.decode(codec)
            except UnicodeDecodeError:
                continue
            if corrupted != char:
                table.setdefault(corrupted, char)
    return order_mojibake_table(table)


def order_mojibake_table(table: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of ``table`` with the longest corrupted sequences first."""

    return {corrupted: table[corrupted] for corrupted in sorted(table, key=len, reverse=True)}


DEFAULT_MOJIBAKE_TABLE: Mapping[str, str] = build_default_mojibake_table()


def repair_mojibake(value: str, table: Optional[Mapping[str, str]] = None) -> str:
    """Replace known corrupted sequences in ``value``.

    Entries are applied in table order. Tables from
    :func:`order_mojibake_table` list longer sequences first so that a
    three-byte punctuation mark is never partially rewritten by a two-byte
    entry.
    """

    if not value:
        return ""
    table = DEFAULT_MOJIBAKE_TABLE if table is None else table
    text = value
    for corrupted, fixed in table.items():
        if corrupted in text:
            text = text.replace(corrupted, fixed)
    return text


def normalize_text(value: Optional[str], table: Optional[Mapping[str, str]] = None) -> str:
    """Return a readable version of a lead field value.

    Known mojibake is repaired first. If replacement characters survive, the
    value is reduced to word characters and basic punctuation with collapsed
    whitespace: a degraded but readable string beats a visibly broken one.
    """

    if value is None:
        return ""
    text = repair_mojibake(str(value), table)
    if REPLACEMENT_CHARACTER in text:
        LOGGER.debug("Stripping unrecoverable characters from %r", text)
        text = _UNSAFE_TEXT.sub(" ", text.replace(REPLACEMENT_CHARACTER, " "))
        text = _WHITESPACE.sub(" ", text)
    return text.strip()


def clean_address(value: Optional[str], table: Optional[Mapping[str, str]] = None) -> str:
    text = normalize_text(value, table)
    if not text:
        return ""
    return _WHITESPACE.sub(" ", _UNSAFE_ADDRESS.sub(" ", text)).strip()


def strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_key(value: object, table: Optional[Mapping[str, str]] = None) -> str:
    """Case-fold a header or alias for comparison: ``" Endereço "`` -> ``"endereco"``."""

    if value is None:
        return ""
    return strip_accents(repair_mojibake(str(value), table).lower()).strip()


def _expand_scientific(value: str) -> str:
    """Render ``"5.499114275E+12"`` as ``"5499114275000"``.

    Spreadsheets display long digit strings in scientific notation and CSV
    exports keep that rendering.
    """

    candidate = value.strip().replace(",", ".")
    try:
        number = Decimal(candidate)
    except InvalidOperation:
        return value
    if not number.is_finite():
        return value
    return format(number.to_integral_value(), "f")


def format_phone_number(value: Optional[str], *, country_code: str = "55", min_digits: int = 10) -> str:
    """Return a digits-only, country-code-prefixed phone for WhatsApp JIDs.

    An empty string is returned when the input holds no digits. Numbers
    shorter than ``min_digits`` are logged as possibly invalid but still
    returned; the caller decides whether to keep them.
    """

    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""

    if "e+" in text.lower():
        text = _expand_scientific(text)

    digits = _NON_DIGITS.sub("", text)
    if digits.startswith("0"):
        digits = digits[1:]
    if not digits:
        return ""

    if not digits.startswith(country_code) and len(digits) >= min_digits:
        digits = f"{country_code}{digits}"

    if len(digits) < min_digits:
        LOGGER.warning("Phone %r normalised to %r is possibly invalid (%s digits)", value, digits, len(digits))
    return digits


__all__ = [
    "DEFAULT_MOJIBAKE_TABLE",
    "REPLACEMENT_CHARACTER",
    "build_default_mojibake_table",
    "clean_address",
    "format_phone_number",
    "normalize_key",
    "normalize_text",
    "order_mojibake_table",
    "repair_mojibake",
    "strip_accents",
]

"""Field separator detection for delimited lead files."""
from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)

COMMA = ","
SEMICOLON = ";"


def detect_separator(content: str) -> str:
    """Return ``";"`` or ``","`` for the delimited text in ``content``.

    Only the first data line is inspected; header rows are often sparser than
    the data below them.
    """

    lines = content.splitlines()
    if len(lines) < 2:
        return COMMA

    sample = lines[1]
    if SEMICOLON in sample and (
        COMMA not in sample or len(sample.split(SEMICOLON)) > len(sample.split(COMMA))
    ):
        LOGGER.debug("Detected ';' as the field separator")
        return SEMICOLON

    LOGGER.debug("Using ',' as the field separator")
    return COMMA


__all__ = ["COMMA", "SEMICOLON", "detect_separator"]

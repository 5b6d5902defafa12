"""Extraction of the embedded follow-up suggestion list from completion text."""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

# Single line, non-greedy: the first closing bracket ends the list
SUGGESTIONS_PATTERN = re.compile(r"SUGGESTIONS:\s*\[(.*?)\]")

QUOTE_CHARS = ("\"", "'")


@dataclass(frozen=True)
class ParsedResponse:
    """
    Display content plus extracted suggestions.

    suggestions is None when nothing was extracted (marker absent or its
    payload malformed); an empty list means the marker carried no items.
    """
    content: str
    suggestions: Optional[List[str]]

    @property
    def has_suggestions(self) -> bool:
        return self.suggestions is not None


class SuggestionParseError(ValueError):
    """Raised internally when the bracketed payload has unbalanced quoting."""


def _split_items(payload: str) -> List[str]:
    """
    Split a payload on commas that sit outside quotes.

    A quote only opens when it is the first non-space character of an item,
    so apostrophes inside bare items are literal. Once a quoted item closes,
    nothing but whitespace may follow it before the next comma.

    Raises:
        SuggestionParseError: If a quote is never closed or text trails a closed quote
    """
    raw_items = []
    current = []
    quote = None
    at_start = True
    closed = False
    for ch in payload:
        if quote is not None:
            current.append(ch)
            if ch == quote:
                quote = None
                closed = True
        elif ch == ",":
            raw_items.append("".join(current))
            current = []
            at_start = True
            closed = False
        elif ch.isspace():
            current.append(ch)
        elif closed:
            raise SuggestionParseError(f"Text after closing quote in: {''.join(current) + ch!r}")
        else:
            current.append(ch)
            if at_start and ch in QUOTE_CHARS:
                quote = ch
            at_start = False

    if quote is not None:
        raise SuggestionParseError(f"Unclosed quote in suggestion item: {''.join(current)!r}")
    raw_items.append("".join(current))
    return raw_items


def _parse_payload(payload: str) -> List[str]:
    """Split a bracketed payload into trimmed, unquoted, non-empty items."""
    items = []
    for raw_item in _split_items(payload):
        item = raw_item.strip()
        if not item:
            continue

        starts = item[0] in QUOTE_CHARS
        ends = item[-1] in QUOTE_CHARS
        if starts or ends:
            if len(item) < 2 or not (starts and ends) or item[0] != item[-1]:
                raise SuggestionParseError(f"Unbalanced quoting in suggestion item: {item!r}")
            item = item[1:-1].strip()

        if item:
            items.append(item)
    return items


def parse_response(raw_text: str) -> ParsedResponse:
    """
    Strip the first SUGGESTIONS marker and return its items.

    Only the first marker is honored; any later marker text is left in the
    content unchanged. A malformed payload returns the raw text untouched.

    Args:
        raw_text: Completion text as returned by the endpoint

    Returns:
        ParsedResponse with display content and suggestions (or None)
    """
    match = SUGGESTIONS_PATTERN.search(raw_text)
    if match is None:
        return ParsedResponse(content=raw_text, suggestions=None)

    try:
        suggestions = _parse_payload(match.group(1))
    except SuggestionParseError as e:
        logger.warning(f"Could not parse suggestions, continuing without them: {e}")
        return ParsedResponse(content=raw_text, suggestions=None)

    content = (raw_text[:match.start()] + raw_text[match.end():]).strip()
    return ParsedResponse(content=content, suggestions=suggestions)

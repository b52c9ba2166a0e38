"""
Response Sanitizer

Recovers a structured object from arbitrary AI backend text. Backends wrap
JSON differently (raw, fenced, prefixed with prose) and high-temperature
generation often emits syntactically broken but recoverable JSON, so
parsing degrades through a fixed chain of strategies:

1. DIRECT: parse the whole response
2. FENCE_STRIPPED: parse the body of a ``` fenced block
3. BRACE_EXTRACTED: parse the outermost {...} span (or [...] when an
   array is acceptable)
4. REPAIRED: escape bare newlines inside strings, drop trailing commas,
   then parse the brace span (or the fence-stripped text)
5. FALLBACK: give up and return the empty envelope

Content problems never raise. The caller learns about a FALLBACK through
ParsedResponse.strategy.

Usage:
    from content_processor.services.processing.sanitizers import sanitize_response

    envelope = sanitize_response(text)
    envelope["theory"]  # always a list
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import ParseStrategy
from content_processor.models.processing import NO_SUGGESTION

logger = logging.getLogger(__name__)

ENVELOPE_LIST_KEYS = ("theory", "questions", "tasks")

# Body of a fenced block; an unterminated fence (truncated output) runs to the end
_FENCE_RE = re.compile(r"```[ \t]*[A-Za-z0-9_-]*[ \t]*\r?\n?(.*?)(?:```|\Z)", re.DOTALL)

_STRING_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


@dataclass
class ParsedResponse:
    """
    Outcome of parse_response().

    Attributes:
        data: Parsed JSON object, or None on FALLBACK
        strategy: Which step of the chain produced data
    """

    data: Optional[dict[str, Any]]
    strategy: ParseStrategy

    @property
    def is_fallback(self) -> bool:
        return self.strategy == ParseStrategy.FALLBACK


def empty_envelope() -> dict[str, Any]:
    """The minimal valid envelope returned for irrecoverable input."""
    return {
        "logicalBlockInfo": {"suggestedEndLine": NO_SUGGESTION},
        "theory": [],
        "questions": [],
        "tasks": [],
    }


def strip_fence(text: str) -> Optional[str]:
    """Body of the first fenced code block, or None if there is no fence."""
    match = _FENCE_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def _outer_span(text: str, open_char: str, close_char: str) -> Optional[str]:
    start = text.find(open_char)
    end = text.rfind(close_char)
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def repair_json(text: str) -> str:
    """
    Apply the purely syntactic repairs.

    Bare newlines, carriage returns and tabs inside string literals are
    escaped, and commas directly before a closing bracket or brace are
    dropped. Text inside strings is otherwise left untouched.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(text)
    i = 0
    while i < length:
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
                out.append(ch)
            elif ch == "\\":
                escaped = True
                out.append(ch)
            elif ch == '"':
                in_string = False
                out.append(ch)
            else:
                out.append(_STRING_ESCAPES.get(ch, ch))
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == ",":
            j = i + 1
            while j < length and text[j].isspace():
                j += 1
            if j < length and text[j] in "]}":
                i += 1
                continue
            out.append(ch)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def _load(text: Optional[str], array_key: Optional[str]) -> Optional[dict[str, Any]]:
    """Parse text into an object, wrapping a top-level array when allowed."""
    if not text:
        return None
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, list) and array_key:
        return {array_key: value}
    return None


def _spans(text: str, array_key: Optional[str]) -> list[str]:
    spans = []
    obj = _outer_span(text, "{", "}")
    if obj is not None:
        spans.append(obj)
    if array_key:
        arr = _outer_span(text, "[", "]")
        if arr is not None:
            spans.append(arr)
    return spans


def parse_response(text: Any, array_key: Optional[str] = None) -> ParsedResponse:
    """
    Recover a JSON object from raw backend text.

    Args:
        text: Raw response (anything that is not a string falls back)
        array_key: Envelope key a bare top-level array belongs to; without
            it a top-level array is not accepted

    Returns:
        ParsedResponse with the parsed object and the strategy that worked
    """
    if not isinstance(text, str) or not text.strip():
        logger.warning("Empty AI response, using fallback")
        return ParsedResponse(None, ParseStrategy.FALLBACK)

    stripped = text.strip()
    fenced = strip_fence(stripped)
    # Spans come from the full text: fence matching stops early when string
    # values themselves contain ``` fences
    spans = _spans(stripped, array_key)

    attempts: list[tuple[ParseStrategy, Callable[[], Optional[dict[str, Any]]]]] = [
        (ParseStrategy.DIRECT, lambda: _load(stripped, array_key)),
        (ParseStrategy.FENCE_STRIPPED, lambda: _load(fenced, array_key)),
        (
            ParseStrategy.BRACE_EXTRACTED,
            lambda: next(
                (d for d in (_load(s, array_key) for s in spans) if d is not None),
                None,
            ),
        ),
        (
            ParseStrategy.REPAIRED,
            lambda: next(
                (
                    d
                    for d in (
                        _load(repair_json(s), array_key)
                        for s in (spans or [fenced if fenced is not None else stripped])
                    )
                    if d is not None
                ),
                None,
            ),
        ),
    ]

    for strategy, attempt in attempts:
        data = attempt()
        if data is not None:
            if strategy != ParseStrategy.DIRECT:
                logger.debug(f"AI response parsed via {strategy.value}")
            return ParsedResponse(data, strategy)

    preview = stripped[: processing_settings.RESPONSE_LOG_PREVIEW]
    logger.warning(f"Could not parse AI response ({len(stripped)} chars), using fallback")
    logger.debug(f"Unparseable response preview: {preview}")
    return ParsedResponse(None, ParseStrategy.FALLBACK)


def parse_suggested_end_line(info: Any) -> int:
    """A non-negative whole line count from logicalBlockInfo, else NO_SUGGESTION."""
    if not isinstance(info, dict):
        return NO_SUGGESTION
    value = info.get("suggestedEndLine")
    if isinstance(value, bool):
        return NO_SUGGESTION
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return NO_SUGGESTION
    if isinstance(value, float):
        if not value.is_integer():
            return NO_SUGGESTION
        value = int(value)
    if not isinstance(value, int) or value < 0:
        return NO_SUGGESTION
    return value


def to_envelope(parsed: ParsedResponse) -> dict[str, Any]:
    """
    Normalize a parsed response into the four-key extraction envelope.

    Non-list entries for theory/questions/tasks become empty lists and an
    invalid suggestedEndLine becomes -1. List items are passed through for
    the entity sanitizers.
    """
    if parsed.data is None:
        return empty_envelope()
    data = parsed.data
    envelope: dict[str, Any] = {
        "logicalBlockInfo": {
            "suggestedEndLine": parse_suggested_end_line(data.get("logicalBlockInfo"))
        }
    }
    for key in ENVELOPE_LIST_KEYS:
        value = data.get(key)
        if value is not None and not isinstance(value, list):
            logger.warning(f"AI response field '{key}' is not a list, ignoring it")
        envelope[key] = list(value) if isinstance(value, list) else []
    return envelope


def sanitize_response(text: Any, array_key: Optional[str] = None) -> dict[str, Any]:
    """
    Total parse of a backend response into the extraction envelope.

    Never raises; irrecoverable input yields empty_envelope().
    """
    return to_envelope(parse_response(text, array_key=array_key))

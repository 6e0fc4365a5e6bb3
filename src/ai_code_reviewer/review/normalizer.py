"""Turn raw model output into review comments.

Models are asked for a JSON object with a ``comments`` array, or the bare
word ``NO_COMMENT``. In practice the JSON arrives wrapped in markdown fences,
surrounded by prose, with unescaped quotes, trailing commas or stray control
characters. Each repair below is a small string-to-string function so it can
be tested on its own; :func:`normalize_response` chains them and never raises.
"""
import json
import logging
import math
import re
from typing import Any

from ai_code_reviewer.models.review import ReviewComment, Severity
from .prompts import NO_COMMENT


logger = logging.getLogger(__name__)

UNKNOWN_MESSAGE = "Unknown comment"
PARSE_FAILURE_MESSAGE = "Could not process the AI response."

# Free-text fields whose values may contain unescaped quotes
TEXT_FIELDS = ("message", "category")

_LEADING_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*")
_TRAILING_FENCE_RE = re.compile(r"```\s*$")
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_REPEATED_COMMA_RE = re.compile(r",(\s*,)+")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_UNESCAPED_QUOTE_RE = re.compile(r'(?<!\\)"')
_INT_RE = re.compile(r"-?\d+")
_STRING_WHITESPACE = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _text_field_re(field: str) -> re.Pattern:
    # Value runs until a quote followed by the next delimiter
    return re.compile(
        rf'("{field}"\s*:\s*")(.*?)("\s*(?:,\s*"|[}}\]]))',
        re.DOTALL,
    )


_TEXT_FIELD_RES = [_text_field_re(field) for field in TEXT_FIELDS]


def is_no_comment(text: str) -> bool:
    return text.strip().strip("`").strip() == NO_COMMENT


def strip_fences(text: str) -> str:
    """Remove code-fence markers wrapping the whole response."""
    text = _LEADING_FENCE_RE.sub("", text)
    return _TRAILING_FENCE_RE.sub("", text).strip()


def _is_bracketed(text: str) -> bool:
    return (text.startswith("{") and text.endswith("}")) or (
        text.startswith("[") and text.endswith("]")
    )


def extract_json_candidate(text: str) -> str:
    """Cut the text down to the JSON payload it most likely carries."""
    stripped = strip_fences(text)

    starts = [i for i in (stripped.find("{"), stripped.find("[")) if i != -1]
    ends = [i for i in (stripped.rfind("}"), stripped.rfind("]")) if i != -1]
    if starts and ends:
        candidate = stripped[min(starts):max(ends) + 1]
        if _is_bracketed(candidate):
            return candidate

    for pattern in (_OBJECT_RE, _ARRAY_RE):
        match = pattern.search(text)
        if match:
            return match.group(0)

    return stripped


def repair_unescaped_quotes(text: str) -> str:
    """Escape bare double quotes inside message and category values."""
    def escape(match: re.Match) -> str:
        value = _UNESCAPED_QUOTE_RE.sub(r'\\"', match.group(2))
        return f"{match.group(1)}{value}{match.group(3)}"

    for pattern in _TEXT_FIELD_RES:
        text = pattern.sub(escape, text)
    return text


def escape_string_whitespace(text: str) -> str:
    """Escape raw newlines and tabs inside string values so they survive stripping."""
    out = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            elif char in _STRING_WHITESPACE:
                char = _STRING_WHITESPACE[char]
        elif char == '"':
            in_string = True
        out.append(char)
    return "".join(out)


def strip_control_characters(text: str) -> str:
    return _CONTROL_RE.sub("", text)


def remove_extra_commas(text: str) -> str:
    text = _REPEATED_COMMA_RE.sub(",", text)
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def sanitize_json(text: str) -> str:
    return remove_extra_commas(strip_control_characters(escape_string_whitespace(text)))


def _decode(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    repaired = sanitize_json(repair_unescaped_quotes(candidate))
    return json.loads(repaired)


def _comment_items(data: Any) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("comments"), list):
        return data["comments"]
    return []


def _to_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        match = _INT_RE.search(value)
        if match:
            return int(match.group(0))
    return default


def map_severity(value: Any) -> Severity:
    if isinstance(value, str):
        key = value.strip().lower()
        if key == "error":
            return Severity.ERROR
        if key == "warning":
            return Severity.WARNING
    return Severity.INFO


def coerce_comment(item: Any) -> ReviewComment | None:
    """Build a comment from one decoded item; ``None`` when the item is unusable."""
    if isinstance(item, str):
        if not item.strip():
            return None
        return ReviewComment(message=item.strip(), line=0)
    if not isinstance(item, dict):
        return None

    message = item.get("message")
    if message is not None and not isinstance(message, str):
        message = str(message)
    message = (message or "").strip() or UNKNOWN_MESSAGE

    line = _to_int(item.get("line"), 1) or 1
    column = _to_int(item.get("column"), 0)

    category = item.get("category")
    if category is not None:
        category = str(category).strip() or None

    return ReviewComment(
        message=message,
        line=max(0, line - 1),
        column=max(0, column),
        severity=map_severity(item.get("severity")),
        category=category,
    )


def parse_failure_comment() -> ReviewComment:
    return ReviewComment(message=PARSE_FAILURE_MESSAGE, line=0, severity=Severity.INFO)


def normalize_response(raw: Any) -> list[ReviewComment]:
    """Parse a raw model response into comments, in the order the model gave them.

    Never raises: an empty response or ``NO_COMMENT`` gives ``[]`` and a
    response that cannot be decoded gives a single info comment saying so.
    """
    if not isinstance(raw, str) or not raw.strip():
        return []

    if is_no_comment(raw):
        return []

    try:
        candidate = extract_json_candidate(raw)
        data = _decode(candidate)

        comments = []
        for item in _comment_items(data):
            comment = coerce_comment(item)
            if comment is None:
                logger.debug(f"Skipping unusable comment item: {item!r}")
                continue
            comments.append(comment)
        return comments
    except Exception as e:
        logger.warning(f"Could not parse AI response ({e}): {raw[:200]!r}")
        return [parse_failure_comment()]

"""
Two-stage parsing of structured data produced by the model.

Stage one is a strict JSON decode. Stage two is a best-effort extraction:
the first balanced JSON object embedded in the text (fenced or surrounded
by prose), then flat ``"key": value`` pairs. Both stages return a
``ParseResult`` instead of raising; callers decide whether to ``unwrap``.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from agent_dispatch.utils.error_handling import ArgumentParseError, DispatchError

T = TypeVar("T")

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_PAIR_RE = re.compile(
    r'"(?P<key>[A-Za-z_][\w-]*)"\s*:\s*'
    r'(?P<value>"(?:[^"\\]|\\.)*"|-?\d+(?:\.\d+)?|true|false|null)'
)


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of a parse: a value, or the error explaining why there is none."""

    value: T | None = None
    error: DispatchError | None = None
    stage: str = "strict"

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def parse_strict(text: str) -> ParseResult[Any]:
    """Stage one: the whole text must be valid JSON."""
    try:
        return ParseResult(value=json.loads(text), stage="strict")
    except (json.JSONDecodeError, TypeError) as e:
        return ParseResult(error=DispatchError("Invalid JSON", original_error=e))


def _first_json_object(text: str) -> str | None:
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def parse_lenient(text: str) -> ParseResult[dict[str, Any]]:
    """Stage two: recover an object from fenced, embedded or broken JSON."""
    fenced = _FENCE_RE.search(text)
    candidates = [fenced.group(1)] if fenced else []
    embedded = _first_json_object(text)
    if embedded:
        candidates.append(embedded)

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return ParseResult(value=value, stage="embedded")

    pairs: dict[str, Any] = {}
    for match in _PAIR_RE.finditer(text):
        try:
            pairs[match.group("key")] = json.loads(match.group("value"))
        except json.JSONDecodeError:
            # Invalid escapes or raw control characters inside the string
            continue
    if pairs:
        return ParseResult(value=pairs, stage="pairs")

    return ParseResult(error=DispatchError("No structured data found in text"))


def parse_structured(
    text: str | Mapping[str, Any] | None,
    error_cls: type[DispatchError] = ArgumentParseError,
) -> ParseResult[dict[str, Any]]:
    """
    Parse a JSON object, falling back to lenient extraction.

    Args:
        text: Raw payload; mappings are accepted as already parsed
        error_cls: Error type reported when both stages fail

    Returns:
        ParseResult holding a dict, or an ``error_cls`` error
    """
    if isinstance(text, Mapping):
        return ParseResult(value=dict(text), stage="native")
    if text is None or not text.strip():
        return ParseResult(value={}, stage="empty")

    strict = parse_strict(text)
    if strict.ok:
        if isinstance(strict.value, dict):
            return ParseResult(value=strict.value, stage="strict")
        return ParseResult(
            error=error_cls(f"Expected a JSON object, got {type(strict.value).__name__}")
        )

    lenient = parse_lenient(text)
    if lenient.ok:
        return lenient

    return ParseResult(
        error=error_cls(
            f"Could not parse structured data from: {text[:80]!r}",
            original_error=strict.error,
        )
    )

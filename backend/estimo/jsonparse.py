"""Recover a JSON object from free-form oracle output.

The oracle is asked for JSON but may wrap it in code fences, prefix it with
reasoning, or trail it with commentary. Recovery runs in two stages:

1. Strip code-fence markers and parse the remainder directly.
2. Scan once for balanced ``{...}`` objects, counting braces only outside
   string literals, and parse them in order until one loads.

If neither stage yields a JSON object, :class:`JsonExtractionError` is raised.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any

from estimo.exceptions import JsonExtractionError

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers from *text*."""
    return _FENCE_RE.sub("", text).strip()


def iter_balanced_objects(text: str) -> Iterator[str]:
    """Yield every balanced ``{...}`` substring of *text*, outermost first.

    Braces inside double-quoted strings (including escaped quotes) are
    ignored. Unmatched braces are skipped, so a stray ``{`` in leading
    prose does not hide an object that follows it.
    """
    spans: list[tuple[int, int]] = []
    opened: list[int] = []
    in_string = False
    escaped = False
    for idx, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            opened.append(idx)
        elif ch == "}" and opened:
            spans.append((opened.pop(), idx + 1))
    spans.sort(key=lambda span: (span[0], -span[1]))
    for start, end in spans:
        yield text[start:end]


def find_balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` substring of *text*, or None."""
    return next(iter_balanced_objects(text), None)


def extract_json(text: str) -> dict[str, Any]:
    """Parse the JSON object contained in *text*.

    Raises
    ------
    JsonExtractionError
        If no JSON object can be recovered.
    """
    if not text or not text.strip():
        msg = "Empty response, no JSON to extract"
        raise JsonExtractionError(msg)

    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict):
        return data

    error: Exception | None = None
    for candidate in iter_balanced_objects(cleaned):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as exc:
            error = exc
            continue
        if isinstance(data, dict):
            return data

    if error is None:
        msg = f"No JSON object found in response ({len(text)} chars)"
        raise JsonExtractionError(msg)
    msg = f"Invalid JSON object in response: {error}"
    raise JsonExtractionError(msg) from error

"""
Locate a JSON array inside free-form generated text.

Model answers wrap their JSON in markdown fences, surround it with prose,
or return it bare. Candidates are tried in order and the first one that
parses wins:

1. A ```json fenced block
2. Any fenced block
3. The first array that decodes starting at some '[' in the text
4. The whole text
"""

import json
import re
from typing import Any, Iterator, List, Optional

_JSON_FENCE = re.compile(r"```json\s*\n(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```[^\n`]*\n(.*?)\n?```", re.DOTALL)

_decoder = json.JSONDecoder()


def _fenced_candidates(text: str) -> Iterator[str]:
    for pattern in (_JSON_FENCE, _ANY_FENCE):
        match = pattern.search(text)
        if match:
            content = match.group(1).strip()
            # Fenced objects without brackets are a list of items
            if content and not content.startswith("["):
                content = f"[{content}]"
            yield content


def _embedded_array(text: str) -> Optional[List[Any]]:
    """Decode from each '[' in turn; trailing prose is ignored"""
    start = text.find("[")
    while start != -1:
        try:
            parsed, _ = _decoder.raw_decode(text, start)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
        start = text.find("[", start + 1)
    return None


def _as_list(parsed: Any) -> Optional[List[Any]]:
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return [parsed]
    return None


def extract_json_array(text: Optional[str]) -> Optional[List[Any]]:
    """
    Extract the first parseable JSON array from text.

    A lone JSON object is returned as a one-element list. Returns None
    when no candidate parses.
    """
    if not text or not text.strip():
        return None

    for candidate in _fenced_candidates(text):
        try:
            result = _as_list(json.loads(candidate))
        except ValueError:
            continue
        if result is not None:
            return result

    embedded = _embedded_array(text)
    if embedded is not None:
        return embedded

    try:
        return _as_list(json.loads(text.strip()))
    except ValueError:
        return None

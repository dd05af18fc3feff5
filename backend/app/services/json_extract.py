"""Recover JSON payloads from model replies (code fences, preambles, trailing chatter)."""

import json
import re

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")

_decoder = json.JSONDecoder()


class JSONExtractionError(ValueError):
    """The text held no decodable JSON object or array."""

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text


def strip_code_fence(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker."""
    stripped = text.strip()
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


def extract_json(text: str | None, types: tuple[type, ...] = (dict, list)) -> dict | list:
    """Return the first JSON value of one of ``types`` found in ``text``.

    A strict parse of the fence-stripped text is tried first. Failing that,
    each ``{`` / ``[`` position is tried as the start of a balanced JSON value;
    values of other types are skipped.
    """
    if not text or not text.strip():
        raise JSONExtractionError("empty model reply", text or "")

    body = strip_code_fence(text)
    try:
        value = json.loads(body)
        if isinstance(value, types):
            return value
    except json.JSONDecodeError:
        pass

    starts = "".join(opener for opener, kind in (("{", dict), ("[", list)) if kind in types)
    for match in re.finditer(f"[{re.escape(starts)}]", body):
        try:
            value, _ = _decoder.raw_decode(body, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(value, types):
            return value

    wanted = " or ".join("object" if kind is dict else "array" for kind in types)
    raise JSONExtractionError(f"no JSON {wanted} in model reply", text)


def extract_json_object(text: str | None) -> dict:
    return extract_json(text, types=(dict,))

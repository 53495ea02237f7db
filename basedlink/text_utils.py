"""Low-level text helpers for model output.

No dependency on schemas, services, or any other project module.
"""

import json
import logging
import re
from typing import Any, List, Optional


logger = logging.getLogger("basedlink.text")

EMPTY_RESULT_FALLBACK = "No content generated."

MIN_LIST_ITEM_CHARS = 5
MIN_PARAGRAPH_CHARS = 20

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
# Bare newline that does not open a structural JSON token on the next line.
_BARE_NEWLINE_RE = re.compile(r"\r?\n(?!\s*[\"}\]])")
_QUOTED_SPLIT_RE = re.compile(r"\",\s*|,\s*\"")
_QUOTE_RESIDUE_RE = re.compile(r'^\[?"|"?\]?,?$')
_LIST_MARKER_RE = re.compile(
    r"(?:^|\r\n|\r|\n)[ \t]*(?:\d+[.)]|[-*•]|(?:option|variation)\s*\d+[.:)]?)\s+",
    re.IGNORECASE,
)
_PARAGRAPH_RE = re.compile(r"\n\s*\n+")
_PREAMBLE_PREFIXES = ("here are", "berikut adalah", "sure!")
_PREAMBLE_MARKERS = ("linkedin post",)


def normalize_whitespace(text: str) -> str:
    return " ".join((text or "").split()).strip()


def clip_text(text: str, limit: int = 80) -> str:
    flat = normalize_whitespace(text)
    if len(flat) <= limit:
        return flat
    return flat[: max(0, limit - 3)].rstrip() + "..."


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def _item_to_text(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if item is None:
        return ""
    if isinstance(item, (dict, list)):
        return json.dumps(item, ensure_ascii=False)
    return str(item).strip()


def _parse_json_array(candidate: str) -> Optional[List[str]]:
    try:
        parsed = json.loads(candidate)
    except (ValueError, TypeError):
        return None
    if not isinstance(parsed, list):
        return None
    items = [_item_to_text(item) for item in parsed]
    items = [item for item in items if item]
    return items or None


def _bracket_candidate(cleaned: str) -> Optional[str]:
    first_open = cleaned.find("[")
    last_close = cleaned.rfind("]")
    if first_open != -1 and last_close != -1 and first_open < last_close:
        return cleaned[first_open : last_close + 1]
    return None


def _strip_quote_residue(item: str) -> str:
    return _QUOTE_RESIDUE_RE.sub("", item.strip()).strip()


def _is_preamble(item: str) -> bool:
    lower = item.lower()
    if lower.startswith(_PREAMBLE_PREFIXES):
        return True
    return any(marker in lower for marker in _PREAMBLE_MARKERS)


def _split_quoted_list(cleaned: str) -> Optional[List[str]]:
    if '", "' not in cleaned and not cleaned.startswith('"'):
        return None
    items = [_strip_quote_residue(part) for part in _QUOTED_SPLIT_RE.split(cleaned)]
    items = [item for item in items if len(item) > MIN_LIST_ITEM_CHARS]
    return items if len(items) > 1 else None


def _split_list_markers(cleaned: str) -> Optional[List[str]]:
    items = []
    for part in _LIST_MARKER_RE.split(cleaned):
        item = part.strip()
        if len(item) < MIN_LIST_ITEM_CHARS or _is_preamble(item):
            continue
        item = _strip_quote_residue(item)
        if item:
            items.append(item)
    return items if len(items) > 1 else None


def _split_paragraphs(cleaned: str) -> Optional[List[str]]:
    items = [p.strip() for p in _PARAGRAPH_RE.split(cleaned)]
    items = [p for p in items if len(p) > MIN_PARAGRAPH_CHARS]
    return items if len(items) > 1 else None


def normalize_list_response(text: str, fallback: str = EMPTY_RESULT_FALLBACK) -> List[str]:
    """Turn a model reply into a list of strings.

    The model is asked for a JSON array but may wrap it in markdown, add an
    intro line, or answer with a numbered list instead. Stages run from the
    most structured reading to the least; each heuristic split must yield more
    than one plausible item to be accepted. Never raises and never returns an
    empty list.
    """
    raw = text if isinstance(text, str) else _item_to_text(text)
    cleaned = strip_code_fences(raw)

    candidate = _bracket_candidate(cleaned)
    if candidate is not None:
        items = _parse_json_array(candidate)
        if items:
            return items

    repaired = _BARE_NEWLINE_RE.sub("\\\\n", candidate if candidate is not None else cleaned)
    items = _parse_json_array(repaired)
    if items:
        return items

    logger.debug("JSON extraction failed, trying manual split for text: %s", clip_text(raw, 50))

    for splitter in (_split_quoted_list, _split_list_markers, _split_paragraphs):
        items = splitter(cleaned)
        if items:
            return items

    stripped = raw.strip()
    return [stripped] if stripped else [fallback or EMPTY_RESULT_FALLBACK]

"""
Recovers an embedded chart configuration from generated text.

Strategies are tried in order; each returns an ExtractionMatch or None and
the first hit wins. JSON that fails to decode simply lets the next
strategy run.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
import json
import logging
import re

logger = logging.getLogger(__name__)

CHART_MARKER = "CHART_CONFIG:"

MARKER_FENCED_RE = re.compile(r"CHART_CONFIG:\s*```(?i:json)?\s*(\{.*?\})\s*```", re.DOTALL)
MARKER_RE = re.compile(r"CHART_CONFIG:\s*(?=\{)")
FENCED_RE = re.compile(r"```(?i:json)?\s*(\{.*?\})\s*```", re.DOTALL)

# a loose value ends at a comma, semicolon, brace, newline or sentence stop
_LOOSE_VALUE = r"\s*[:=]\s*[\"']?([^\"',;}\n]+?)[\"']?\s*(?=[,;}\n]|\.(?:\s|$)|$)"

LOOSE_FIELD_RE = {
    "type": re.compile(r"\btype[\"']?\s*[:=]\s*[\"']?(bar|line|scatter|pie)\b", re.IGNORECASE),
    "title": re.compile(r"\btitle[\"']?\s*[:=]\s*[\"']([^\"'\n]+)[\"']", re.IGNORECASE),
    "xAxis": re.compile(r"\bx_?axis[\"']?" + _LOOSE_VALUE, re.IGNORECASE),
    "yAxis": re.compile(r"\by_?axis[\"']?" + _LOOSE_VALUE, re.IGNORECASE),
}

_decoder = json.JSONDecoder()


@dataclass
class ExtractionMatch:
    config: Dict[str, Any]
    # (start, end) of the text to strip; None leaves the text untouched
    span: Optional[Tuple[int, int]] = None


@dataclass
class ExtractionResult:
    clean_text: str
    chart_config: Optional[Dict[str, Any]] = None
    strategy: Optional[str] = None


def _load_object(raw: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug("Chart JSON failed to decode: %s", e)
        return None
    return parsed if isinstance(parsed, dict) else None


def marker_fenced_strategy(text: str) -> Optional[ExtractionMatch]:
    for m in MARKER_FENCED_RE.finditer(text):
        config = _load_object(m.group(1))
        if config is not None:
            return ExtractionMatch(config=config, span=m.span())
    return None


def marker_inline_strategy(text: str) -> Optional[ExtractionMatch]:
    for m in MARKER_RE.finditer(text):
        try:
            config, end = _decoder.raw_decode(text, m.end())
        except json.JSONDecodeError as e:
            logger.debug("Inline chart JSON failed to decode: %s", e)
            continue
        if isinstance(config, dict):
            return ExtractionMatch(config=config, span=(m.start(), end))
    return None


def fenced_block_strategy(text: str) -> Optional[ExtractionMatch]:
    for m in FENCED_RE.finditer(text):
        config = _load_object(m.group(1))
        if config is not None:
            return ExtractionMatch(config=config, span=m.span())
    return None


def loose_fields_strategy(text: str) -> Optional[ExtractionMatch]:
    found = {}
    for field, pattern in LOOSE_FIELD_RE.items():
        m = pattern.search(text)
        if m:
            found[field] = m.group(1).strip()

    if not all(k in found for k in ("type", "xAxis", "yAxis")):
        return None

    found["type"] = found["type"].lower()
    found.setdefault("title", f"{found['yAxis']} by {found['xAxis']}")
    return ExtractionMatch(config=found, span=None)


Strategy = Callable[[str], Optional[ExtractionMatch]]

STRATEGIES: List[Tuple[str, Strategy]] = [
    ("marker_fenced", marker_fenced_strategy),
    ("marker_inline", marker_inline_strategy),
    ("fenced_block", fenced_block_strategy),
    ("loose_fields", loose_fields_strategy),
]


def extract_chart_config(text: str, strategies: Optional[List[Tuple[str, Strategy]]] = None) -> ExtractionResult:
    """
    Locate one chart annotation in `text`.

    Returns the text with the matched span removed (and trimmed) plus the
    decoded config, or the untouched text and no config.
    """
    if not text:
        return ExtractionResult(clean_text=text or "")

    for name, strategy in strategies or STRATEGIES:
        match = strategy(text)
        if match is None:
            continue

        clean = text
        if match.span is not None:
            start, end = match.span
            clean = (text[:start] + text[end:]).strip()

        logger.info("Chart config extracted with %s strategy", name)
        return ExtractionResult(clean_text=clean, chart_config=match.config, strategy=name)

    return ExtractionResult(clean_text=text)

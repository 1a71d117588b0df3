"""
JSON-in-HTML locator.

Pages embed their data graph as a JavaScript assignment such as
``var ytInitialData = {...};``. This module finds that object in raw page
text with two strategies:

1. An anchored scan: find the marker, then the fixed ``};`` terminator.
   Fast, and right for stable page templates.
2. A balanced-delimiter scan: find the first ``{`` after any known marker
   variant and walk forward counting braces, honouring string literals and
   escapes, until the matching ``}``.

Absence is a normal outcome (layouts change), so locating never raises for
"not found". Parsing a located span is separate; a span that does not parse
is a ``MalformedDataError``.

Functions
---------
anchored_scan
    Marker plus terminator extraction.
extract_balanced_object
    Brace-counting extraction from a known ``{`` position.
balanced_scan
    Brace-counting extraction after the first matching marker.
locate_json
    Both strategies, returning the first span that is valid JSON.
parse_tree
    ``json.loads`` with a typed failure.
locate_tree
    Locate and parse in one step.

Constants
---------
INITIAL_DATA_MARKERS, PLAYER_RESPONSE_MARKERS
    Marker spellings used by the site for its two data blobs.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator, Sequence

from tubescope.exceptions import MalformedDataError

logger = logging.getLogger(__name__)

INITIAL_DATA_MARKERS: tuple[str, ...] = (
    "var ytInitialData = ",
    "ytInitialData = ",
    'window["ytInitialData"] = ',
)
"""Marker spellings preceding the ``ytInitialData`` object."""

PLAYER_RESPONSE_MARKERS: tuple[str, ...] = (
    "var ytInitialPlayerResponse = ",
    "ytInitialPlayerResponse = ",
    "window.ytInitialPlayerResponse = ",
    'window["ytInitialPlayerResponse"] = ',
)
"""Marker spellings preceding the ``ytInitialPlayerResponse`` object."""

DEFAULT_TERMINATOR = "};"

# Upper bound on how far the brace walker scans from the opening brace.
_MAX_SCAN_CHARS = 5_000_000

# Loose variable-assignment prefixes, used by the balanced scan so that
# spacing variants ("ytInitialData={") are still found.
_ASSIGNMENT_RE_TEMPLATE = r'(?:var\s+|window\["|window\.|){name}(?:"\])?\s*=\s*'

_SNIPPET_CHARS = 80


def anchored_scan(html: str, marker: str, terminator: str = DEFAULT_TERMINATOR) -> str | None:
    """
    Extract the text between *marker* and the first *terminator* after it.

    The returned span includes the closing ``}`` that the terminator starts
    with. No JSON validation happens here.

    Parameters
    ----------
    html : str
        Raw page text.
    marker : str
        Exact text preceding the object, e.g. ``"var ytInitialData = "``.
    terminator : str, optional
        Text that ends the assignment (default ``"};"``).

    Returns
    -------
    str | None
        The candidate span, or None when the marker, the terminator or an
        opening brace is missing.
    """
    marker_pos = html.find(marker)
    if marker_pos < 0:
        return None

    body_start = marker_pos + len(marker)
    end = html.find(terminator, body_start)
    if end < 0:
        return None

    span = html[body_start : end + 1].strip()
    if not span.startswith("{"):
        return None
    return span


def extract_balanced_object(text: str, start: int) -> str | None:
    """
    Return the ``{...}`` span that opens at *start*.

    Page blobs nest far too deeply for a regular expression, so the scan
    tracks object depth and stops when it returns to zero. String literals
    are skipped as a whole, so a ``"}"`` inside a title or an escaped quote
    cannot end the span early.

    Parameters
    ----------
    text : str
        Raw page text.
    start : int
        Index of the opening brace.

    Returns
    -------
    str | None
        The object text including both braces. None when *start* is not an
        opening brace or no closing brace is found within
        ``_MAX_SCAN_CHARS``.
    """
    if not 0 <= start < len(text) or text[start] != "{":
        return None

    depth = 0
    in_string = escaped = False
    end = min(len(text), start + _MAX_SCAN_CHARS)
    for index in range(start, end):
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
    return None


def _marker_names(markers: Sequence[str]) -> list[str]:
    """Reduce marker spellings to the bare variable names they assign."""
    names: list[str] = []
    for marker in markers:
        match = re.search(r"(yt[A-Za-z]+)", marker)
        if match and match.group(1) not in names:
            names.append(match.group(1))
    return names


def _balanced_candidates(html: str, markers: Sequence[str]) -> Iterator[str]:
    seen: set[int] = set()
    patterns = [
        re.compile(_ASSIGNMENT_RE_TEMPLATE.format(name=re.escape(name)))
        for name in _marker_names(markers)
    ]
    for pattern in patterns:
        for match in pattern.finditer(html):
            brace = html.find("{", match.end(), match.end() + 16)
            if brace < 0 or brace in seen:
                continue
            seen.add(brace)
            span = extract_balanced_object(html, brace)
            if span:
                yield span


def balanced_scan(html: str, markers: Sequence[str]) -> str | None:
    """
    Return the first balanced object following any of *markers*.

    Parameters
    ----------
    html : str
        Raw page text.
    markers : Sequence[str]
        Marker spellings; spacing and ``var``/``window`` variants of the
        same variable are matched too.

    Returns
    -------
    str | None
        The exact balanced span, or None.
    """
    for span in _balanced_candidates(html, markers):
        return span
    return None


def _is_json(span: str) -> bool:
    try:
        json.loads(span)
    except ValueError:
        return False
    return True


def _candidate_spans(
    html: str, markers: Sequence[str], terminator: str
) -> Iterator[tuple[str, str]]:
    for marker in markers:
        span = anchored_scan(html, marker, terminator)
        if span:
            yield "anchored", span
    for span in _balanced_candidates(html, markers):
        yield "balanced", span


def locate_json(
    html: str,
    markers: Sequence[str] = INITIAL_DATA_MARKERS,
    terminator: str = DEFAULT_TERMINATOR,
) -> str | None:
    """
    Locate the embedded JSON object that follows one of *markers*.

    Tries the anchored scan for every marker first; a span that is not
    valid JSON (for example because the terminator also occurs inside a
    string value) is discarded and the balanced scan is tried instead.

    Parameters
    ----------
    html : str
        Raw page text.
    markers : Sequence[str], optional
        Marker spellings, most specific first.
    terminator : str, optional
        Anchored-scan terminator (default ``"};"``).

    Returns
    -------
    str | None
        The JSON text, or None when nothing valid was found.
    """
    for strategy, span in _candidate_spans(html, markers, terminator):
        if _is_json(span):
            if strategy == "balanced":
                logger.debug("Anchored scan failed; balanced scan recovered %d chars", len(span))
            return span
    return None


def parse_tree(span: str) -> Any:
    """
    Parse a located span into a generic JSON value.

    Parameters
    ----------
    span : str
        JSON text.

    Returns
    -------
    Any
        The decoded value.

    Raises
    ------
    MalformedDataError
        If *span* is not valid JSON.
    """
    try:
        return json.loads(span)
    except ValueError as e:
        raise MalformedDataError(
            message=f"Embedded JSON could not be parsed: {e}",
            snippet=span[:_SNIPPET_CHARS],
        ) from e


def locate_tree(
    html: str,
    markers: Sequence[str] = INITIAL_DATA_MARKERS,
    terminator: str = DEFAULT_TERMINATOR,
) -> Any | None:
    """
    Locate and parse the embedded object in one step.

    Parameters
    ----------
    html : str
        Raw page text.
    markers : Sequence[str], optional
        Marker spellings, most specific first.
    terminator : str, optional
        Anchored-scan terminator.

    Returns
    -------
    Any | None
        The parsed tree, or None when no marker was found at all.

    Raises
    ------
    MalformedDataError
        If spans were located but none of them parsed.
    """
    last_error: MalformedDataError | None = None
    for strategy, span in _candidate_spans(html, markers, terminator):
        try:
            return parse_tree(span)
        except MalformedDataError as e:
            logger.debug("%s span rejected: %s", strategy, e.message)
            last_error = e
    if last_error is not None:
        raise last_error
    return None

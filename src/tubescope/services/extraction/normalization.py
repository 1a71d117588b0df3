"""
Normalization of display strings.

Pure functions that turn the localized, abbreviated or relative text found in
page data into stable display labels plus, where derivable, machine-readable
values. Nothing here performs I/O, and nothing raises on unparseable input:
unknown text passes through unchanged.

Display labels are produced in English, or Turkish when the language is
``"tr"``.

Functions
---------
approx_number
    Best-effort integer from "1.2K", "3,4 Mn", "1.234.567", "51552 views".
format_view_count, format_count_short
    Integer to "1.2K views" / "1.2K".
normalize_view_count
    Any view-count text to a stable display label.
relative_to_iso, absolute_to_iso
    Date text to an ISO-8601 timestamp.
format_relative
    ISO-8601 timestamp to "3 days ago".
normalize_published_at
    Date text (plus optional ISO hint) to ``PublishedAt``.
parse_duration, format_duration
    "12:34" to seconds and back.
normalize_url, unescape_fragment
    URL and JSON-fragment cleanup.
thumbnail_url
    Static thumbnail URL for a video id.
is_short_form
    Duration-threshold short-form classifier.
"""

from __future__ import annotations

import datetime as _dt
import re
from typing import NamedTuple

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

from tubescope.models.entities import Video
from tubescope.models.enums import ThumbnailQuality

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

_GROUPED_DIGITS_RE = re.compile(r"(?<!\d)(\d{1,3}(?:[.,\s]\d{3})+)(?!\d)")
_SUFFIXED_RE = re.compile(r"(?<!\d)(\d+(?:[.,]\d+)?)\s*(k|mn|m|b)\b", re.IGNORECASE)
_PLAIN_DIGITS_RE = re.compile(r"(?<!\d)(\d+)(?!\d)")
_GROUP_SEPARATORS_RE = re.compile(r"[.,\s]")

_SUFFIX_MULTIPLIERS: dict[str, int] = {
    "k": 1_000,
    "m": 1_000_000,
    "mn": 1_000_000,
    "b": 1_000_000_000,
}

_VIEWS_SUFFIX: dict[str, str] = {"en": "views", "tr": "görüntülenme"}
_LOADING_LABEL: dict[str, str] = {"en": "Loading...", "tr": "Yükleniyor..."}
_LOADING_PREFIXES = ("loading", "yükleniyor")


def _lang(language: str) -> str:
    return "tr" if language.lower().startswith("tr") else "en"


def approx_number(text: str) -> int | None:
    """
    Parse an approximate integer from localized count text.

    Recognizes, in order: grouped digits (``1,234,567``, ``1.234.567``,
    ``1 234 567``), suffixed abbreviations (``1.2K``, ``3,4M``, ``2 Mn``,
    ``1B``) and plain digit runs.

    Parameters
    ----------
    text : str
        Count text as displayed.

    Returns
    -------
    int | None
        The approximated value, or None when no number is present.

    Examples
    --------
    >>> approx_number("1.2K views")
    1200
    >>> approx_number("1,234,567 views")
    1234567
    >>> approx_number("No views") is None
    True
    """
    s = text.strip().lower()
    if not s:
        return None

    match = _GROUPED_DIGITS_RE.search(s)
    if match:
        cleaned = _GROUP_SEPARATORS_RE.sub("", match.group(1))
        if cleaned.isdigit():
            return int(cleaned)

    match = _SUFFIXED_RE.search(s)
    if match:
        value = float(match.group(1).replace(",", "."))
        return int(round(value * _SUFFIX_MULTIPLIERS[match.group(2).lower()]))

    match = _PLAIN_DIGITS_RE.search(s)
    if match:
        return int(match.group(1))

    return None


def _abbreviate(count: int) -> str:
    for threshold, suffix in ((1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")):
        if count >= threshold:
            scaled = count / threshold
            if count >= threshold * 10:
                return f"{scaled:.0f}{suffix}"
            return f"{scaled:.1f}{suffix}"
    return str(count)


def format_count_short(count: int) -> str:
    """Abbreviate *count*: ``987``, ``1.2K``, ``34M``, ``1.1B``."""
    return _abbreviate(count)


def format_view_count(count: int, language: str = "en") -> str:
    """
    Format a view count as a display label.

    Parameters
    ----------
    count : int
        Number of views.
    language : str, optional
        Display language (default ``"en"``).

    Returns
    -------
    str
        e.g. ``"1.2K views"``, ``"12M views"``, ``"987 görüntülenme"``.
    """
    return f"{_abbreviate(count)} {_VIEWS_SUFFIX[_lang(language)]}"


def normalize_view_count(raw: str, language: str = "en") -> str:
    """
    Normalize any view-count text into one stable display label.

    Loading placeholders are localized, numbers in any supported notation
    are re-formatted, and anything else passes through unchanged.

    Parameters
    ----------
    raw : str
        View-count text as found on the page (``"1,234 views"``, ``"1.2K"``,
        ``"123.456 görüntüleme"``, ``"Loading..."``).
    language : str, optional
        Display language (default ``"en"``).

    Returns
    -------
    str
        The normalized label, ``""`` for empty input.
    """
    trimmed = raw.strip()
    if not trimmed:
        return ""

    if trimmed.lower().startswith(_LOADING_PREFIXES):
        return _LOADING_LABEL[_lang(language)]

    count = approx_number(trimmed)
    if count is None:
        return trimmed
    return format_view_count(count, language)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class PublishedAt(NamedTuple):
    """Display text for a publication date, plus the ISO value when known."""

    display: str
    iso: str | None


_YEAR_TOKENS = frozenset(
    {
        "yıl", "year", "years", "yr", "yrs", "jahr", "jahre", "jahren",
        "año", "años", "ano", "anos", "an", "ans", "année", "années",
        "anno", "anni", "jaar", "jaren", "rok", "lata", "lat",
        "год", "года", "лет", "سنة", "سنوات", "عام", "أعوام", "年",
    }
)
_MONTH_TOKENS = frozenset(
    {
        "ay", "month", "months", "monat", "monate", "monaten",
        "mes", "meses", "mois", "mese", "mesi", "miesiąc", "miesiące",
        "miesięcy", "месяц", "месяца", "месяцев", "شهر", "أشهر", "月",
    }
)
_WEEK_TOKENS = frozenset(
    {
        "hafta", "week", "weeks", "woche", "wochen", "semana", "semanas",
        "semaine", "semaines", "settimana", "settimane",
        "неделя", "недели", "недель", "週間", "周",
    }
)
_DAY_TOKENS = frozenset(
    {
        "gün", "day", "days", "tag", "tagen", "día", "días", "jour", "jours",
        "giorno", "giorni", "день", "дня", "дней", "日", "天",
    }
)
_HOUR_TOKENS = frozenset(
    {
        "saat", "hour", "hours", "stunde", "stunden", "hora", "horas",
        "heure", "heures", "ora", "ore", "час", "часа", "часов", "時", "小时",
    }
)
_MINUTE_TOKENS = frozenset(
    {
        "dakika", "minute", "minutes", "min", "mins", "minuten", "minuto",
        "minuti", "minutos", "минута", "минуты", "минут", "分", "分钟",
    }
)
_SECOND_TOKENS = frozenset(
    {"saniye", "second", "seconds", "sec", "secs", "sekunde", "sekunden", "segundo", "segundos"}
)

# Whole-word matches, largest unit first.
_UNIT_TOKENS: tuple[tuple[frozenset[str], str], ...] = (
    (_YEAR_TOKENS, "years"),
    (_MONTH_TOKENS, "months"),
    (_WEEK_TOKENS, "weeks"),
    (_DAY_TOKENS, "days"),
    (_HOUR_TOKENS, "hours"),
    (_MINUTE_TOKENS, "minutes"),
    (_SECOND_TOKENS, "seconds"),
)

_FIRST_INT_RE = re.compile(r"\d+")
_WORD_RE = re.compile(r"[^\W\d_]+")
_CJK_UNIT_RE = re.compile(r"\d+\s*(年|月|週間|周|日|天|時間|小时|分钟|分)")
_ISO_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

_TR_MONTHS: dict[str, int] = {
    "oca": 1, "ocak": 1, "şub": 2, "şubat": 2, "mar": 3, "mart": 3,
    "nis": 4, "nisan": 4, "may": 5, "mayıs": 5, "haz": 6, "haziran": 6,
    "tem": 7, "temmuz": 7, "ağu": 8, "ağustos": 8, "eyl": 9, "eylül": 9,
    "eki": 10, "ekim": 10, "kas": 11, "kasım": 11, "ara": 12, "aralık": 12,
}
_TR_DATE_RE = re.compile(r"^(\d{1,2})\s+([^\W\d_]+)\.?\s+(\d{4})$")
_EN_ABSOLUTE_RE = re.compile(
    r"^(?:[A-Za-z]+\.?\s+\d{1,2},?\s+\d{4}|\d{1,2}\s+[A-Za-z]+\.?\s+\d{4})$"
)
# Prefixes such as "Streamed live on" or "Premiered" in front of a date.
_DATE_PREFIX_RE = re.compile(
    r"^(?:streamed live on|premiered on|premiered|published on|uploaded on|started streaming on)\s+",
    re.IGNORECASE,
)

_CJK_UNITS: dict[str, str] = {
    "年": "years",
    "月": "months",
    "週間": "weeks",
    "周": "weeks",
    "日": "days",
    "天": "days",
    "時間": "hours",
    "小时": "hours",
    "分钟": "minutes",
    "分": "minutes",
}


def _to_iso(moment: _dt.datetime) -> str:
    return moment.astimezone(_dt.timezone.utc).strftime(ISO_FORMAT)


def _reference(now: _dt.datetime | None) -> _dt.datetime:
    if now is None:
        return _dt.datetime.now(_dt.timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=_dt.timezone.utc)
    return now


def _relative_unit(lower: str) -> str | None:
    words = set(_WORD_RE.findall(lower))
    for tokens, unit in _UNIT_TOKENS:
        if words & tokens:
            return unit
    cjk = _CJK_UNIT_RE.search(lower)
    if cjk:
        return _CJK_UNITS[cjk.group(1)]
    return None


def relative_to_iso(raw: str, now: _dt.datetime | None = None) -> str | None:
    """
    Resolve a localized relative phrase to an ISO-8601 timestamp.

    Works on "5 days ago", "Streamed 2 weeks ago", "3 yıl önce",
    "vor 2 Jahren", "hace 2 años", "il y a 3 mois", "2 недели назад" and
    similar phrases by taking the first integer and the first recognized
    unit word. Calendar arithmetic is used, so "1 month ago" on March 31st
    lands on the last day of February.

    Parameters
    ----------
    raw : str
        The relative phrase.
    now : datetime.datetime | None, optional
        Reference instant (default: current UTC time).

    Returns
    -------
    str | None
        ``YYYY-MM-DDTHH:MM:SSZ``, or None when the phrase is not relative.
    """
    lower = raw.strip().lower()
    if not lower:
        return None

    number = _FIRST_INT_RE.search(lower)
    if not number:
        return None
    amount = int(number.group(0))
    if amount <= 0:
        return None

    unit = _relative_unit(lower)
    if unit is None:
        return None

    moment = _reference(now) - relativedelta(**{unit: amount})
    return _to_iso(moment)


def absolute_to_iso(raw: str) -> str | None:
    """
    Convert an absolute date to an ISO-8601 timestamp at UTC midnight.

    Supported forms: ``2025-09-11`` (and longer ISO strings, truncated to
    the date), ``Sep 11, 2025``, ``September 11, 2025``, ``11 Sep 2025``,
    and the Turkish ``11 Eyl 2025`` / ``11 Eylül 2025``. A leading
    "Premiered" / "Streamed live on" is ignored.

    Parameters
    ----------
    raw : str
        Date text.

    Returns
    -------
    str | None
        ``YYYY-MM-DDT00:00:00Z``, or None when not recognized.
    """
    trimmed = _DATE_PREFIX_RE.sub("", raw.strip())
    if not trimmed:
        return None

    iso_match = _ISO_DATE_PREFIX_RE.match(trimmed)
    if iso_match:
        year, month, day = (int(part) for part in iso_match.groups())
        try:
            return _to_iso(_dt.datetime(year, month, day, tzinfo=_dt.timezone.utc))
        except ValueError:
            return None

    tr_match = _TR_DATE_RE.match(trimmed.lower())
    if tr_match and tr_match.group(2) in _TR_MONTHS:
        try:
            moment = _dt.datetime(
                int(tr_match.group(3)),
                _TR_MONTHS[tr_match.group(2)],
                int(tr_match.group(1)),
                tzinfo=_dt.timezone.utc,
            )
        except ValueError:
            return None
        return _to_iso(moment)

    if _EN_ABSOLUTE_RE.match(trimmed):
        try:
            parsed = dateutil_parser.parse(trimmed)
        except (ValueError, OverflowError):
            return None
        return _to_iso(
            _dt.datetime(parsed.year, parsed.month, parsed.day, tzinfo=_dt.timezone.utc)
        )

    return None


_RELATIVE_LABELS: dict[str, dict[str, tuple[str, str]]] = {
    "en": {
        "years": ("year", "years"),
        "months": ("month", "months"),
        "weeks": ("week", "weeks"),
        "days": ("day", "days"),
        "hours": ("hour", "hours"),
        "minutes": ("minute", "minutes"),
    },
    "tr": {
        "years": ("yıl", "yıl"),
        "months": ("ay", "ay"),
        "weeks": ("hafta", "hafta"),
        "days": ("gün", "gün"),
        "hours": ("saat", "saat"),
        "minutes": ("dakika", "dakika"),
    },
}
_JUST_NOW: dict[str, str] = {"en": "Just now", "tr": "Az önce"}


def parse_iso(value: str) -> _dt.datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed) into an aware datetime."""
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        moment = _dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=_dt.timezone.utc)
    return moment


def format_relative(
    iso: str, now: _dt.datetime | None = None, language: str = "en"
) -> str:
    """
    Render an ISO-8601 timestamp as "N units ago".

    The largest non-zero calendar component wins (years, months, weeks,
    days, hours, minutes); under a minute is "Just now".

    Parameters
    ----------
    iso : str
        Timestamp to render.
    now : datetime.datetime | None, optional
        Reference instant (default: current UTC time).
    language : str, optional
        Display language (default ``"en"``).

    Returns
    -------
    str
        The label, or *iso* unchanged when it cannot be parsed.
    """
    moment = parse_iso(iso)
    if moment is None:
        return iso

    lang = _lang(language)
    delta = relativedelta(_reference(now), moment)
    weeks, days = divmod(delta.days, 7)
    components = (
        ("years", delta.years),
        ("months", delta.months),
        ("weeks", weeks),
        ("days", days),
        ("hours", delta.hours),
        ("minutes", delta.minutes),
    )
    for unit, value in components:
        if value > 0:
            singular, plural = _RELATIVE_LABELS[lang][unit]
            word = singular if value == 1 else plural
            return f"{value} {word} önce" if lang == "tr" else f"{value} {word} ago"
    return _JUST_NOW[lang]


def normalize_published_at(
    raw: str,
    iso_hint: str | None = None,
    *,
    now: _dt.datetime | None = None,
    language: str = "en",
) -> PublishedAt:
    """
    Normalize publication-date text.

    Resolution order: a trusted ISO hint, then relative-phrase resolution
    anchored to *now*, then absolute-date parsing. Anything else is
    returned as-is with no ISO value; this function never raises.

    Parameters
    ----------
    raw : str
        Date text as displayed ("3 days ago", "Sep 11, 2025", ...).
    iso_hint : str | None, optional
        A machine-readable date already known for this entity.
    now : datetime.datetime | None, optional
        Reference instant (default: current UTC time).
    language : str, optional
        Display language (default ``"en"``).

    Returns
    -------
    PublishedAt
        Display label and ISO timestamp (or None).

    Examples
    --------
    >>> now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    >>> normalize_published_at("3 days ago", now=now)
    PublishedAt(display='3 days ago', iso='2026-10-16T12:00:00Z')
    >>> normalize_published_at("garbage")
    PublishedAt(display='garbage', iso=None)
    """
    if iso_hint and iso_hint.strip():
        hint = iso_hint.strip()
        moment = parse_iso(hint)
        canonical = _to_iso(moment) if moment is not None else hint
        return PublishedAt(format_relative(canonical, now, language), canonical)

    trimmed = raw.strip()
    if not trimmed:
        return PublishedAt("", None)

    relative_iso = relative_to_iso(trimmed, now)
    if relative_iso:
        return PublishedAt(format_relative(relative_iso, now, language), relative_iso)

    absolute_iso = absolute_to_iso(trimmed)
    if absolute_iso:
        return PublishedAt(format_relative(absolute_iso, now, language), absolute_iso)

    return PublishedAt(trimmed, None)


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


def parse_duration(text: str) -> int | None:
    """
    Convert ``"m:ss"`` or ``"h:mm:ss"`` display text to seconds.

    Parameters
    ----------
    text : str
        Duration text.

    Returns
    -------
    int | None
        Seconds, or None when the text is not a duration. ``"0:00"`` is a
        valid zero-length duration and returns ``0``.
    """
    trimmed = text.strip()
    if not trimmed or ":" not in trimmed:
        return None

    parts = trimmed.split(":")
    if not all(part.isdigit() for part in parts):
        return None

    numbers = [int(part) for part in parts]
    if len(numbers) == 2:
        return numbers[0] * 60 + numbers[1]
    if len(numbers) == 3:
        return numbers[0] * 3600 + numbers[1] * 60 + numbers[2]
    return None


def format_duration(seconds: int) -> str:
    """Format seconds as ``"m:ss"`` or ``"h:mm:ss"``."""
    if seconds < 3600:
        return f"{seconds // 60}:{seconds % 60:02d}"
    return f"{seconds // 3600}:{(seconds % 3600) // 60:02d}:{seconds % 60:02d}"


# ---------------------------------------------------------------------------
# URLs and fragments
# ---------------------------------------------------------------------------


def unescape_fragment(text: str) -> str:
    r"""
    Unescape a JSON string fragment captured by a raw-text regex.

    Handles ``\/``, ``&``, ``=``, ``\n`` and ``\"``.
    """
    return (
        text.replace("\\/", "/")
        .replace("\\u0026", "&")
        .replace("\\u003d", "=")
        .replace("\\n", "\n")
        .replace('\\"', '"')
    )


def normalize_url(raw: str) -> str:
    """
    Normalize an image or page URL for consistent caching.

    Protocol-relative URLs get ``https:``, ``http:`` is upgraded, JSON
    escapes are removed and the query string is dropped. Size hints in the
    path (``=s88``, ``-no``) are kept.

    Parameters
    ----------
    raw : str
        URL as found in page data.

    Returns
    -------
    str
        The normalized URL, ``""`` for empty input.
    """
    url = unescape_fragment(raw.strip())
    if not url:
        return ""
    if url.startswith("//"):
        url = "https:" + url
    elif url.startswith("http://"):
        url = "https://" + url[len("http://") :]
    query = url.find("?")
    if query >= 0:
        url = url[:query]
    return url


def thumbnail_url(video_id: str, quality: ThumbnailQuality = ThumbnailQuality.MEDIUM) -> str:
    """Build the static i.ytimg.com thumbnail URL for a video id."""
    return f"https://i.ytimg.com/vi/{video_id}/{quality.value}.jpg"


def is_short_form(video: Video, max_seconds: int = 60) -> bool:
    """
    Heuristic short-form check: duration known, non-zero and under
    *max_seconds*.

    Returns False whenever the duration is unknown. A zero duration marks
    live content and is never short-form.
    """
    seconds = video.duration_seconds
    if seconds is None:
        seconds = parse_duration(video.duration_text)
    if seconds is None:
        return False
    return 0 < seconds < max_seconds

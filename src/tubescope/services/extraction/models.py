"""
Pydantic models for the extraction pipeline.

Provides the transient values passed between pipeline stages and the
cache's key and envelope types.

Models
------
Locale
    Interface language and region a page is requested with.
RawDocument
    A fetched page body plus the request locale.
Candidate
    A scored value inside the candidate scorer.
CacheKey
    Deterministic cache key for an entity or collection request.
CacheEntry
    Serialized value plus absolute expiry, as stored by the TTL cache.
ExtractionContext
    Display language and reference instant used during normalization.
"""

from __future__ import annotations

import datetime as _dt
import hashlib
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tubescope.models.enums import CollectionKind, EntityKind


class Locale(BaseModel):
    """
    Interface language (``hl``) and region (``gl``) of a request.

    Attributes
    ----------
    hl : str
        Interface language code, e.g. ``"en"``.
    gl : str
        Two-letter region code, e.g. ``"US"``.
    """

    model_config = ConfigDict(frozen=True)

    hl: str = "en"
    gl: str = "US"

    @field_validator("hl")
    @classmethod
    def validate_hl(cls, v: str) -> str:
        """Lower-case the language code; it must not be empty."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("hl must not be empty")
        return cleaned.lower()

    @field_validator("gl")
    @classmethod
    def validate_gl(cls, v: str) -> str:
        """Upper-case the region code; it must not be empty."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("gl must not be empty")
        return cleaned.upper()

    @property
    def language(self) -> str:
        """Primary language subtag, used to pick display strings."""
        return self.hl.split("-")[0]


class RawDocument(BaseModel):
    """
    A fetched page.

    Attributes
    ----------
    url : str
        Final URL of the request.
    text : str
        Decoded response body.
    locale : Locale
        Locale the page was requested with.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    text: str
    locale: Locale = Field(default_factory=Locale)


class Candidate(BaseModel):
    """
    One plausible value for an ambiguous field.

    Attributes
    ----------
    value : str
        The candidate value (an image URL).
    score : int
        Heuristic score; higher is better.
    position : int
        First-seen order, used to break ties.
    """

    model_config = ConfigDict(frozen=True)

    value: str
    score: int
    position: int = 0


class CacheKey(BaseModel):
    """
    Deterministic cache key.

    The raw form is ``"<kind>:<scope>:<field>=<value>|hl=<hl>|gl=<gl>"``.
    Queries are lower-cased so that casing does not fragment the cache.

    Examples
    --------
    >>> CacheKey.for_entity(EntityKind.CHANNEL, "UCxyz", Locale()).raw
    'channel:info:id=UCxyz|hl=en|gl=US'
    """

    model_config = ConfigDict(frozen=True)

    raw: str

    @classmethod
    def for_entity(cls, kind: EntityKind, identifier: str, locale: Locale) -> CacheKey:
        """Build the key for a single-entity request."""
        return cls(
            raw=f"{kind.value}:info:id={identifier.strip()}|hl={locale.hl}|gl={locale.gl}"
        )

    @classmethod
    def for_collection(
        cls, kind: CollectionKind, identifier: str, locale: Locale
    ) -> CacheKey:
        """Build the key for a collection request."""
        if kind.is_search:
            field, value = "q", identifier.strip().lower()
        else:
            field, value = "id", identifier.strip()
        return cls(raw=f"{kind.value}:list:{field}={value}|hl={locale.hl}|gl={locale.gl}")

    def hashed_filename(self, extension: str = "json") -> str:
        """File name for the disk layer: sha256 of the raw key."""
        digest = hashlib.sha256(self.raw.encode("utf-8")).hexdigest()
        return f"{digest}.{extension}"

    def __str__(self) -> str:
        return self.raw


class CacheEntry(BaseModel):
    """
    A cached value with its absolute expiry.

    Attributes
    ----------
    key : str
        Raw cache key.
    value : Any
        JSON-compatible serialized entity or collection.
    expires_at : float
        Expiry as seconds since the epoch.
    """

    key: str
    value: Any
    expires_at: float

    def is_valid(self, now: float) -> bool:
        """
        Check whether the entry is still live at *now*.

        Parameters
        ----------
        now : float
            Current time as seconds since the epoch.

        Returns
        -------
        bool
            True when ``now`` is strictly before the expiry.
        """
        return now < self.expires_at


class ExtractionContext(BaseModel):
    """
    Inputs to normalization that are not part of the page.

    Attributes
    ----------
    language : str
        Display language for labels (``"en"`` or ``"tr"``; others fall
        back to English).
    now : datetime.datetime | None
        Reference instant for relative dates; ``None`` means "current time".
    """

    model_config = ConfigDict(frozen=True)

    language: str = "en"
    now: _dt.datetime | None = None

    def reference_time(self) -> _dt.datetime:
        """Return the reference instant as an aware UTC datetime."""
        if self.now is None:
            return _dt.datetime.now(_dt.timezone.utc)
        if self.now.tzinfo is None:
            return self.now.replace(tzinfo=_dt.timezone.utc)
        return self.now.astimezone(_dt.timezone.utc)

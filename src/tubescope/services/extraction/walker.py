"""
Schema walker / field resolver.

The site encodes the same logical entity with several renderer shapes that
change with layout rollouts. Each entity kind therefore has an ordered list
of named schema strategies. The walker runs every strategy in order and
merges their partial results per field, first-found-wins: a field filled by
an earlier strategy is never overwritten by a later one, so fragments from
different shapes combine into one record.

Raw-text scans are a separate, last-resort stage. They run only after every
structured strategy has been tried, and only for fields that are still
empty.

Classes
-------
SchemaStrategy
    A named structured extractor over a ``JsonTree``.
RawScan
    A named last-resort extractor over raw page text.
EntitySchema
    The strategies, raw scans and builder for one entity kind.
SchemaWalker
    Runs an ``EntitySchema`` against a parsed tree.

Functions
---------
is_empty
    The definition of "not found" used by the merge.
merge_fields
    First-found-wins merge of one partial result into another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from tubescope.services.extraction.models import ExtractionContext
from tubescope.services.extraction.tree import JsonTree

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

Fields = dict[str, Any]


def is_empty(value: Any) -> bool:
    """
    Return True when *value* means "not found".

    ``None``, blank strings and empty containers are empty. ``0`` and
    ``False`` are real values.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return not value
    return False


def merge_fields(merged: Fields, partial: Mapping[str, Any]) -> list[str]:
    """
    Merge *partial* into *merged*, first-found-wins per field.

    Parameters
    ----------
    merged : Fields
        Accumulated fields; updated in place.
    partial : Mapping[str, Any]
        Fields produced by one strategy.

    Returns
    -------
    list[str]
        Names of the fields this call filled.
    """
    filled: list[str] = []
    for name, value in partial.items():
        if is_empty(value):
            continue
        if is_empty(merged.get(name)):
            merged[name] = value
            filled.append(name)
    return filled


@dataclass(frozen=True)
class SchemaStrategy:
    """
    A named structured extractor.

    Attributes
    ----------
    name : str
        Renderer path or shape name, used in logs.
    extract : Callable[[JsonTree], Fields | None]
        Returns the fields this shape provides, or None when the shape is
        absent from the tree.
    """

    name: str
    extract: Callable[[JsonTree], Fields | None]

    def apply(self, tree: JsonTree) -> Fields | None:
        """Run the extractor; a shape that is absent yields None."""
        return self.extract(tree)


@dataclass(frozen=True)
class RawScan:
    """
    A named last-resort extractor over raw page text.

    Attributes
    ----------
    name : str
        Scan name, used in logs.
    fields : tuple[str, ...]
        Fields this scan can fill. It runs only if one of them is empty.
    scan : Callable[[str, Fields], Fields]
        Receives the raw text and the fields resolved so far; returns
        the fields it found.
    """

    name: str
    fields: tuple[str, ...]
    scan: Callable[[str, Fields], Fields]


@dataclass(frozen=True)
class EntitySchema(Generic[E]):
    """
    Everything the walker needs for one entity kind.

    Attributes
    ----------
    kind : str
        Entity kind name, used in logs.
    strategies : Sequence[SchemaStrategy]
        Structured strategies, most preferred first.
    build : Callable[[Fields, ExtractionContext], E]
        Turns merged fields into the entity (normalization happens here).
    raw_scans : Sequence[RawScan]
        Last-resort scans, in order.
    """

    kind: str
    strategies: Sequence[SchemaStrategy]
    build: Callable[[Fields, ExtractionContext], E]
    raw_scans: Sequence[RawScan] = field(default_factory=tuple)


class SchemaWalker(Generic[E]):
    """
    Resolve one entity from a parsed tree.

    Parameters
    ----------
    schema : EntitySchema
        Strategies, scans and builder for the entity kind.

    Examples
    --------
    >>> walker = SchemaWalker(CHANNEL_SCHEMA)
    >>> channel = walker.resolve(tree, raw_text=html, id_hint="UC...")
    """

    def __init__(self, schema: EntitySchema[E]) -> None:
        self.schema = schema

    def collect(self, tree: JsonTree | Any) -> tuple[Fields, list[str]]:
        """
        Run every structured strategy and merge the results.

        Parameters
        ----------
        tree : JsonTree | Any
            Parsed tree (wrapped or not).

        Returns
        -------
        tuple[Fields, list[str]]
            Merged fields and the names of the strategies that matched.
        """
        root = tree if isinstance(tree, JsonTree) else JsonTree(tree)
        merged: Fields = {}
        matched: list[str] = []
        for strategy in self.schema.strategies:
            partial = strategy.apply(root)
            if partial is None:
                logger.debug("%s strategy %s: shape absent", self.schema.kind, strategy.name)
                continue
            matched.append(strategy.name)
            filled = merge_fields(merged, partial)
            logger.debug(
                "%s strategy %s filled %s", self.schema.kind, strategy.name, filled or "nothing"
            )
        return merged, matched

    def run_raw_scans(self, raw_text: str, merged: Fields) -> list[str]:
        """
        Run the last-resort scans for fields that are still empty.

        Returns the names of the scans that filled something.
        """
        used: list[str] = []
        if not raw_text:
            return used
        for raw_scan in self.schema.raw_scans:
            if not any(is_empty(merged.get(name)) for name in raw_scan.fields):
                continue
            found = raw_scan.scan(raw_text, dict(merged))
            wanted = {k: v for k, v in found.items() if k in raw_scan.fields}
            if merge_fields(merged, wanted):
                used.append(raw_scan.name)
        if used:
            logger.info("%s resolved with last-resort scans %s", self.schema.kind, used)
        return used

    def resolve(
        self,
        tree: JsonTree | Any,
        raw_text: str = "",
        id_hint: str = "",
        context: ExtractionContext | None = None,
    ) -> E | None:
        """
        Resolve a best-effort entity.

        Parameters
        ----------
        tree : JsonTree | Any
            Parsed tree for the page.
        raw_text : str, optional
            Raw page text for the last-resort scans.
        id_hint : str, optional
            The requested id. Used only when some strategy matched but none
            supplied an id.
        context : ExtractionContext | None, optional
            Normalization inputs (default: English, current time).

        Returns
        -------
        E | None
            The entity, or None when no recognizable schema matched or no
            valid identifier could be determined.
        """
        merged, matched = self.collect(tree)
        if not matched:
            logger.debug("%s: no recognizable schema", self.schema.kind)
            return None

        self.run_raw_scans(raw_text, merged)

        if is_empty(merged.get("id")) and id_hint:
            merged["id"] = id_hint
        if is_empty(merged.get("id")):
            logger.warning(
                "%s matched %s but no identifier was found", self.schema.kind, matched
            )
            return None

        try:
            return self.schema.build(merged, context or ExtractionContext())
        except ValidationError as e:
            logger.warning(
                "%s '%s' failed validation: %s", self.schema.kind, merged.get("id"), e
            )
            return None

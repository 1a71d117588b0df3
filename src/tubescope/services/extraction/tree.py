"""
Safe accessors over a parsed JSON tree.

The embedded page data is an undocumented, versionless graph: any key may be
missing and any value may have an unexpected type. ``JsonTree`` wraps such a
value and answers "string at path, or empty" style questions without ever
raising, so schema strategies can be written as plain lookups.

Paths are dotted strings. A segment made of digits indexes a list, and a
negative segment (``-1``) indexes from the end::

    tree.get_str("header.c4TabbedHeaderRenderer.title")
    tree.get_str("avatar.thumbnails.-1.url")
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

_MISSING = object()


def _split(path: str) -> list[str]:
    return [segment for segment in path.split(".") if segment] if path else []


def _step(value: Any, segment: str) -> Any:
    if isinstance(value, dict):
        return value.get(segment, _MISSING)
    if isinstance(value, list):
        try:
            index = int(segment)
        except ValueError:
            return _MISSING
        if -len(value) <= index < len(value):
            return value[index]
    return _MISSING


class JsonTree:
    """
    Read-only, never-raising view over a JSON value.

    Parameters
    ----------
    value : Any
        Any JSON-compatible value (dict, list, str, number, bool or None).

    Examples
    --------
    >>> tree = JsonTree({"title": {"runs": [{"text": "Hello "}, {"text": "world"}]}})
    >>> tree.text("title")
    'Hello world'
    >>> tree.get_str("missing.path")
    ''
    """

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value.value if isinstance(value, JsonTree) else value

    def __repr__(self) -> str:
        return f"JsonTree({type(self.value).__name__})"

    def __bool__(self) -> bool:
        return self.value is not None and self.value != {} and self.value != []

    # ------------------------------------------------------------------
    # Path lookups
    # ------------------------------------------------------------------

    def get(self, path: str = "", default: Any = None) -> Any:
        """Return the raw value at *path*, or *default* when absent."""
        current = self.value
        for segment in _split(path):
            current = _step(current, segment)
            if current is _MISSING:
                return default
        return current

    def has(self, path: str) -> bool:
        """Return True when *path* resolves to a non-null value."""
        return self.get(path) is not None

    def node(self, path: str = "") -> JsonTree:
        """Return the subtree at *path* (an empty tree when absent)."""
        return JsonTree(self.get(path))

    def get_str(self, path: str = "") -> str:
        """
        Return the string at *path*, or ``""``.

        Numbers are converted to their string form; every other type
        yields the empty string.
        """
        value = self.get(path)
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return ""

    def get_int(self, path: str = "") -> int | None:
        """Return the integer at *path* (numeric strings included), or None."""
        value = self.get(path)
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.isdigit():
                return int(stripped)
        return None

    def get_list(self, path: str = "") -> list[Any]:
        """Return the list at *path*, or ``[]``."""
        value = self.get(path)
        return value if isinstance(value, list) else []

    def get_dict(self, path: str = "") -> dict[str, Any]:
        """Return the mapping at *path*, or ``{}``."""
        value = self.get(path)
        return value if isinstance(value, dict) else {}

    def nodes(self, path: str = "") -> list[JsonTree]:
        """Return the list at *path* as subtrees."""
        return [JsonTree(item) for item in self.get_list(path)]

    # ------------------------------------------------------------------
    # Renderer conventions
    # ------------------------------------------------------------------

    def text(self, path: str = "") -> str:
        """
        Return the display text of a text object at *path*.

        Understands the encodings the site uses: a plain string,
        ``{"simpleText": ...}``, ``{"runs": [{"text": ...}, ...]}`` and the
        view-model form ``{"content": ...}``.
        """
        node = self.node(path)
        if isinstance(node.value, str):
            return node.value
        simple = node.get_str("simpleText")
        if simple:
            return simple
        runs = node.get_list("runs")
        if runs:
            return "".join(JsonTree(run).get_str("text") for run in runs)
        return node.get_str("content")

    def first_run(self, path: str = "") -> JsonTree:
        """Return the first ``runs`` entry of the text object at *path*."""
        return self.node(path).node("runs.0")

    def thumbnail(self, path: str = "") -> str:
        """
        Return the URL of the last (largest) image at *path*.

        Accepts ``{"thumbnails": [...]}``, the view-model
        ``{"sources": [...]}`` and a bare list of ``{"url": ...}`` objects.
        """
        node = self.node(path)
        for key in ("thumbnails", "sources", "image.sources"):
            items = node.get_list(key)
            if items:
                return JsonTree(items[-1]).get_str("url")
        if isinstance(node.value, list) and node.value:
            return JsonTree(node.value[-1]).get_str("url")
        return ""

    # ------------------------------------------------------------------
    # Recursive search
    # ------------------------------------------------------------------

    def iter_key(self, key: str) -> Iterator[JsonTree]:
        """
        Yield every value stored under *key*, depth-first.

        Parameters
        ----------
        key : str
            Mapping key to search for at any depth.

        Yields
        ------
        JsonTree
            Each matching value, wrapped.
        """
        for _, found in self.iter_keys((key,)):
            yield found

    def iter_keys(self, keys: Iterable[str]) -> Iterator[tuple[str, JsonTree]]:
        """
        Yield ``(key, value)`` for every value stored under any of *keys*.

        Matches come out in document order, which keeps list items from
        different renderer types interleaved as the page shows them. The
        matched values themselves are still searched.
        """
        wanted = frozenset(keys)
        stack: list[Any] = [self.value]
        while stack:
            current = stack.pop()
            if isinstance(current, dict):
                children = []
                for child_key, child in current.items():
                    if child_key in wanted:
                        yield child_key, JsonTree(child)
                    if isinstance(child, (dict, list)):
                        children.append(child)
                stack.extend(reversed(children))
            elif isinstance(current, list):
                stack.extend(
                    reversed([item for item in current if isinstance(item, (dict, list))])
                )

    def find_first(self, key: str) -> JsonTree:
        """Return the first value stored under *key* at any depth, or an empty tree."""
        for found in self.iter_key(key):
            return found
        return JsonTree(None)

"""Tag picker used when labelling the next session."""

from __future__ import annotations

from dataclasses import dataclass, field


def _key(tag: str) -> str:
    return tag.casefold()


def insert_tag(tags: list[str], tag: str) -> list[str]:
    """Return ``tags`` with ``tag`` added in case-insensitive alphabetical order.

    A tag already present under any capitalisation is not added twice.
    """
    if any(_key(t) == _key(tag) for t in tags):
        return list(tags)
    return sorted([*tags, tag], key=_key)


def merge_tags(known: list[str], incoming: list[str]) -> list[str]:
    """Add every incoming tag that is not already known."""
    merged = list(known)
    for tag in incoming:
        merged = insert_tag(merged, tag)
    return merged


@dataclass
class TagMatch:
    """Result of filtering the picker by a query."""

    tags: list[str]
    offer_add: bool
    query: str = ""
    exact: str | None = None


@dataclass
class TagPicker:
    """Choose zero or one tag from the known tags, or propose a new one."""

    tags: list[str] = field(default_factory=list)
    selected: str | None = None

    def __post_init__(self):
        self.tags = merge_tags([], self.tags)

    def filter(self, query: str) -> TagMatch:
        query = query.strip()
        if not query:
            return TagMatch(tags=list(self.tags), offer_add=False)

        needle = _key(query)
        matches = [t for t in self.tags if needle in _key(t)]
        exact = next((t for t in self.tags if _key(t) == needle), None)
        return TagMatch(tags=matches, offer_add=exact is None, query=query, exact=exact)

    def toggle(self, tag: str) -> str | None:
        """Select ``tag``, or clear the selection if it is already selected."""
        if self.selected is not None and _key(self.selected) == _key(tag):
            self.selected = None
        else:
            self.selected = tag
        return self.selected

    def clear(self) -> None:
        self.selected = None

    def merge(self, tags: list[str]) -> None:
        self.tags = merge_tags(self.tags, tags)

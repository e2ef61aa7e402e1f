"""Tag definitions."""

from __future__ import annotations

import threading
from typing import Iterable

from .errors import DuplicateTag, InvalidTag, NotFound
from .models import Tag

DEFAULT_TAG_COLOR = "#808080"


class TagRegistry:
    """Holds tag definitions keyed by id with unique names."""

    def __init__(self, tags: Iterable[Tag] = ()) -> None:
        self._lock = threading.Lock()
        self._tags: dict[int, Tag] = {tag.id: tag for tag in tags}
        self._next_id = max(self._tags, default=0) + 1

    def create(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        cleaned = name.strip()
        if not cleaned:
            raise InvalidTag(name)

        with self._lock:
            if any(tag.name == cleaned for tag in self._tags.values()):
                raise DuplicateTag(cleaned)
            tag = Tag(id=self._next_id, name=cleaned, color=color or DEFAULT_TAG_COLOR)
            self._tags[tag.id] = tag
            self._next_id += 1
        return tag

    def delete(self, tag_id: int) -> Tag:
        with self._lock:
            try:
                return self._tags.pop(tag_id)
            except KeyError as exc:
                raise NotFound("tag", tag_id) from exc

    def get(self, tag_id: int) -> Tag:
        try:
            return self._tags[tag_id]
        except KeyError as exc:
            raise NotFound("tag", tag_id) from exc

    def list(self) -> list[Tag]:
        return sorted(self._tags.values(), key=lambda tag: tag.name)

#!/usr/bin/env python3
"""
KUBEVAULT CORPUS - The Haystack
-------------------------------
Searches unknown YAML for specific data shapes. Rendered manifests are
treated as untyped trees (dict / list / scalar); callers supply small
filter-map predicates that return a value for a match and None otherwise.

    corpus = Corpus.from_text(RENDERED_CHART)
    names = corpus.filter_map_mappings(lambda m: as_str(m.get("name")))

Author: KubeVault Team
Date: 2026-10-17
"""

import logging
from typing import Any, Callable, Iterable, List, Optional, TextIO, TypeVar

from ruamel.yaml import YAML, YAMLError

from kubevault.core.errors import ManifestParseError

logger = logging.getLogger("kubevault.corpus")

T = TypeVar("T")

DOCUMENT_DELIMITER = "---"


# --- Option-style accessors -------------------------------------------------
# Each returns the node itself when it has the requested kind, else None,
# so extractors can chain lookups without raising on foreign shapes.

def as_mapping(value: Any) -> Optional[dict]:
    return value if isinstance(value, dict) else None


def as_sequence(value: Any) -> Optional[list]:
    return value if isinstance(value, list) else None


def as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def lookup(node: Any, *keys: Any) -> Any:
    """
    Follows `keys` through nested mappings.
    Returns None as soon as a key is absent or a node is not a mapping.
    """
    for key in keys:
        mapping = as_mapping(node)
        if mapping is None:
            return None
        node = mapping.get(key)
    return node


def is_nonempty_document(segment: str) -> bool:
    """A segment counts as a document if any line is neither blank nor a comment."""
    for line in segment.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return True
    return False


def is_recursive(root: Any) -> bool:
    """
    True when a container is reachable from itself.
    Tracks the ids of containers on the current ancestor path; shared
    aliases that do not loop back are fine and are only expanded once.
    """
    on_path = set()
    finished = set()
    stack = [(root, False)]
    while stack:
        node, leaving = stack.pop()
        if not isinstance(node, (dict, list)):
            continue
        node_id = id(node)
        if leaving:
            on_path.discard(node_id)
            finished.add(node_id)
            continue
        if node_id in on_path:
            return True
        if node_id in finished:
            continue
        on_path.add(node_id)
        stack.append((node, True))
        stack.extend((child, False) for child in _children(node))
    return False


def _children(node: Any) -> Iterable[Any]:
    # Mapping keys are never visited, only their values.
    if isinstance(node, dict):
        return node.values()
    if isinstance(node, list):
        return node
    return ()


class Corpus:
    """
    An immutable set of parsed YAML documents.

    Supports multiple documents in one stream separated by `---`.
    Documents holding only blank lines or comments are dropped.
    """

    def __init__(self, documents: Iterable[Any]):
        self._documents = tuple(documents)

    @classmethod
    def from_text(cls, text: str) -> "Corpus":
        """
        Splits `text` on the `---` delimiter and parses each surviving segment.
        Raises ManifestParseError naming the first segment that fails.
        """
        yaml = YAML(typ="safe", pure=True)
        documents = []
        for index, segment in enumerate(text.split(DOCUMENT_DELIMITER), 1):
            if not is_nonempty_document(segment):
                continue
            try:
                document = yaml.load(segment)
            except YAMLError as e:
                raise ManifestParseError(index, str(e)) from e
            # Anchors may alias an ancestor; the walk needs a finite tree
            if is_recursive(document):
                raise ManifestParseError(index, "recursive alias")
            documents.append(document)

        logger.debug(f"Parsed {len(documents)} document(s) from manifest stream")
        return cls(documents)

    @classmethod
    def from_stream(cls, stream: TextIO) -> "Corpus":
        """Reads the whole stream into memory before parsing."""
        return cls.from_text(stream.read())

    @property
    def documents(self) -> tuple:
        return self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self):
        return iter(self._documents)

    def filter_map_mappings(self, filter_map: Callable[[dict], Optional[T]]) -> List[T]:
        """
        Visits every mapping of every document, pre-order and depth-first,
        applying `filter_map`. Returning None excludes the mapping from the
        result; anything else is appended in visiting order.
        """
        results: List[T] = []
        for doc in self._documents:
            for node in _walk(doc):
                if isinstance(node, dict):
                    found = filter_map(node)
                    if found is not None:
                        results.append(found)
        return results

    @staticmethod
    def filter_map_values_from(root: Any, filter_map: Callable[[Any], Optional[T]]) -> List[T]:
        """
        Visits `root` and every node below it (scalars, mappings and
        sequences alike), applying `filter_map`. The root comes first.
        """
        results: List[T] = []
        for node in _walk(root):
            found = filter_map(node)
            if found is not None:
                results.append(found)
        return results


def _walk(root: Any) -> Iterable[Any]:
    """Pre-order depth-first walk using an explicit stack."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        # Reversed so the first child is popped next
        stack.extend(reversed(list(_children(node))))

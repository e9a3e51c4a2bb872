import logging
import numbers
from enum import IntEnum
from typing import Any, Callable, Iterable, Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from LLRBTree import LLRBTreeArray as core
from LLRBTree.validate import validate

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 16


class Color(IntEnum):
    BLACK = core.BLACK
    RED = core.RED

    def __str__(self) -> str:
        return self.name.capitalize()


class TreeDiscipline(IntEnum):
    """Which step of the fix-up splits 4-nodes.

    TWO_THREE splits them on the way back up, so no 4-node survives an
    insertion. TWO_THREE_FOUR splits them on the way down and keeps the
    ones created by rotations.
    """

    TWO_THREE = core.TWO_THREE
    TWO_THREE_FOUR = core.TWO_THREE_FOUR


class InsertEvent(NamedTuple):
    key: int
    color: Color
    parent_key: Optional[int]
    parent_color: Optional[Color]


def narrate(event: InsertEvent) -> None:
    """Observer that logs where a new key ended up and how it is colored."""
    if event.parent_key is None:
        logger.info("No Parent. Newest: %d (%s)", event.key, event.color)
    else:
        logger.info(
            "Parent: %d (%s). Newest: %d (%s)",
            event.parent_key, event.parent_color, event.key, event.color,
        )


class _Missing:
    """Type of MISSING, the result of looking up an absent key."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def _is_integer(key: Any) -> bool:
    return isinstance(key, numbers.Integral) and not isinstance(key, bool)


def _in_range(key: Any) -> bool:
    if not _is_integer(key):
        raise TypeError(f"keys must be integers, not {type(key).__name__}")
    return 0 <= key <= core.KEY_MAX


def check_key(key: Any) -> int:
    """Return `key` as an int, rejecting anything that is not a uint32."""
    if not _in_range(key):
        raise ValueError(f"The key must be between 0 and {core.KEY_MAX}, not {key}")
    return int(key)


class LLRBTreeMap:
    """
    Ordered map from uint32 keys to arbitrary values.

    The tree structure lives in an LLRBTreeArray; values are kept in a list
    indexed by node slot, so a value follows its key through every rotation
    without being touched. Duplicate keys overwrite, missing keys are
    silently absent.

    Args:
        capacity: Initial number of node slots. The arena grows on demand.
        discipline: TreeDiscipline used by insertions.
        observer: Called with an InsertEvent after every insertion that
            created a node.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        discipline: TreeDiscipline = TreeDiscipline.TWO_THREE,
        observer: Optional[Callable[[InsertEvent], None]] = None,
    ) -> None:
        if capacity < 0:
            raise ValueError(f"The capacity must not be negative, not {capacity}")

        self.discipline = TreeDiscipline(discipline)
        self.observer = observer
        self._tree = core.LLRBTreeArray(int(capacity), int(self.discipline))
        self._values: List[Any] = [None] * self._tree.size

    @property
    def array(self) -> core.LLRBTreeArray:
        """The underlying jitted tree."""
        return self._tree

    @property
    def height(self) -> int:
        return int(self._tree.height)

    def _sync_slots(self) -> None:
        missing = self._tree.size - len(self._values)
        if missing > 0:
            logger.debug("Arena grew to %d slots", self._tree.size)
            self._values.extend([None] * missing)

    def insert(self, key: int, value: Any = None) -> bool:
        """Insert or overwrite. Returns True if a new entry was created."""
        key = check_key(key)
        node, created = self._tree.insert_index(key)
        self._sync_slots()
        self._values[node] = value

        if created and self.observer is not None:
            self.observer(self._insert_event(key))

        return bool(created)

    def remove(self, key: int) -> bool:
        """Remove `key`. Returns False (and changes nothing) if it is absent."""
        if not _in_range(key):
            return False

        removed, freed, replaced = self._tree.remove_index(int(key))
        if not removed:
            logger.debug("Key %d not in tree, nothing removed", key)
            return False

        # The successor's node was released; its value moves with its key
        if replaced:
            self._values[replaced] = self._values[freed]
        self._values[freed] = None
        return True

    def lookup(self, key: int, default: Any = MISSING) -> Any:
        """Value stored under `key`, or `default` (MISSING) if it is absent."""
        if not _in_range(key):
            return default

        node = self._tree.search(int(key))
        if node == 0:
            return default
        return self._values[node]

    def lookup_many(self, keys: Iterable[int], default: Any = MISSING) -> List[Any]:
        """Look up many keys at once with the parallel search kernel."""
        keys = list(keys)
        if not keys:
            return []

        # -1 never matches a uint32 key
        queries = np.array(
            [int(key) if _in_range(key) else -1 for key in keys], dtype=np.int64
        )

        nodes = self._tree.search_bulk(queries)
        return [self._values[node] if node else default for node in nodes]

    def traverse(self) -> List[Tuple[int, Color]]:
        """(key, color) pairs in ascending key order."""
        keys, colors = self._tree.keys, self._tree.colors
        return [(int(keys[node]), Color(int(colors[node]))) for node in self._tree.traverse()]

    def items(self) -> List[Tuple[int, Any]]:
        keys = self._tree.keys
        return [(int(keys[node]), self._values[node]) for node in self._tree.traverse()]

    def minimum(self) -> Optional[Tuple[int, Any]]:
        """Entry with the smallest key, or None if the tree is empty."""
        return self._entry(self._tree.minimum())

    def maximum(self) -> Optional[Tuple[int, Any]]:
        """Entry with the largest key, or None if the tree is empty."""
        return self._entry(self._tree.maximum())

    def validate(self) -> int:
        """Check every invariant, returning the black height."""
        return validate(self._tree)

    def free_all(self) -> None:
        """Release every node; the tree is empty afterwards. Idempotent."""
        released = self._tree.free_all()
        self._values = [None] * self._tree.size
        logger.debug("Released %d nodes", released)

    def _entry(self, node: int) -> Optional[Tuple[int, Any]]:
        if node == 0:
            return None
        return int(self._tree.keys[node]), self._values[node]

    def _insert_event(self, key: int) -> InsertEvent:
        node, parent = self._tree.locate(key)
        colors = self._tree.colors
        if parent == 0:
            return InsertEvent(key, Color(int(colors[node])), None, None)
        return InsertEvent(
            key,
            Color(int(colors[node])),
            int(self._tree.keys[parent]),
            Color(int(colors[parent])),
        )

    def __len__(self) -> int:
        return int(self._tree.count)

    def __contains__(self, key: int) -> bool:
        if not _is_integer(key):
            return False
        return 0 <= key <= core.KEY_MAX and self._tree.search(int(key)) != 0

    def __iter__(self) -> Iterator[int]:
        return iter(int(key) for key in self._tree.inorder())

    def __repr__(self) -> str:
        return (
            f"LLRBTreeMap(size={len(self)}, height={self.height}, "
            f"discipline={self.discipline.name})"
        )

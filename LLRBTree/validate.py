import logging

import numpy as np
from numba import njit
from typing import Tuple

from LLRBTree.LLRBTreeArray import BLACK, PATH_SIZE, RED, TWO_THREE

logger = logging.getLogger(__name__)


OK             = 0
ORDER          = 1
RIGHT_LEANING  = 2
DOUBLE_RED     = 3
FOUR_NODE      = 4
BLACK_BALANCE  = 5
RED_ROOT       = 6
COUNT_MISMATCH = 7

MESSAGES = {
    ORDER:          "keys are not in strictly ascending order",
    RIGHT_LEANING:  "node has a lone RED right child",
    DOUBLE_RED:     "RED node has a RED child",
    FOUR_NODE:      "node has two RED children under the 2-3 discipline",
    BLACK_BALANCE:  "paths to empty subtrees cross different numbers of BLACK links",
    RED_ROOT:       "root is RED",
    COUNT_MISMATCH: "number of reachable nodes differs from the tree count",
}


class InvariantError(AssertionError):
    """Raised when a tree no longer satisfies the LLRB invariants."""

    def __init__(self, code: int, key: int) -> None:
        self.code = code
        self.key = key
        super().__init__(f"{MESSAGES[code]} (key {key})")


@njit
def check_invariants(
    keys:       np.ndarray,
    colors:     np.ndarray,
    lefts:      np.ndarray,
    rights:     np.ndarray,
    root:       np.int64,
    count:      np.int64,
    discipline: np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Walk the tree in order once and check every LLRB invariant.

    Black depth (number of BLACK nodes from the root down to a node) is
    propagated to children as they are pushed; every node with an empty
    child closes a path and must agree with the first path seen.

    Returns:
        Tuple[np.int64, np.int64, np.int64]:
            - violation code (OK when the tree is valid).
            - key of the offending node (0 when OK).
            - black height of the tree.
    """

    if root == 0:
        if count != 0:
            return np.int64(COUNT_MISMATCH), np.int64(0), np.int64(0)
        return np.int64(OK), np.int64(0), np.int64(0)

    if colors[root] == RED:
        return np.int64(RED_ROOT), np.int64(keys[root]), np.int64(0)

    black_depth = np.zeros(keys.size, dtype=np.int64)
    stack       = np.zeros(PATH_SIZE, dtype=np.int64)
    expected    = np.int64(-1)
    previous    = np.int64(-1)
    visited     = np.int64(0)
    stack_idx   = 0

    black_depth[root] = 1
    current = root
    while True:
        while current != 0:
            stack[stack_idx] = current
            stack_idx += 1

            left = lefts[current]
            if left != 0:
                black_depth[left] = black_depth[current] + (1 if colors[left] == BLACK else 0)
            current = left

        if stack_idx == 0:
            break

        stack_idx -= 1
        node = stack[stack_idx]
        key  = np.int64(keys[node])
        visited += 1

        if key <= previous:
            return np.int64(ORDER), key, np.int64(0)
        previous = key

        left      = lefts[node]
        right     = rights[node]
        red_left  = left != 0 and colors[left] == RED
        red_right = right != 0 and colors[right] == RED

        if red_right and not red_left:
            return np.int64(RIGHT_LEANING), key, np.int64(0)

        if colors[node] == RED and (red_left or red_right):
            return np.int64(DOUBLE_RED), key, np.int64(0)

        if discipline == TWO_THREE and red_left and red_right:
            return np.int64(FOUR_NODE), key, np.int64(0)

        if left == 0 or right == 0:
            if expected < 0:
                expected = black_depth[node]
            elif black_depth[node] != expected:
                return np.int64(BLACK_BALANCE), key, np.int64(0)

        if right != 0:
            black_depth[right] = black_depth[node] + (1 if colors[right] == BLACK else 0)
        current = right

    if visited != count:
        return np.int64(COUNT_MISMATCH), np.int64(0), np.int64(0)

    return np.int64(OK), np.int64(0), expected


def validate(tree) -> int:
    """
    Check an LLRBTreeArray against all invariants.

    :param tree: The tree to check
    :type tree: LLRBTreeArray
    :raises InvariantError: On the first violation found
    :return: The black height of the tree (0 when empty)
    :rtype: int
    """

    code, key, black_height = check_invariants(
        tree.keys,
        tree.colors,
        tree.lefts,
        tree.rights,
        tree.root,
        tree.count,
        tree.discipline
    )

    if code != OK:
        logger.error("Invariant violated: %s (key %d)", MESSAGES[int(code)], key)
        raise InvariantError(int(code), int(key))

    return int(black_height)

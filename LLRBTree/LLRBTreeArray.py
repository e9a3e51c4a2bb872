import numpy as np
from numba import njit, prange, int64, uint8, uint32
from numba.experimental import jitclass
from typing import Tuple



# Arena layout (structure of arrays, one slot per node):
#     keys[i]   : uint32 sort key
#     colors[i] : uint8  color of the link from the parent (RED / BLACK)
#     lefts[i]  : int64  slot of the left child  (0 = empty subtree)
#     rights[i] : int64  slot of the right child (0 = empty subtree)
#     Slot 0 is the BLACK sentinel and is never written.



BLACK = 0
RED   = 1

LEFT  = 0
RIGHT = 1

# Fix-up disciplines
TWO_THREE      = 0
TWO_THREE_FOUR = 1

KEY_MAX   = 0xFFFFFFFF # (1 << 32) - 1
PATH_SIZE = 256



# ---------- JIT-Compiled Node Primitives ----------
@njit(inline="always")
def is_red(
    colors: np.ndarray,
    index:  np.int64

) -> bool:

    """
    Return True if the node at `index` is RED. The empty subtree is BLACK.
    """

    return index != 0 and colors[index] == RED

@njit(inline="always")
def rotate_left(
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Rotate the subtree rooted at `index` to the left:

           4            6
          / \\          /
         2   6  -->   4
                     /
                    2

    Node '6' takes the color '4' used to have, while '4' becomes RED.
    Requires a non-empty right child.

    :param colors: Node colors of the arena
    :type colors: np.ndarray
    :param lefts: Left child slots of the arena
    :type lefts: np.ndarray
    :param rights: Right child slots of the arena
    :type rights: np.ndarray
    :param index: Slot of the subtree root to rotate
    :type index: np.int64
    :return: Slot of the new subtree root
    :rtype: np.int64
    """

    pivot          = rights[index]
    rights[index]  = lefts[pivot]
    lefts[pivot]   = index
    colors[pivot]  = colors[index]
    colors[index]  = RED

    return pivot

@njit(inline="always")
def rotate_right(
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Rotate the subtree rooted at `index` to the right:

           4        2
          / \\        \\
         2   6  -->   4
                       \\
                        6

    Node '2' takes the color '4' used to have, while '4' becomes RED.
    Requires a non-empty left child.
    """

    pivot          = lefts[index]
    lefts[index]   = rights[pivot]
    rights[pivot]  = index
    colors[pivot]  = colors[index]
    colors[index]  = RED

    return pivot

@njit(inline="always")
def color_flip(
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    index:  np.int64

) -> None:

    """
    Toggle the color of a node and of each of its non-empty children.

    A flip may leave the node with the wrong color relative to its parent,
    so the caller always follows it with a fix-up.
    """

    colors[index] = BLACK if colors[index] == RED else RED

    left = lefts[index]
    if left != 0:
        colors[left] = BLACK if colors[left] == RED else RED

    right = rights[index]
    if right != 0:
        colors[right] = BLACK if colors[right] == RED else RED

@njit(inline="always")
def fix_up(
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    index:  np.int64,
    split:  bool

) -> np.int64:

    """
    Rebalance a subtree root while backing out of a descent.

    0. If `split` is set, a BLACK node with two RED children is color-flipped
       right away; each child keeps any RED left link of its own.
       A lone RED right child carrying a RED left link is first rotated right,
       so the pair becomes a right-leaning chain.
    1. A right-leaning RED link is rotated to the left.
    2. Two RED links in a row down the left spine are rotated right.
    3. If `split` is set, a node with two RED children is color-flipped,
       which splits the 4-node it represents.

    Where steps 1-3 already rebalance correctly, step 0 reaches the same
    result. It exists for the shapes deletion leaves behind in a tree that
    holds 4-nodes.

    :param split: Whether 4-nodes are split here (2-3 discipline)
    :type split: bool
    :return: Slot of the (possibly new) subtree root
    :rtype: np.int64
    """

    left  = lefts[index]
    right = rights[index]

    if split and colors[index] == BLACK and is_red(colors, left) and is_red(colors, right):
        color_flip(colors, lefts, rights, index)
        return index

    if is_red(colors, right) and not is_red(colors, left) and is_red(colors, lefts[right]):
        rights[index] = rotate_right(colors, lefts, rights, right)

    if is_red(colors, rights[index]) and not is_red(colors, lefts[index]):
        index = rotate_left(colors, lefts, rights, index)

    if is_red(colors, lefts[index]) and is_red(colors, lefts[lefts[index]]):
        index = rotate_right(colors, lefts, rights, index)

    if split and is_red(colors, lefts[index]) and is_red(colors, rights[index]):
        color_flip(colors, lefts, rights, index)

    return index

@njit(inline="always")
def move_red_left(
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Push a RED link down into the left subtree before descending into it.

    Assumes the node or its left child is RED. The flip joins the node and
    both children; if the right child is a 3-node (or 4-node) one of its keys
    is borrowed through a double rotation instead.
    """

    color_flip(colors, lefts, rights, index)

    right = rights[index]
    if right != 0 and is_red(colors, lefts[right]):
        rights[index] = rotate_right(colors, lefts, rights, right)
        index         = rotate_left(colors, lefts, rights, index)
        color_flip(colors, lefts, rights, index)

        # A 4-node sibling is left with a RED right link after lending a key
        right = rights[index]
        if is_red(colors, rights[right]):
            rights[index] = rotate_left(colors, lefts, rights, right)

    return index

@njit(inline="always")
def move_red_right(
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    index:  np.int64

) -> np.int64:

    """
    Push a RED link down into the right subtree before descending into it.

    Assumes the node or its right child is RED.
    """

    color_flip(colors, lefts, rights, index)

    left = lefts[index]
    if left != 0 and is_red(colors, lefts[left]):
        index = rotate_right(colors, lefts, rights, index)
        color_flip(colors, lefts, rights, index)

    return index

@njit(inline="always")
def _relink(
    lefts:      np.ndarray,
    rights:     np.ndarray,
    path:       np.ndarray,
    directions: np.ndarray,
    depth:      np.int64,
    sub_root:   np.int64

) -> None:

    """
    Store `sub_root` in the child slot of the parent recorded at path[depth - 1].
    """

    parent = path[depth - 1]
    if directions[depth - 1] == LEFT:
        lefts[parent] = sub_root
    else:
        rights[parent] = sub_root

@njit(inline="always")
def _fix_path(
    colors:     np.ndarray,
    lefts:      np.ndarray,
    rights:     np.ndarray,
    path:       np.ndarray,
    directions: np.ndarray,
    depth:      np.int64,
    split:      bool,
    root:       np.int64

) -> np.int64:

    """
    Fix up path[depth - 1] .. path[0] bottom-up, relinking each result.
    Returns the new root (`root` unchanged when the path is empty).
    """

    for i in range(depth - 1, -1, -1):
        sub_root = fix_up(colors, lefts, rights, path[i], split)

        if i > 0:
            _relink(lefts, rights, path, directions, i, sub_root)
        else:
            root = sub_root

    return root

@njit(inline="always")
def _split_path(
    keys:       np.ndarray,
    colors:     np.ndarray,
    lefts:      np.ndarray,
    rights:     np.ndarray,
    root:       np.int64,
    path:       np.ndarray,
    directions: np.ndarray,
    key:        np.int64

) -> np.int64:

    """
    Split every 4-node on the way to `key` and on to its successor.

    Walks the path an insertion of key + 1/2 would take (right on equal), then
    fixes it up bottom-up with splitting on. Afterwards no node that a
    deletion of `key` descends through is a 4-node. Returns the new root.
    """

    depth   = 0
    current = root
    while current != 0:
        path[depth] = current
        if key < keys[current]:
            directions[depth] = LEFT
            current = lefts[current]
        else:
            directions[depth] = RIGHT
            current = rights[current]
        depth += 1

    root = _fix_path(colors, lefts, rights, path, directions, depth, True, root)
    colors[root] = BLACK

    return root

@njit(inline="always")
def _release(
    keys:          np.ndarray,
    colors:        np.ndarray,
    lefts:         np.ndarray,
    rights:        np.ndarray,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    index:         np.int64

) -> np.int64:

    """
    Clear a node slot and push it on the free list. Returns the new free_list_top.
    """

    keys[index]   = 0
    colors[index] = BLACK
    lefts[index]  = 0
    rights[index] = 0

    free_list[free_list_top] = index
    return free_list_top + 1



# ---------- JIT-Compiled LLRB Core Operations ----------
@njit(boundscheck=False)
def insert(
    keys:          np.ndarray,
    colors:        np.ndarray,
    lefts:         np.ndarray,
    rights:        np.ndarray,
    root:          np.int64,
    free:          np.int64, # start from 1
    free_list:     np.ndarray,
    free_list_top: np.int64,
    path:          np.ndarray,
    directions:    np.ndarray,
    key:           np.int64,
    discipline:    np.int64

) -> Tuple[np.int64, np.int64, np.int64, np.int64, bool]:

    """
    Insert a key into an arena-backed LLRB tree with bottom-up rebalancing.

    The descent records every visited slot in `path` and the direction taken
    in `directions`. On the way back up each recorded node is fixed up and the
    returned subtree root is written into its parent's child slot, since a
    rotation may have changed which node roots that subtree.

    Parameters
    ----------
    keys, colors, lefts, rights : np.ndarray
        The arena arrays.
    root : np.int64
        Slot of the current root (0 if the tree is empty).
    free : np.int64
        Next never-used slot if the free list is empty.
    free_list : np.ndarray
        Stack of released slots for reuse.
    free_list_top : np.int64
        Top of the free_list stack (0 if empty).
    path, directions : np.ndarray
        Scratch arrays for the descent.
    key : np.int64
        Key to insert.
    discipline : np.int64
        TWO_THREE splits 4-nodes on the way up, TWO_THREE_FOUR on the way down.

    Returns
    -------
    Tuple[np.int64, np.int64, np.int64, np.int64, bool]
        Updated (root, free, free_list_top), the slot holding `key`, and
        whether that slot was newly allocated.
    """

    depth   = 0
    current = root
    node    = np.int64(0)

    while current != 0:
        if discipline == TWO_THREE_FOUR:
            if is_red(colors, lefts[current]) and is_red(colors, rights[current]):
                color_flip(colors, lefts, rights, current)

        path[depth] = current
        depth += 1

        if key == keys[current]:
            node = current
            break

        elif key < keys[current]: # Left
            directions[depth - 1] = LEFT
            current = lefts[current]

        else: # Right
            directions[depth - 1] = RIGHT
            current = rights[current]

    created = node == 0
    if created:
        if free_list_top > 0:
            free_list_top -= 1
            node = free_list[free_list_top]
        else:
            node = free
            free += 1

        keys[node]   = key
        colors[node] = RED
        lefts[node]  = 0
        rights[node] = 0

        if depth > 0:
            _relink(lefts, rights, path, directions, depth, node)
        else:
            root = node

    # Rebalancing
    split = discipline == TWO_THREE
    root  = _fix_path(colors, lefts, rights, path, directions, depth, split, root)

    colors[root] = BLACK

    return root, free, free_list_top, node, created

@njit(boundscheck=False)
def remove(
    keys:          np.ndarray,
    colors:        np.ndarray,
    lefts:         np.ndarray,
    rights:        np.ndarray,
    root:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    path:          np.ndarray,
    directions:    np.ndarray,
    key:           np.int64,
    discipline:    np.int64

) -> Tuple[bool, np.int64, np.int64, np.int64, np.int64]:

    """
    Top-down LLRB deletion with bottom-up fix-up.

    The process involves:
    1. Presence check: a missing key leaves the tree untouched.
    2. Under TWO_THREE_FOUR, 4-nodes on the way to the key and its successor
       are split first, so the descent meets the same shapes as in a 2-3 tree.
    3. Descent: before stepping into a child, a RED link is pushed down with
       move_red_left / move_red_right so the node being left behind can
       absorb a removal. Every transformed node is relinked into its parent.
    4. Removal: a node without a right child is released directly. An
       internal node takes the key of the minimum of its right subtree and
       the descent continues as delete-min.
    5. Fix-up: every node on the path is rebalanced on the way back up.
       4-nodes produced by the descent are always split here.

    Args:
        keys, colors, lefts, rights (np.ndarray): The arena arrays.
        root (np.int64): Slot of the current root.
        free_list (np.ndarray): Stack of available slots.
        free_list_top (np.int64): Current top of the free_list.
        path, directions (np.ndarray): Scratch arrays for the descent.
        key (np.int64): The key to remove.
        discipline (np.int64): TWO_THREE or TWO_THREE_FOUR.

    Returns:
        Tuple[bool, np.int64, np.int64, np.int64, np.int64]:
            - removed flag.
            - new root slot.
            - updated free_list_top.
            - slot that was released (0 if nothing was removed).
            - slot that received the successor's key (0 for a direct removal).
    """

    if root == 0 or _search_single(keys, lefts, rights, root, key) == 0:
        return False, root, free_list_top, np.int64(0), np.int64(0)

    if discipline == TWO_THREE_FOUR:
        root = _split_path(keys, colors, lefts, rights, root, path, directions, key)

    depth       = 0
    current     = root
    freed       = np.int64(0)
    replaced    = np.int64(0)
    seeking_min = False

    while True:
        if seeking_min:
            # This node is the minimum: LLRB shape guarantees no right child
            if lefts[current] == 0:
                freed = current
                break

            if not is_red(colors, lefts[current]) and not is_red(colors, lefts[lefts[current]]):
                current = move_red_left(colors, lefts, rights, current)
                if depth > 0:
                    _relink(lefts, rights, path, directions, depth, current)

            path[depth]       = current
            directions[depth] = LEFT
            depth += 1
            current = lefts[current]

        elif key < keys[current]: # Left
            if lefts[current] == 0:
                path[depth] = current
                depth += 1
                break

            if not is_red(colors, lefts[current]) and not is_red(colors, lefts[lefts[current]]):
                current = move_red_left(colors, lefts, rights, current)
                if depth > 0:
                    _relink(lefts, rights, path, directions, depth, current)

            path[depth]       = current
            directions[depth] = LEFT
            depth += 1
            current = lefts[current]

        else: # Equal or right
            # Lean the RED link to the right; a 4-node already has one there
            if is_red(colors, lefts[current]) and not is_red(colors, rights[current]):
                current = rotate_right(colors, lefts, rights, current)
                if depth > 0:
                    _relink(lefts, rights, path, directions, depth, current)

            if key == keys[current] and rights[current] == 0:
                freed = current
                break

            if rights[current] == 0:
                path[depth] = current
                depth += 1
                break

            if not is_red(colors, rights[current]) and not is_red(colors, lefts[rights[current]]):
                current = move_red_right(colors, lefts, rights, current)
                if depth > 0:
                    _relink(lefts, rights, path, directions, depth, current)

            path[depth]       = current
            directions[depth] = RIGHT
            depth += 1

            if key == keys[current]:
                replaced    = current
                seeking_min = True

            current = rights[current]

    if freed != 0:
        if replaced != 0:
            keys[replaced] = keys[freed]

        if depth > 0:
            _relink(lefts, rights, path, directions, depth, np.int64(0))
        else:
            root = 0

        free_list_top = _release(keys, colors, lefts, rights, free_list, free_list_top, freed)

    # Rebalancing
    root = _fix_path(colors, lefts, rights, path, directions, depth, True, root)

    if root != 0:
        colors[root] = BLACK

    return freed != 0, root, free_list_top, freed, replaced

@njit(inline="always")
def _search_single(
    keys:   np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    root:   np.int64,
    key:    np.int64

) -> np.int64:

    """
    Performs a fast iterative search for a single key in the arena-backed tree.

    Args:
        keys, lefts, rights (np.ndarray): The arena arrays.
        root (np.int64): The slot of the root node to start the search from.
        key (np.int64): The key to locate within the tree.

    Returns:
        np.int64: The slot of the node holding the key if found; otherwise 0.
    """

    current = root
    while current != 0:
        current_key = keys[current]

        if key == current_key:
            return current

        elif key < current_key:
            current = lefts[current]

        else:
            current = rights[current]

    return np.int64(0)

@njit(parallel=True)
def _search_bulk(
    keys:    np.ndarray,
    lefts:   np.ndarray,
    rights:  np.ndarray,
    root:    np.int64,
    queries: np.ndarray

) -> np.ndarray:

    """
    Executes parallel searches for multiple keys across the tree.

    Lookups never mutate the arena, so each query is resolved by an
    independent '_search_single' call on its own core.

    Returns:
        np.ndarray: int64 slots, one per query, 0 where the key is absent.
    """

    size    = queries.size
    results = np.zeros(size, dtype=np.int64)
    for i in prange(size):
        results[i] = _search_single(
            keys, lefts, rights, root, np.int64(queries[i])
        )

    return results

@njit
def _locate(
    keys:   np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    root:   np.int64,
    key:    np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Fresh descent returning (slot, parent slot) for `key`; (0, 0) if absent
    and a parent of 0 for the root.
    """

    parent  = np.int64(0)
    current = root
    while current != 0:
        if key == keys[current]:
            return current, parent

        parent = current
        if key < keys[current]:
            current = lefts[current]
        else:
            current = rights[current]

    return np.int64(0), np.int64(0)



# --------- Utils ---------
@njit
def warmup(tree_size: int = 100):
    """
    Minimally triggers JIT compilation for core LLRB operations.
    """

    llrb        = LLRBTreeArray(tree_size, TWO_THREE)
    warmup_data = np.array([30, 20, 10, 40, 50, 25], dtype=np.int64)

    for x in warmup_data:
        llrb.insert(x)

    _ = llrb.search(20)

    queries = np.array([10, 25, 99], dtype=np.int64)
    _ = llrb.search_bulk(queries)

    llrb.remove(10)
    _ = llrb.inorder()
    llrb.free_all()

    return True

@njit
def build_llrb(
    data:       np.ndarray,
    discipline: int

) -> 'LLRBTreeArray':

    """
    Builds and populates an LLRBTreeArray from a NumPy array at machine speed.

    Args:
        data (np.ndarray): 1D array of keys to insert.
        discipline (int): TWO_THREE or TWO_THREE_FOUR.

    Returns:
        LLRBTreeArray: A balanced tree containing every distinct key of data.
    """

    llrb = LLRBTreeArray(data.size, discipline)

    for i in range(data.size):
        llrb.insert(data[i])

    return llrb

@njit
def fill_llrb(
    llrb: 'LLRBTreeArray',
    data: np.ndarray

) -> None:

    """
    Populates an existing LLRBTreeArray with multiple keys in a JIT loop.
    """

    for i in range(data.size):
        llrb.insert(data[i])

@njit
def remove_llrb(
    llrb: 'LLRBTreeArray',
    data: np.ndarray

) -> None:
    """
    Perform batch removal of multiple keys from the LLRB tree.

    Keys that are not in the tree are silently ignored (as per the
    tree.remove implementation).
    """

    for i in range(data.size):
        llrb.remove(data[i])

@njit
def inorder_traversal( # LVR
    lefts:        np.ndarray,
    rights:       np.ndarray,
    root:         np.int64,
    current_size: np.int64

) -> np.ndarray:
    """
    Extracts the slots of all tree nodes in ascending key order.
    """

    traverse = np.zeros(current_size, dtype=np.int64)
    stack    = np.zeros(PATH_SIZE, dtype=np.int64)

    current_index = root
    stack_idx     = 0
    traverse_idx  = 0

    while traverse_idx < current_size:

        while current_index != 0:
            stack[stack_idx] = current_index
            stack_idx += 1
            current_index = lefts[current_index]

        if stack_idx > 0:
            stack_idx -= 1
            current_index = stack[stack_idx]

            traverse[traverse_idx] = current_index
            traverse_idx += 1

            current_index = rights[current_index]

        else:
            break

    return traverse

@njit
def tree_height(
    lefts:  np.ndarray,
    rights: np.ndarray,
    root:   np.int64

) -> np.int64:

    """
    Number of nodes on the longest root-to-leaf path (0 for an empty tree).
    """

    if root == 0:
        return np.int64(0)

    nodes  = np.zeros(PATH_SIZE, dtype=np.int64)
    depths = np.zeros(PATH_SIZE, dtype=np.int64)
    top    = 1
    height = np.int64(0)

    nodes[0]  = root
    depths[0] = 1
    while top > 0:
        top -= 1
        node  = nodes[top]
        depth = depths[top]

        if depth > height:
            height = depth

        if lefts[node] != 0:
            nodes[top]  = lefts[node]
            depths[top] = depth + 1
            top += 1

        if rights[node] != 0:
            nodes[top]  = rights[node]
            depths[top] = depth + 1
            top += 1

    return height

@njit
def release_all(
    keys:   np.ndarray,
    colors: np.ndarray,
    lefts:  np.ndarray,
    rights: np.ndarray,
    root:   np.int64,
    count:  np.int64

) -> np.int64:

    """
    Release every node reachable from `root` in post-order (both children
    before their parent), clearing each slot exactly once.

    Returns:
        np.int64: The number of released nodes.
    """

    if root == 0:
        return np.int64(0)

    stack = np.zeros(PATH_SIZE, dtype=np.int64)
    order = np.zeros(count, dtype=np.int64)
    top   = 1
    n     = 0

    # Reverse of a (node, right, left) pre-order is a post-order
    stack[0] = root
    while top > 0:
        top -= 1
        node = stack[top]

        order[n] = node
        n += 1

        if lefts[node] != 0:
            stack[top] = lefts[node]
            top += 1

        if rights[node] != 0:
            stack[top] = rights[node]
            top += 1

    for i in range(n - 1, -1, -1):
        node = order[i]

        keys[node]   = 0
        colors[node] = BLACK
        lefts[node]  = 0
        rights[node] = 0

    return np.int64(n)


# --------- LLRBTreeArray API ---------
spec = [
    ("size"          , int64),
    ("count"         , int64),
    ("discipline"    , int64),
    ("keys"          , uint32[:]),
    ("colors"        , uint8[:]),
    ("lefts"         , int64[:]),
    ("rights"        , int64[:]),
    ("root"          , int64),
    ("_free"         , int64),
    ("_free_list"    , int64[:]),
    ("_free_list_top", int64),
    ("_path"         , int64[:]),
    ("_directions"   , uint8[:]),

]

@jitclass(spec)
class LLRBTreeArray:
    """
    Left-Leaning Red-Black tree over uint32 keys, implemented as a Numba jitclass.

    Nodes live in a structure-of-arrays arena; children are slot indices
    and slot 0 is the empty subtree. Released slots are recycled through a
    free list and the arena doubles when it runs out of slots.

    Attributes:
        size (int64): Number of allocated slots, sentinel included.
        count (int64): Current number of nodes in the tree.
        discipline (int64): TWO_THREE or TWO_THREE_FOUR.
        keys (uint32[:]): Node keys.
        colors (uint8[:]): Node colors.
        lefts (int64[:]): Left child slots.
        rights (int64[:]): Right child slots.
        root (int64): Slot of the current root node (0 if empty).
    """

    def __init__(
        self,
        size:       int,
        discipline: int

    ) -> None:

        if size < 0:
            raise ValueError("The size value must not be negative")

        if discipline != TWO_THREE and discipline != TWO_THREE_FOUR:
            raise ValueError("Unknown tree discipline")

        self.size           = int64(size + 1)
        self.count          = int64(0)
        self.discipline     = int64(discipline)
        self.keys           = np.zeros(self.size, dtype=np.uint32)
        self.colors         = np.zeros(self.size, dtype=np.uint8)
        self.lefts          = np.zeros(self.size, dtype=np.int64)
        self.rights         = np.zeros(self.size, dtype=np.int64)
        self.root           = int64(0)
        self._free          = int64(1)
        self._free_list     = np.zeros(self.size, dtype=np.int64)
        self._free_list_top = int64(0)
        self._path          = np.zeros(PATH_SIZE, dtype=np.int64)
        self._directions    = np.zeros(PATH_SIZE, dtype=np.uint8)

    @property
    def height(self) -> int:
        return tree_height(self.lefts, self.rights, self.root)

    @property
    def root_info(self) -> Tuple[int, int, int, int]:
        """(key, color, left, right) of the root slot."""
        return (
            int64(self.keys[self.root]),
            int64(self.colors[self.root]),
            self.lefts[self.root],
            self.rights[self.root]
        )

    def minimum(self) -> int:
        """
        Find the slot of the node with the minimum key in the tree.

        Returns:
            int: The slot of the leftmost node, or 0 if the tree is empty.
        """

        current = self.root
        if current == 0:
            return 0

        while self.lefts[current] != 0:
            current = self.lefts[current]

        return current

    def maximum(self) -> int:
        """
        Find the slot of the node with the maximum key in the tree.

        Returns:
            int: The slot of the rightmost node, or 0 if the tree is empty.
        """

        current = self.root
        if current == 0:
            return 0

        while self.rights[current] != 0:
            current = self.rights[current]

        return current

    def _grow(self) -> None:
        """Double the arena, keeping every slot where it is."""

        size = self.size * 2

        keys = np.zeros(size, dtype=np.uint32)
        keys[:self.size] = self.keys
        colors = np.zeros(size, dtype=np.uint8)
        colors[:self.size] = self.colors
        lefts = np.zeros(size, dtype=np.int64)
        lefts[:self.size] = self.lefts
        rights = np.zeros(size, dtype=np.int64)
        rights[:self.size] = self.rights
        free_list = np.zeros(size, dtype=np.int64)
        free_list[:self.size] = self._free_list

        self.keys       = keys
        self.colors     = colors
        self.lefts      = lefts
        self.rights     = rights
        self._free_list = free_list
        self.size       = size

    def insert_index(
        self,
        key: int

    ) -> Tuple[int, bool]:
        """Inserts a key with rebalancing. Returns (slot, created)."""

        if key < 0 or key > KEY_MAX:
            raise ValueError("key must fit in an unsigned 32-bit integer")

        if self._free_list_top == 0 and self._free >= self.size:
            self._grow()

        self.root, self._free, self._free_list_top, node, created = insert(
            self.keys,
            self.colors,
            self.lefts,
            self.rights,
            self.root,
            self._free,
            self._free_list,
            self._free_list_top,
            self._path,
            self._directions,
            np.int64(key),
            self.discipline
        )

        if created:
            self.count += 1

        return node, created

    def insert(
        self,
        key: int

    ) -> bool:
        """Inserts a key. Returns True if it was new, False if already present."""

        _, created = self.insert_index(key)
        return created

    def remove_index(
        self,
        key: int

    ) -> Tuple[bool, int, int]:
        """
        Deletes a key and stabilizes the tree.

        Returns (removed, freed, replaced): the released slot and, when an
        internal node took its successor's key, the slot that received it.
        """

        if self.count == 0 or key < 0 or key > KEY_MAX:
            return False, int64(0), int64(0)

        removed, root, free_list_top, freed, replaced = remove(
            self.keys,
            self.colors,
            self.lefts,
            self.rights,
            self.root,
            self._free_list,
            self._free_list_top,
            self._path,
            self._directions,
            np.int64(key),
            self.discipline
        )

        if removed:
            self.root           = root
            self._free_list_top = free_list_top
            self.count -= 1

        return removed, freed, replaced

    def remove(
        self,
        key: int

    ) -> bool:
        """Deletes a key. Returns True if found and removed, False otherwise."""

        removed, _, _ = self.remove_index(key)
        return removed

    def search(
        self,
        key: int

    ) -> int:
        """Locates a key using iterative BST search. Returns the slot or 0 if not found."""

        return _search_single(
            self.keys,
            self.lefts,
            self.rights,
            self.root,
            np.int64(key)
        )

    def search_bulk(
        self,
        keys: np.ndarray

    ) -> np.ndarray:
        """Performs parallelized multi-key search using all available CPU cores."""

        return _search_bulk(
            self.keys,
            self.lefts,
            self.rights,
            self.root,
            keys
        )

    def locate(
        self,
        key: int

    ) -> Tuple[int, int]:
        """Returns (slot, parent slot) of a key found by a fresh descent."""

        return _locate(
            self.keys,
            self.lefts,
            self.rights,
            self.root,
            np.int64(key)
        )

    def traverse(self) -> np.ndarray:
        """Slots of all nodes in ascending key order."""
        return inorder_traversal(self.lefts, self.rights, self.root, self.count)

    def inorder(self) -> np.ndarray:
        """
        Generates a sorted array of all keys using In-order traversal.
        """
        return self.keys[self.traverse()]

    def free_all(self) -> int:
        """
        Releases every node and resets the arena allocator.
        Safe to call on an empty tree. Returns the number of released nodes.
        """

        released = release_all(
            self.keys,
            self.colors,
            self.lefts,
            self.rights,
            self.root,
            self.count
        )

        self.root           = int64(0)
        self.count          = int64(0)
        self._free          = int64(1)
        self._free_list_top = int64(0)

        return released

    def __len__(self) -> int:
        return int(self.count)

    def __contains__(self, key: int) -> bool:
        return self.search(key) != 0

    def __str__(self) -> str:

        return "LLRBTreeArray(size=" + str(self.count) + ", root=" + str(self.root) + ", height=" + str(self.height) + ")"

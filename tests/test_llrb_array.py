import math
import random

import numpy as np
import pytest

from LLRBTree.LLRBTreeArray import (
    BLACK,
    RED,
    TWO_THREE,
    TWO_THREE_FOUR,
    LLRBTreeArray,
    build_llrb,
    color_flip,
    fill_llrb,
    fix_up,
    remove_llrb,
    rotate_left,
    rotate_right,
    warmup,
)
from LLRBTree.validate import validate


def make_arena(nodes):
    """Arena from {slot: (key, color, left, right)}."""
    size = max(nodes) + 1
    keys = np.zeros(size, dtype=np.uint32)
    colors = np.zeros(size, dtype=np.uint8)
    lefts = np.zeros(size, dtype=np.int64)
    rights = np.zeros(size, dtype=np.int64)
    for slot, (key, color, left, right) in nodes.items():
        keys[slot] = key
        colors[slot] = color
        lefts[slot] = left
        rights[slot] = right
    return keys, colors, lefts, rights


def inorder_keys(keys, lefts, rights, root):
    out = []

    def walk(node):
        if node:
            walk(lefts[node])
            out.append(int(keys[node]))
            walk(rights[node])

    walk(root)
    return out


def test_rotate_left():
    #     4            6
    #    / \          / \
    #   2   6   ->   4   7
    #      / \      / \
    #     5   7    2   5
    keys, colors, lefts, rights = make_arena({
        1: (4, BLACK, 2, 3),
        2: (2, BLACK, 0, 0),
        3: (6, RED, 4, 5),
        4: (5, BLACK, 0, 0),
        5: (7, BLACK, 0, 0),
    })

    root = rotate_left(colors, lefts, rights, np.int64(1))

    assert root == 3
    assert lefts[3] == 1
    assert rights[1] == 4
    assert colors[3] == BLACK
    assert colors[1] == RED
    assert inorder_keys(keys, lefts, rights, root) == [2, 4, 5, 6, 7]


def test_rotate_right():
    keys, colors, lefts, rights = make_arena({
        1: (4, BLACK, 2, 3),
        2: (2, RED, 4, 5),
        3: (6, BLACK, 0, 0),
        4: (1, BLACK, 0, 0),
        5: (3, BLACK, 0, 0),
    })

    root = rotate_right(colors, lefts, rights, np.int64(1))

    assert root == 2
    assert rights[2] == 1
    assert lefts[1] == 5
    assert colors[2] == BLACK
    assert colors[1] == RED
    assert inorder_keys(keys, lefts, rights, root) == [1, 2, 3, 4, 6]


def test_color_flip_toggles_node_and_children():
    keys, colors, lefts, rights = make_arena({
        1: (2, BLACK, 2, 3),
        2: (1, RED, 0, 0),
        3: (3, RED, 0, 0),
    })

    color_flip(colors, lefts, rights, np.int64(1))
    assert list(colors[1:]) == [RED, BLACK, BLACK]

    color_flip(colors, lefts, rights, np.int64(1))
    assert list(colors[1:]) == [BLACK, RED, RED]


def test_color_flip_skips_empty_child():
    keys, colors, lefts, rights = make_arena({
        1: (2, RED, 2, 0),
        2: (1, BLACK, 0, 0),
    })

    color_flip(colors, lefts, rights, np.int64(1))

    assert colors[1] == BLACK
    assert colors[2] == RED
    assert colors[0] == BLACK


def test_fix_up_rotates_right_leaning_link():
    keys, colors, lefts, rights = make_arena({
        1: (1, BLACK, 0, 2),
        2: (2, RED, 0, 0),
    })

    root = fix_up(colors, lefts, rights, np.int64(1), True)

    assert root == 2
    assert lefts[2] == 1
    assert colors[2] == BLACK
    assert colors[1] == RED


def test_fix_up_split_depends_on_discipline():
    nodes = {
        1: (3, BLACK, 2, 0),
        2: (2, RED, 3, 0),
        3: (1, RED, 0, 0),
    }

    keys, colors, lefts, rights = make_arena(nodes)
    root = fix_up(colors, lefts, rights, np.int64(1), True)
    assert root == 2
    assert [colors[2], colors[3], colors[1]] == [RED, BLACK, BLACK]

    keys, colors, lefts, rights = make_arena(nodes)
    root = fix_up(colors, lefts, rights, np.int64(1), False)
    assert root == 2
    assert [colors[2], colors[3], colors[1]] == [BLACK, RED, RED]


def test_fix_up_flips_black_four_node_first():
    # 5B(3R(2R), 7R): splitting keeps 3 as a 3-node with 2 on its left
    keys, colors, lefts, rights = make_arena({
        1: (5, BLACK, 2, 3),
        2: (3, RED, 4, 0),
        3: (7, RED, 0, 0),
        4: (2, RED, 0, 0),
    })

    root = fix_up(colors, lefts, rights, np.int64(1), True)

    assert root == 1
    assert [colors[1], colors[2], colors[3], colors[4]] == [RED, BLACK, BLACK, RED]
    assert inorder_keys(keys, lefts, rights, root) == [2, 3, 5, 7]


def test_fix_up_straightens_red_chain_on_the_right():
    #   10B                 20R
    #   / \               /     \
    #  5B  30R    ->    10B      30B
    #      / \          / \      / \
    #    20R  40B      5B 15B  25B 40B
    #    / \
    #  15B 25B
    keys, colors, lefts, rights = make_arena({
        1: (10, BLACK, 2, 3),
        2: (5, BLACK, 0, 0),
        3: (30, RED, 4, 5),
        4: (20, RED, 6, 7),
        5: (40, BLACK, 0, 0),
        6: (15, BLACK, 0, 0),
        7: (25, BLACK, 0, 0),
    })

    root = fix_up(colors, lefts, rights, np.int64(1), True)

    assert root == 4
    assert (lefts[4], rights[4]) == (1, 3)
    assert (lefts[1], rights[1]) == (2, 6)
    assert (lefts[3], rights[3]) == (7, 5)
    assert [colors[4], colors[1], colors[3]] == [RED, BLACK, BLACK]
    assert inorder_keys(keys, lefts, rights, root) == [5, 10, 15, 20, 25, 30, 40]


def test_insert_reports_new_keys():
    tree = LLRBTreeArray(8, TWO_THREE)

    assert tree.insert(10)
    assert tree.insert(5)
    assert not tree.insert(10)
    assert tree.count == 2


def test_scenario_insert_then_remove():
    tree = LLRBTreeArray(8, TWO_THREE)
    for key in [50, 30, 70, 20, 40, 60, 80]:
        tree.insert(key)

    assert list(tree.inorder()) == [20, 30, 40, 50, 60, 70, 80]
    validate(tree)

    assert tree.remove(30)
    assert list(tree.inorder()) == [20, 40, 50, 60, 70, 80]
    assert tree.search(30) == 0
    validate(tree)


def test_remove_missing_key_is_noop():
    tree = LLRBTreeArray(8, TWO_THREE)
    assert not tree.remove(1)

    for key in [5, 3, 8]:
        tree.insert(key)
    before = (tree.keys.copy(), tree.colors.copy(), tree.lefts.copy(), tree.rights.copy())

    assert not tree.remove(4)
    assert not tree.remove(100)
    assert not tree.remove(-1)

    after = (tree.keys, tree.colors, tree.lefts, tree.rights)
    for old, new in zip(before, after):
        assert np.array_equal(old, new)
    assert tree.count == 3


def test_remove_internal_node_reports_slots():
    tree = LLRBTreeArray(4, TWO_THREE)
    for key in [2, 1, 3]:
        tree.insert(key)

    removed, freed, replaced = tree.remove_index(2)

    assert removed
    assert freed == 3
    assert replaced == 1
    assert tree.keys[1] == 3
    assert list(tree.inorder()) == [1, 3]

    # The released slot is the next one handed out
    node, created = tree.insert_index(10)
    assert created
    assert node == freed


def test_remove_last_node_empties_tree():
    tree = LLRBTreeArray(2, TWO_THREE)
    tree.insert(7)

    assert tree.remove(7)
    assert tree.root == 0
    assert tree.count == 0
    assert tree.height == 0


def test_arena_grows_on_demand():
    tree = LLRBTreeArray(0, TWO_THREE)
    assert tree.size == 1

    for key in range(100):
        tree.insert(key)

    assert tree.size > 100
    assert tree.count == 100
    assert list(tree.inorder()) == list(range(100))
    validate(tree)


def test_search_and_locate():
    tree = LLRBTreeArray(8, TWO_THREE)
    for key in [50, 30, 70]:
        tree.insert(key)

    root = tree.root
    assert tree.keys[root] == 50
    assert tree.search(50) == root
    assert tree.search(31) == 0
    assert tree.locate(50) == (root, 0)
    assert tree.locate(30) == (tree.search(30), root)
    assert tree.locate(99) == (0, 0)


def test_search_bulk():
    tree = LLRBTreeArray(8, TWO_THREE)
    for key in [4, 8, 15, 16, 23, 42]:
        tree.insert(key)

    queries = np.array([15, 1, 42, 99], dtype=np.int64)
    slots = tree.search_bulk(queries)

    assert slots[0] == tree.search(15)
    assert slots[1] == 0
    assert slots[2] == tree.search(42)
    assert slots[3] == 0


def test_minimum_and_maximum():
    tree = LLRBTreeArray(8, TWO_THREE)
    assert tree.minimum() == 0
    assert tree.maximum() == 0

    for key in [9, 3, 27, 1]:
        tree.insert(key)

    assert tree.keys[tree.minimum()] == 1
    assert tree.keys[tree.maximum()] == 27


def test_free_all_is_idempotent():
    tree = LLRBTreeArray(8, TWO_THREE)
    for key in [5, 1, 9, 3, 7]:
        tree.insert(key)

    assert tree.free_all() == 5
    assert tree.root == 0
    assert tree.count == 0
    assert not tree.keys.any()
    assert not tree.lefts.any()
    assert not tree.rights.any()

    assert tree.free_all() == 0
    assert tree.count == 0

    tree.insert(4)
    assert list(tree.inorder()) == [4]


def test_invalid_arguments():
    with pytest.raises(ValueError):
        LLRBTreeArray(-1, TWO_THREE)

    with pytest.raises(ValueError):
        LLRBTreeArray(8, 7)

    tree = LLRBTreeArray(8, TWO_THREE)
    with pytest.raises(ValueError):
        tree.insert(-1)
    with pytest.raises(ValueError):
        tree.insert(2 ** 32)

    tree.insert(2 ** 32 - 1)
    tree.insert(0)
    assert list(tree.inorder()) == [0, 2 ** 32 - 1]


@pytest.mark.parametrize("discipline", [TWO_THREE, TWO_THREE_FOUR])
def test_height_stays_logarithmic(discipline):
    keys = random.Random(1001).sample(range(2 ** 32), 1000)
    tree = LLRBTreeArray(16, discipline)
    for key in keys:
        tree.insert(key)

    assert tree.count == 1000
    assert tree.height <= 2 * math.log2(1001)
    assert list(tree.inorder()) == sorted(keys)
    validate(tree)


@pytest.mark.parametrize("discipline", [TWO_THREE, TWO_THREE_FOUR])
def test_sorted_inserts_stay_balanced(discipline):
    tree = LLRBTreeArray(16, discipline)
    for key in range(1, 1025):
        tree.insert(key)
        validate(tree)

    assert tree.height <= 2 * math.log2(1025)

    for key in range(1, 1025, 2):
        tree.remove(key)
        validate(tree)

    assert list(tree.inorder()) == list(range(2, 1025, 2))


@pytest.mark.parametrize("discipline", [TWO_THREE, TWO_THREE_FOUR])
def test_random_operations_keep_invariants(discipline):
    rng = random.Random(42 + discipline)
    tree = LLRBTreeArray(4, discipline)
    expected = set()

    for _ in range(3000):
        key = rng.randrange(300)
        if rng.random() < 0.6:
            assert tree.insert(key) == (key not in expected)
            expected.add(key)
        else:
            assert tree.remove(key) == (key in expected)
            expected.discard(key)
        validate(tree)

    assert tree.count == len(expected)
    assert list(tree.inorder()) == sorted(expected)


@pytest.mark.parametrize("discipline", [TWO_THREE, TWO_THREE_FOUR])
@pytest.mark.parametrize("seed", range(8))
def test_drain_in_random_order(discipline, seed):
    rng = random.Random(seed)
    keys = rng.sample(range(1, 5000), 200)
    tree = LLRBTreeArray(16, discipline)
    for key in keys:
        tree.insert(key)
    validate(tree)

    rng.shuffle(keys)
    for i, key in enumerate(keys):
        assert tree.remove(key)
        validate(tree)
        assert list(tree.inorder()) == sorted(keys[i + 1:])

    assert tree.root == 0
    assert tree.count == 0


def test_two_three_four_drain_from_small_sample():
    rng = random.Random(0)
    keys = rng.sample(range(1, 400), 40)
    tree = LLRBTreeArray(40, TWO_THREE_FOUR)
    for key in keys:
        tree.insert(key)

    for key in rng.sample(keys, len(keys)):
        assert tree.remove(key)
        validate(tree)
        assert tree.search(key) == 0

    assert tree.count == 0


@pytest.mark.parametrize("discipline", [TWO_THREE, TWO_THREE_FOUR])
@pytest.mark.parametrize("seed", range(5))
def test_random_operations_then_drain(discipline, seed):
    rng = random.Random(1000 + seed)
    tree = LLRBTreeArray(8, discipline)
    expected = set()

    for _ in range(2500):
        key = rng.randrange(1000)
        if rng.random() < 0.55:
            tree.insert(key)
            expected.add(key)
        else:
            assert tree.remove(key) == (key in expected)
            expected.discard(key)
    validate(tree)

    remaining = list(expected)
    rng.shuffle(remaining)
    for key in remaining:
        assert tree.remove(key)
        validate(tree)

    assert tree.count == 0


def test_bulk_helpers():
    data = np.array([7, 3, 11, 1, 5, 9, 13, 3], dtype=np.int64)

    tree = build_llrb(data, TWO_THREE)
    assert tree.count == 7
    assert list(tree.inorder()) == [1, 3, 5, 7, 9, 11, 13]

    fill_llrb(tree, np.array([2, 4, 6], dtype=np.int64))
    assert tree.count == 10

    remove_llrb(tree, np.array([1, 2, 3, 100], dtype=np.int64))
    assert list(tree.inorder()) == [4, 5, 6, 7, 9, 11, 13]
    validate(tree)


def test_warmup():
    assert warmup(16)


def test_dunders_and_root_info():
    tree = LLRBTreeArray(8, TWO_THREE)
    for key in [50, 30, 70]:
        tree.insert(key)

    assert len(tree) == 3
    assert 30 in tree
    assert 31 not in tree
    assert str(tree).startswith("LLRBTreeArray(size=3, root=")

    key, color, left, right = tree.root_info
    assert (key, color) == (50, BLACK)
    assert left == tree.search(30)
    assert right == tree.search(70)

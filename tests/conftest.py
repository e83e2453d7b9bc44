import pytest

from avlmap.dependency import AVLTree

SCENARIO_KEYS = [5, 3, 8, 1, 4, 7, 9]


@pytest.fixture
def scenario_tree():
    """Provide a tree built from keys 5, 3, 8, 1, 4, 7, 9, each mapped to its string form."""
    tree = AVLTree(check_invariants=True)
    for key in SCENARIO_KEYS:
        tree.insert(key, str(key))
    return tree

import math
from typing import Any


class InvalidPositionError(ValueError):
    """Raised when a position does not belong to the tree or was already removed."""


class IncompatibleKeyError(TypeError):
    """Raised when a key cannot be ordered by the comparator of the tree."""


class InvariantViolationError(AssertionError):
    """Raised when the ordering, balance, height, or size invariant of a tree is broken."""


class Helper:
    """A wrapper for the helper functions. They are wrapped in a class for neater importing statements."""

    # Constants of the AVL height bound, h < 1.4405 * log2(n + 2) - 0.3277.
    HEIGHT_FACTOR = 1.4405
    HEIGHT_OFFSET = 0.3277

    @staticmethod
    def compare(key_one: Any, key_two: Any) -> int:
        """
        Compare two keys with the natural ordering of Python objects.

        :param key_one: The first key.
        :param key_two: The second key.
        :return: -1 if key_one < key_two, 1 if key_one > key_two, and 0 otherwise.
        """
        if key_one < key_two:
            return -1
        if key_one > key_two:
            return 1
        return 0

    @staticmethod
    def avl_height_bound(num_data: int) -> float:
        """
        Compute the largest height an AVL tree holding num_data entries can reach.

        The bound counts levels, while tree heights are counted in edges (a single node has height 0), so compare it
        against the tree height plus one.
        :param num_data: The number of entries stored in the tree.
        :return: The upper bound on the height.
        """
        if num_data < 0:
            raise ValueError("The number of data must be non-negative.")

        return Helper.HEIGHT_FACTOR * math.log2(num_data + 2) - Helper.HEIGHT_OFFSET

"""
Benchmark: AVL tree height and operation time for random and sorted insertions
"""
import argparse
import os
import random
import sys
import time
from typing import Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from avlmap.dependency import AVLTree, Helper


def run_benchmark(num_data: int, pattern: str, seed: int) -> Dict[str, float]:
    """
    Insert, search, and remove num_data keys following the pattern.

    Returns dict with:
    - height: Tree height after all insertions
    - bound: The AVL height bound for num_data entries
    - insert/search/remove: Average time per operation in microseconds
    """
    keys: List[int] = list(range(num_data))
    if pattern == "random":
        random.Random(seed).shuffle(keys)
    elif pattern == "descending":
        keys.reverse()

    tree = AVLTree()

    start = time.perf_counter()
    for key in keys:
        tree.insert(key, key)
    insert_time = time.perf_counter() - start
    height = tree.height()

    start = time.perf_counter()
    for key in keys:
        tree.search(key)
    search_time = time.perf_counter() - start

    start = time.perf_counter()
    for key in keys:
        tree.remove(key)
    remove_time = time.perf_counter() - start

    return {
        "height": height,
        "bound": Helper.avl_height_bound(num_data),
        "insert": insert_time / num_data * 1e6,
        "search": search_time / num_data * 1e6,
        "remove": remove_time / num_data * 1e6,
    }


def main():
    parser = argparse.ArgumentParser(description="AVL Tree Height Benchmark")
    parser.add_argument("--sizes", type=int, nargs="+", default=[2 ** 10, 2 ** 14, 2 ** 17],
                        help="Numbers of keys to insert")
    parser.add_argument("--pattern", type=str, default="all", choices=["all", "random", "ascending", "descending"],
                        help="Order in which keys are inserted")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the random pattern")
    args = parser.parse_args()

    patterns = ["random", "ascending", "descending"] if args.pattern == "all" else [args.pattern]

    print("=== AVL Tree Height Benchmark ===\n")
    print(f"{'pattern':<12} {'n':<10} {'height':<8} {'bound':<8} {'insert us':<10} {'search us':<10} remove us")
    print("-" * 72)

    for pattern in patterns:
        for num_data in args.sizes:
            result = run_benchmark(num_data=num_data, pattern=pattern, seed=args.seed)
            print(
                f"{pattern:<12} {num_data:<10} {result['height']:<8} {result['bound']:<8.2f} "
                f"{result['insert']:<10.2f} {result['search']:<10.2f} {result['remove']:.2f}"
            )


if __name__ == "__main__":
    main()

from dataclasses import dataclass
from typing import Any, Callable, Tuple

# A three-way comparison: negative when a < b, zero when equal, positive when a > b.
Comparator = Callable[[Any, Any], int]

# Traversal orders.
PRE_ORDER = "pre_order"
IN_ORDER = "in_order"
POST_ORDER = "post_order"
LEVEL_ORDER = "level_order"

TRAVERSAL_ORDERS = (PRE_ORDER, IN_ORDER, POST_ORDER, LEVEL_ORDER)


@dataclass(frozen=True)
class KVPair:
    """A key-value pair with named access."""
    key: Any
    value: Any

    def to_tuple(self) -> Tuple[Any, Any]:
        """Convert to a tuple (key, value)."""
        return self.key, self.value

"""
Augmented AVL tree over half-open intervals [start, end).

Used to answer "which stored events overlap this time range" without
scanning the whole store. Two intervals overlap when
a.start < b.end and a.end > b.start; touching intervals do not.
"""

from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

# T represents the totally ordered coordinate type (datetimes here)
T = TypeVar('T')


class IntervalNode(Generic[T]):
    __slots__ = ['start', 'end', 'data', 'left', 'right', 'max_end', 'height']

    def __init__(self, start: T, end: T, data: Any):
        self.start: T = start
        self.end: T = end
        self.data: Any = data
        self.left: Optional['IntervalNode[T]'] = None
        self.right: Optional['IntervalNode[T]'] = None
        self.max_end: T = end
        self.height: int = 1


def _height(node: Optional[IntervalNode]) -> int:
    return node.height if node else 0


def _refresh(node: IntervalNode) -> None:
    node.height = 1 + max(_height(node.left), _height(node.right))
    m = node.end
    if node.left and node.left.max_end > m:
        m = node.left.max_end
    if node.right and node.right.max_end > m:
        m = node.right.max_end
    node.max_end = m


def _rotate_left(x: IntervalNode) -> IntervalNode:
    y = x.right
    x.right = y.left
    y.left = x
    _refresh(x)
    _refresh(y)
    return y


def _rotate_right(y: IntervalNode) -> IntervalNode:
    x = y.left
    y.left = x.right
    x.right = y
    _refresh(y)
    _refresh(x)
    return x


def _balance(node: IntervalNode) -> IntervalNode:
    _refresh(node)
    skew = _height(node.left) - _height(node.right)
    if skew > 1:
        if _height(node.left.left) < _height(node.left.right):
            node.left = _rotate_left(node.left)
        return _rotate_right(node)
    if skew < -1:
        if _height(node.right.right) < _height(node.right.left):
            node.right = _rotate_right(node.right)
        return _rotate_left(node)
    return node


class IntervalIndex(Generic[T]):
    """Interval index keyed by start; equal starts keep insertion order."""

    def __init__(self):
        self.root: Optional[IntervalNode[T]] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def insert(self, start: T, end: T, data: Any) -> None:
        def _insert(node: Optional[IntervalNode[T]]) -> IntervalNode[T]:
            if node is None:
                return IntervalNode(start, end, data)
            if start < node.start:
                node.left = _insert(node.left)
            else:
                node.right = _insert(node.right)
            return _balance(node)

        self.root = _insert(self.root)
        self._size += 1

    def remove(self, start: T, match: Callable[[Any], bool]) -> bool:
        """
        Remove the first interval starting at `start` whose data satisfies
        `match`. Returns True if something was removed.
        """
        removed = False

        def _pop_min(node: IntervalNode[T]) -> tuple[IntervalNode[T], Optional[IntervalNode[T]]]:
            if node.left is None:
                return node, node.right
            smallest, node.left = _pop_min(node.left)
            return smallest, _balance(node)

        def _remove(node: Optional[IntervalNode[T]]) -> Optional[IntervalNode[T]]:
            nonlocal removed
            if node is None:
                return None
            if start < node.start:
                node.left = _remove(node.left)
            elif node.start < start:
                node.right = _remove(node.right)
            elif not removed and match(node.data):
                removed = True
                if node.left is None:
                    return node.right
                if node.right is None:
                    return node.left
                successor, rest = _pop_min(node.right)
                successor.left, successor.right = node.left, rest
                return _balance(successor)
            else:
                # Equal starts may sit on either side after rotations
                node.left = _remove(node.left)
                if not removed:
                    node.right = _remove(node.right)
            return _balance(node)

        self.root = _remove(self.root)
        if removed:
            self._size -= 1
        return removed

    # --- Queries ---

    def overlapping(self, start: T, end: T) -> list[Any]:
        """Data of every interval overlapping [start, end), in start order."""
        found: list[Any] = []

        def _search(node: Optional[IntervalNode[T]]):
            if node is None or not node.max_end > start:
                return
            _search(node.left)
            if node.start < end:
                if node.end > start:
                    found.append(node.data)
                _search(node.right)

        _search(self.root)
        return found

    def covering(self, instant: T) -> list[Any]:
        """Data of every interval containing the instant (start <= t < end)."""
        found: list[Any] = []

        def _search(node: Optional[IntervalNode[T]]):
            if node is None or not node.max_end > instant:
                return
            _search(node.left)
            if node.start <= instant:
                if node.end > instant:
                    found.append(node.data)
                _search(node.right)

        _search(self.root)
        return found

    def __iter__(self) -> Iterator[Any]:
        def _walk(node: Optional[IntervalNode[T]]):
            if node is None:
                return
            yield from _walk(node.left)
            yield node.data
            yield from _walk(node.right)
        return _walk(self.root)

    # --- Debug Tool ---

    def verify_integrity(self):
        """Raises if AVL height or max_end properties are violated."""
        def _walk(node: Optional[IntervalNode[T]]):
            if node is None:
                return 0, None
            left_h, left_max = _walk(node.left)
            right_h, right_max = _walk(node.right)
            if abs(left_h - right_h) > 1:
                raise RuntimeError(f"AVL violation at {node.start}")
            expected = node.end
            for m in (left_max, right_max):
                if m is not None and m > expected:
                    expected = m
            if node.max_end != expected:
                raise RuntimeError(f"max_end violation at {node.start}")
            if node.left is not None and node.start < node.left.start:
                raise RuntimeError(f"Order violation at {node.start}")
            if node.right is not None and node.right.start < node.start:
                raise RuntimeError(f"Order violation at {node.start}")
            return 1 + max(left_h, right_h), expected

        _walk(self.root)

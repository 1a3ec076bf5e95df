# routing/heap.py


class IndexedHeap:
    """
    Binary min-heap of (priority, key) with a position index, so an entry's
    priority can be changed in place instead of pushing a duplicate.
    Equal priorities pop the smaller key first.
    """

    def __init__(self):
        self._heap: list[tuple[float, int]] = []
        self._pos: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def priority(self, key: int) -> float:
        return self._heap[self._pos[key]][0]

    def push(self, key: int, priority: float) -> None:
        """Insert ``key``, or move it to ``priority`` if already queued."""
        i = self._pos.get(key)
        if i is None:
            self._heap.append((priority, key))
            self._pos[key] = len(self._heap) - 1
            self._sift_up(len(self._heap) - 1)
            return
        old = self._heap[i]
        self._heap[i] = (priority, key)
        if (priority, key) < old:
            self._sift_up(i)
        else:
            self._sift_down(i)

    def pop(self) -> tuple[int, float]:
        if not self._heap:
            raise IndexError("pop from empty heap")
        top = self._heap[0]
        last = self._heap.pop()
        del self._pos[top[1]]
        if self._heap:
            self._heap[0] = last
            self._pos[last[1]] = 0
            self._sift_down(0)
        return top[1], top[0]

    # --------------- Helpers -----------------------------

    def _swap(self, i: int, j: int) -> None:
        h = self._heap
        h[i], h[j] = h[j], h[i]
        self._pos[h[i][1]] = i
        self._pos[h[j][1]] = j

    def _sift_up(self, i: int) -> None:
        h = self._heap
        while i > 0:
            parent = (i - 1) // 2
            if h[i] < h[parent]:
                self._swap(i, parent)
                i = parent
            else:
                break

    def _sift_down(self, i: int) -> None:
        h = self._heap
        n = len(h)
        while True:
            smallest = i
            for child in (2 * i + 1, 2 * i + 2):
                if child < n and h[child] < h[smallest]:
                    smallest = child
            if smallest == i:
                return
            self._swap(i, smallest)
            i = smallest

"""View generation tokens for discarding stale async completions."""


class ViewGeneration:
    """Monotonically increasing token owned by one view.

    Anything started under an older token is stale once the view moves on.
    """

    def __init__(self):
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def begin(self) -> int:
        self._current += 1
        return self._current

    def invalidate(self) -> None:
        self._current += 1

    def is_current(self, token: int) -> bool:
        return token == self._current

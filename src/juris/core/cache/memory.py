"""Process-local session state store."""


class MemorySessionStore:
    """Dictionary-backed key-value store.

    Suitable for a single process (desktop shell, tests). Values are
    strings, mirroring what a browser-style local store would hold.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the stored values."""
        return dict(self._data)

class InMemoryStorage:
    """Keeps values in a process-local dict. Used in local mode and tests,
    nothing survives a restart."""

    def __init__(self, initial_data: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial_data or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def ping(self) -> None: ...

    async def aclose(self) -> None: ...

    def clear(self) -> None:
        self._data.clear()

    def dump(self) -> dict[str, str]:
        return dict(self._data)

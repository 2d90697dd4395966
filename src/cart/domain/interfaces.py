import typing as t


class KeyValueStorageI(t.Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def ping(self) -> None: ...

    async def aclose(self) -> None: ...

class ServiceError(Exception):
    _msg = "unexpected service error"

    def __init__(self, msg: str | None = None) -> None:
        self._msg = msg or self._msg
        return super().__init__()

    def __str__(self):
        return self._msg


class ProviderScopeError(ServiceError):
    _msg = "use_cart must be used within a CartProvider"


class SynchronizerStateError(ServiceError):
    def __init__(self, state: str, action: str = "start") -> None:
        super().__init__(f"Can't {action} cart synchronizer in state: {state}")


class SnapshotDecodeError(ServiceError):
    _msg = "Persisted cart snapshot is malformed"

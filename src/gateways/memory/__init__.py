from .main import InMemoryStorage

__all__ = ["InMemoryStorage"]

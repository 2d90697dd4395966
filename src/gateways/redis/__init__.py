from .main import RedisStorage

__all__ = ["RedisStorage"]

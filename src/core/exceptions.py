import abc
import logging
import typing as t
from collections.abc import Mapping


class AbstractExceptionMapper[K: Exception, V: Exception](abc.ABC):
    EXCEPTION_MAPPING: Mapping[type[K], type[V]]

    @abc.abstractmethod
    def get_default_exc(self) -> type[V]: ...

    def map(self, exc: K) -> type[V]:
        for exc_class in type(exc).__mro__:
            mapped_exc_cls = self.EXCEPTION_MAPPING.get(t.cast(type[K], exc_class))
            if mapped_exc_cls:
                return mapped_exc_cls
        logging.warning("Not mapped exception: %s", exc, exc_info=True)
        return self.get_default_exc()

    def map_and_init(self, exc: K) -> V:
        return self.map(exc)(str(exc))

    def map_and_raise(self, exc: K) -> t.NoReturn:
        raise self.map_and_init(exc) from exc

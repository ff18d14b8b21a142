import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class ThreadLocalFactory(Generic[T]):
    """
    Builds one instance per calling thread and caches it for that thread's lifetime.
    Used for pool handles and HTTP clients so the submit/request path takes no lock.
    """

    def __init__(self, build: Callable[[], T]):
        self._build = build
        self._local = threading.local()

    def get(self) -> T:
        try:
            return self._local.instance
        except AttributeError:
            instance = self._build()
            self._local.instance = instance
            return instance

    def clear(self) -> None:
        """Drops the cached instances of every thread."""
        self._local = threading.local()

"""Thread-safe lazy singleton holder.

Module-level singletons (the router façade, the health checker, the metrics
sink) are built on first use from configuration. ``reset_all()`` drops every
cached instance so tests can rebuild them against patched settings.
"""

import threading
import weakref
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Lazy(Generic[T]):
    """Lazily-initialized singleton.

    Usage:
        _router = Lazy(build_router, name="router")

        def get_router() -> EnsembleRouter:
            return _router.get()
    """

    _all_instances: list["weakref.ref[Lazy]"] = []
    _registry_lock = threading.Lock()

    def __init__(self, factory: Callable[[], T], name: str = "") -> None:
        self._factory = factory
        self.name = name or getattr(factory, "__name__", "lazy")
        self._instance: T | None = None
        self._lock = threading.Lock()
        with Lazy._registry_lock:
            Lazy._all_instances.append(weakref.ref(self))

    @property
    def is_initialized(self) -> bool:
        return self._instance is not None

    def get(self) -> T:
        """Return the cached instance, creating it on first call."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = self._factory()
        return self._instance

    def peek(self) -> T | None:
        """Return the instance if already built, without building it."""
        return self._instance

    def set(self, instance: T) -> None:
        """Install a prebuilt instance (used by app startup and tests)."""
        with self._lock:
            self._instance = instance

    def reset(self) -> None:
        with self._lock:
            self._instance = None

    @classmethod
    def reset_all(cls) -> None:
        """Reset every live Lazy holder and prune dead references."""
        with cls._registry_lock:
            alive: list[weakref.ref[Lazy]] = []
            for ref in cls._all_instances:
                obj = ref()
                if obj is not None:
                    obj.reset()
                    alive.append(ref)
            cls._all_instances = alive

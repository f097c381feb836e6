"""Registry of job classes that may be dispatched by name.

Job classes register themselves at import time with ``@register_job``; the
modules holding them are imported once at startup by ``load_job_modules``.
Dispatch requests only ever resolve names through the registry, never by
importing whatever the caller asked for.
"""
import importlib
from typing import Dict, Iterable, List, Optional


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class JobRegistry:
    """Injectable name -> job class lookup.

    Example:
        >>> registry = JobRegistry()
        >>> @register_job(registry=registry)
        ... class Example(QueuedJob):
        ...     ...
        >>> registry.resolve("mymodule.Example")
    """

    def __init__(self):
        self._classes: Dict[str, type] = {}

    def register(self, cls: type) -> type:
        self._classes[qualified_name(cls)] = cls
        return cls

    def resolve(self, name: str) -> Optional[type]:
        return self._classes.get(name)

    def has(self, name: str) -> bool:
        return name in self._classes

    def names(self) -> List[str]:
        return sorted(self._classes)

    def unregister(self, name: str) -> bool:
        return self._classes.pop(name, None) is not None

    def clear(self) -> None:
        self._classes.clear()


_default_registry: Optional[JobRegistry] = None


def get_default_registry() -> JobRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = JobRegistry()
    return _default_registry


def register_job(cls: Optional[type] = None, *, registry: Optional[JobRegistry] = None):
    """Class decorator; usable bare (``@register_job``) or with a registry."""

    def decorator(job_cls: type) -> type:
        return (registry or get_default_registry()).register(job_cls)

    if cls is not None:
        return decorator(cls)
    return decorator


def load_job_modules(modules: Iterable[str]) -> None:
    for module in modules:
        importlib.import_module(module)

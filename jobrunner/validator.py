"""Decides whether a class/method pair may be dispatched."""
import inspect
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from . import config
from .errors import ValidationError
from .job import QueuedJob
from .registry import JobRegistry, get_default_registry


@dataclass(frozen=True)
class ValidationVerdict:
    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted


ACCEPTED = ValidationVerdict(True)

# Base job API, never a factory
RESERVED_NAMES = frozenset(name for name in dir(QueuedJob) if not name.startswith("_"))


class TargetValidator:
    """Checks a target against the job registry and the allowed namespaces.

    A class is dispatchable when it is registered and its module is one of
    ``allowed_namespaces``. The method must be a public classmethod or
    staticmethod, since the worker calls it on the class as a factory.
    """

    def __init__(self, registry: Optional[JobRegistry] = None, allowed_namespaces: Optional[Iterable[str]] = None):
        self.registry = registry or get_default_registry()
        if allowed_namespaces is None:
            allowed_namespaces = config.ALLOWED_NAMESPACES
        self.allowed_namespaces = frozenset(allowed_namespaces)

    def validate(self, class_name: str, method: str) -> ValidationVerdict:
        cls = self.registry.resolve(class_name)
        if cls is None or cls.__module__ not in self.allowed_namespaces:
            return ValidationVerdict(False, f"Unauthorized class: {class_name}")

        missing = ValidationVerdict(False, f"Method {method} does not exist on class {class_name}")
        if not method or method.startswith("_") or method in RESERVED_NAMES:
            return missing
        try:
            member = inspect.getattr_static(cls, method)
        except AttributeError:
            return missing
        if isinstance(member, (classmethod, staticmethod)):
            return ACCEPTED
        if callable(member):
            return ValidationVerdict(False, f"Method {method} on class {class_name} is not a class-level factory")
        return missing

    def resolve_factory(self, class_name: str, method: str) -> Callable:
        verdict = self.validate(class_name, method)
        if not verdict:
            raise ValidationError(verdict.reason)
        return getattr(self.registry.resolve(class_name), method)

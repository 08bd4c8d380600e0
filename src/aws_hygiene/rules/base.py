"""Rule capability shared by every hygiene check."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from aws_hygiene.domain.resources import Resource, ResourceType
from aws_hygiene.errors import ResourceTypeMismatch


class Rule(ABC):
    """Named predicate over resources of specific types.

    Subclasses declare ``name``, ``description`` and ``resource_types`` and
    implement ``_check``. Any context a rule needs is passed to its
    constructor and must not change afterwards, so a single instance can be
    evaluated from several threads at once.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    resource_types: ClassVar[frozenset[ResourceType]]

    def supports(self, resource: Resource) -> bool:
        return resource.type in self.resource_types

    def is_valid(self, resource: Resource) -> bool:
        if not self.supports(resource):
            raise ResourceTypeMismatch(self.name, resource.type.value, resource.id)
        return self._check(resource)

    @abstractmethod
    def _check(self, resource: Resource) -> bool:
        """Return False when the resource violates the rule."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

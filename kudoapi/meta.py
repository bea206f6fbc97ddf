"""Object metadata, references and the API group/version of the kudo resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

__all__ = [
    "GroupVersion",
    "GroupResource",
    "ObjectMeta",
    "TypeMeta",
    "ObjectReference",
    "SCHEME_GROUP_VERSION",
    "resource",
]


@dataclass(frozen=True)
class GroupResource:
    """A resource name qualified by its API group."""

    group: str
    resource: str

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    def with_resource(self, resource: str) -> GroupResource:
        """Return the group-qualified form of ``resource``."""
        return GroupResource(group=self.group, resource=resource)


SCHEME_GROUP_VERSION = GroupVersion(group="kudo.dev", version="v1alpha1")


def resource(name: str) -> GroupResource:
    """Qualify a resource name with the kudo API group."""
    return SCHEME_GROUP_VERSION.with_resource(name)


@dataclass
class TypeMeta:
    """Kind and API version of an object."""

    kind: str = ""
    api_version: str = ""


@dataclass
class ObjectMeta:
    """The subset of object metadata the kudo types work with."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


_REFERENCE_KEYS = (
    ("kind", "kind"),
    ("namespace", "namespace"),
    ("name", "name"),
    ("uid", "uid"),
    ("api_version", "apiVersion"),
    ("resource_version", "resourceVersion"),
    ("field_path", "fieldPath"),
)


@dataclass
class ObjectReference:
    """A reference to another object in the cluster."""

    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = ""
    resource_version: str = ""
    field_path: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serialise to the wire form, leaving out empty fields."""
        return {
            key: getattr(self, attr)
            for attr, key in _REFERENCE_KEYS
            if getattr(self, attr)
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ObjectReference":
        """Build a reference from its wire form; unknown keys are ignored."""
        data = data or {}
        return cls(**{attr: str(data.get(key) or "") for attr, key in _REFERENCE_KEYS})
"""Operator and OperatorVersion resources: plans, phases, steps and parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from kudoapi.meta import ObjectMeta, ObjectReference, TypeMeta

__all__ = [
    "Ordering",
    "Step",
    "Phase",
    "Plan",
    "Parameter",
    "TaskSpec",
    "OperatorDependency",
    "OperatorVersionSpec",
    "OperatorVersion",
    "Maintainer",
    "OperatorSpec",
    "Operator",
]


class Ordering(str, Enum):
    """How the items of a plan or phase are rolled out."""

    SERIAL = "serial"
    PARALLEL = "parallel"

    def __str__(self) -> str:
        return self.value


def _ordering(value: Any) -> Ordering | str:
    text = "" if value is None else str(value)
    try:
        return Ordering(text)
    except ValueError:
        return text


def _type_meta(data: Mapping[str, Any]) -> TypeMeta:
    return TypeMeta(
        kind=str(data.get("kind") or ""),
        api_version=str(data.get("apiVersion") or ""),
    )


def _object_meta(data: Mapping[str, Any] | None) -> ObjectMeta:
    data = data or {}
    return ObjectMeta(
        name=str(data.get("name") or ""),
        namespace=str(data.get("namespace") or ""),
        labels=dict(data.get("labels") or {}),
        annotations=dict(data.get("annotations") or {}),
    )


@dataclass
class Step:
    """A named set of tasks run as one unit of a phase."""

    name: str = ""
    tasks: list[str] = field(default_factory=list)
    delete: bool = False
    objects: list[Any] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "Step":
        return cls(
            name=str(data.get("name") or ""),
            tasks=[str(t) for t in data.get("tasks") or []],
            delete=bool(data.get("delete", False)),
        )


@dataclass
class Phase:
    """An ordered list of steps within a plan."""

    name: str = ""
    strategy: Ordering | str = ""
    steps: list[Step] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "Phase":
        return cls(
            name=str(data.get("name") or ""),
            strategy=_ordering(data.get("strategy")),
            steps=[Step._from_dict(s) for s in data.get("steps") or []],
        )


@dataclass
class Plan:
    """A series of phases that need to be completed."""

    strategy: Ordering | str = ""
    phases: list[Phase] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Plan":
        """Build a plan from its wire form."""
        return cls(
            strategy=_ordering(data.get("strategy")),
            phases=[Phase._from_dict(p) for p in data.get("phases") or []],
        )


@dataclass
class Parameter:
    """A value an instance may set to vary what gets deployed."""

    display_name: str = ""
    name: str = ""
    description: str = ""
    required: bool = False
    default: str | None = None
    trigger: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Parameter":
        """Build a parameter from its wire form."""
        default = data.get("default")
        return cls(
            display_name=str(data.get("displayName") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            required=bool(data.get("required", False)),
            default=None if default is None else str(default),
            trigger=str(data.get("trigger") or ""),
        )


@dataclass
class TaskSpec:
    """The resources a task applies."""

    resources: list[str] = field(default_factory=list)


@dataclass
class OperatorDependency:
    """A reference to another operator this one depends on."""

    reference_name: str = ""
    reference: ObjectReference = field(default_factory=ObjectReference)
    version: str = ""

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> "OperatorDependency":
        return cls(
            reference_name=str(data.get("referenceName") or ""),
            reference=ObjectReference.from_dict(data),
            version=str(data.get("version") or ""),
        )


@dataclass
class OperatorVersionSpec:
    """The desired state of an OperatorVersion."""

    operator: ObjectReference = field(default_factory=ObjectReference)
    version: str = ""
    templates: dict[str, str] = field(default_factory=dict)
    tasks: dict[str, TaskSpec] = field(default_factory=dict)
    parameters: list[Parameter] = field(default_factory=list)
    plans: dict[str, Plan] = field(default_factory=dict)
    connection_string: str = ""
    dependencies: list[OperatorDependency] = field(default_factory=list)
    upgradable_from: list["OperatorVersion"] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any] | None) -> "OperatorVersionSpec":
        data = data or {}
        return cls(
            operator=ObjectReference.from_dict(data.get("operator")),
            version=str(data.get("version") or ""),
            templates={k: str(v) for k, v in (data.get("templates") or {}).items()},
            tasks={
                name: TaskSpec(resources=[str(r) for r in (spec or {}).get("resources") or []])
                for name, spec in (data.get("tasks") or {}).items()
            },
            parameters=[Parameter.from_dict(p) for p in data.get("parameters") or []],
            plans={name: Plan.from_dict(p or {}) for name, p in (data.get("plans") or {}).items()},
            connection_string=str(data.get("connectionString") or ""),
            dependencies=[
                OperatorDependency._from_dict(d) for d in data.get("dependencies") or []
            ],
            upgradable_from=[
                OperatorVersion.from_dict(ov) for ov in data.get("upgradableFrom") or []
            ],
        )


@dataclass
class OperatorVersion:
    """A specific version of an operator, with its plans and parameters."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: OperatorVersionSpec = field(default_factory=OperatorVersionSpec)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OperatorVersion":
        """Build an OperatorVersion from its wire form."""
        return cls(
            type_meta=_type_meta(data),
            metadata=_object_meta(data.get("metadata")),
            spec=OperatorVersionSpec._from_dict(data.get("spec")),
        )


@dataclass
class Maintainer:
    """A person or organisation maintaining an operator."""

    name: str = ""
    email: str = ""


@dataclass
class OperatorSpec:
    """The desired state of an Operator."""

    description: str = ""
    kudo_version: str = ""
    kubernetes_version: str = ""
    maintainers: list[Maintainer] = field(default_factory=list)
    url: str = ""


@dataclass
class Operator:
    """An operator, the parent of its OperatorVersions."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: OperatorSpec = field(default_factory=OperatorSpec)
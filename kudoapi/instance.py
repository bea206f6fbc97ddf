"""Instance resources and the plan bookkeeping that drives their execution."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from kudoapi.meta import ObjectMeta, ObjectReference, TypeMeta
from kudoapi.operatorversion import OperatorVersion, Parameter

__all__ = [
    "ExecutionStatus",
    "StepStatus",
    "PhaseStatus",
    "PlanStatus",
    "AggregatedStatus",
    "InstanceSpec",
    "InstanceStatus",
    "Instance",
    "InstanceError",
    "DEPLOY_PLAN_NAME",
    "UPGRADE_PLAN_NAME",
    "UPDATE_PLAN_NAME",
    "SNAPSHOT_ANNOTATION",
    "is_upgrade_plan",
    "select_plan",
    "plan_name_from_parameters",
    "get_param_definitions",
    "parameter_difference",
]

log = logging.getLogger(__name__)

DEPLOY_PLAN_NAME = "deploy"
UPGRADE_PLAN_NAME = "upgrade"
UPDATE_PLAN_NAME = "update"

SNAPSHOT_ANNOTATION = "kudo.dev/last-applied-instance-state"


class ExecutionStatus(str, Enum):
    """The state of a plan, phase or step rollout."""

    IN_PROGRESS = "IN_PROGRESS"
    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"
    FATAL_ERROR = "FATAL_ERROR"
    NEVER_RUN = "NEVER_RUN"

    def __str__(self) -> str:
        return self.value

    def is_terminal(self) -> bool:
        """True when complete or in a non-recoverable error."""
        return self in (ExecutionStatus.COMPLETE, ExecutionStatus.FATAL_ERROR)

    def is_finished(self) -> bool:
        """True when complete."""
        return self is ExecutionStatus.COMPLETE

    def is_running(self) -> bool:
        """True while the plan is being executed."""
        return self in (
            ExecutionStatus.IN_PROGRESS,
            ExecutionStatus.PENDING,
            ExecutionStatus.ERROR,
        )


@dataclass
class StepStatus:
    """Status of a single step."""

    name: str = ""
    status: ExecutionStatus = ExecutionStatus.NEVER_RUN


@dataclass
class PhaseStatus:
    """Status of a phase and its steps."""

    name: str = ""
    status: ExecutionStatus = ExecutionStatus.NEVER_RUN
    steps: list[StepStatus] = field(default_factory=list)


@dataclass
class PlanStatus:
    """Status of a plan and its phases."""

    name: str = ""
    status: ExecutionStatus = ExecutionStatus.NEVER_RUN
    last_finished_run: datetime | None = None
    phases: list[PhaseStatus] = field(default_factory=list)


@dataclass
class AggregatedStatus:
    """Overview of an instance's status derived from its plan statuses."""

    status: ExecutionStatus | None = None
    active_plan_name: str = ""


@dataclass
class InstanceSpec:
    """The desired state of an Instance."""

    operator_version: ObjectReference = field(default_factory=ObjectReference)
    parameters: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire form; empty parameters are left out."""
        data: dict[str, Any] = {"operatorVersion": self.operator_version.to_dict()}
        if self.parameters:
            data["parameters"] = dict(sorted(self.parameters.items()))
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "InstanceSpec":
        """Build a spec from its wire form."""
        data = data or {}
        return cls(
            operator_version=ObjectReference.from_dict(data.get("operatorVersion")),
            parameters={str(k): str(v) for k, v in (data.get("parameters") or {}).items()},
        )


@dataclass
class InstanceStatus:
    """The observed state of an Instance."""

    plan_status: dict[str, PlanStatus] = field(default_factory=dict)
    aggregated_status: AggregatedStatus = field(default_factory=AggregatedStatus)


class InstanceError(Exception):
    """An execution error that may also be reported as a warning event."""

    def __init__(self, message: str, event_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.event_name = event_name

    def __str__(self) -> str:
        return f"Error during execution: {self.message}"


def is_upgrade_plan(plan_name: str) -> bool:
    """Whether the plan could be an upgrade plan (deploy may serve as one too)."""
    return plan_name in (DEPLOY_PLAN_NAME, UPGRADE_PLAN_NAME)


def select_plan(possible_plans: Iterable[str], ov: OperatorVersion) -> str | None:
    """Return the first of the given plan names that the OperatorVersion defines."""
    return next((name for name in possible_plans if name in ov.spec.plans), None)


def plan_name_from_parameters(params: Iterable[Parameter], ov: OperatorVersion) -> str | None:
    """Choose the plan to run from the trigger plans of changed parameters."""
    for param in params:
        if param.trigger and select_plan([param.trigger], ov) is not None:
            return param.trigger
    return select_plan([UPDATE_PLAN_NAME, DEPLOY_PLAN_NAME], ov)


def get_param_definitions(params: Mapping[str, str], ov: OperatorVersion) -> list[Parameter]:
    """Look up the OperatorVersion definitions of the named parameters."""
    return [
        definition
        for name in params
        for definition in ov.spec.parameters
        if definition.name == name
    ]


def parameter_difference(old: Mapping[str, str], new: Mapping[str, str]) -> dict[str, str]:
    """Parameters removed, added or changed between ``old`` and ``new``."""
    diff = {key: value for key, value in old.items() if key not in new}
    diff.update(
        (key, value)
        for key, value in new.items()
        if key not in old or old[key] != value
    )
    return diff


@dataclass
class Instance:
    """A running instance of an OperatorVersion."""

    type_meta: TypeMeta = field(default_factory=TypeMeta)
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: InstanceSpec = field(default_factory=InstanceSpec)
    status: InstanceStatus = field(default_factory=InstanceStatus)

    @property
    def _full_name(self) -> str:
        return f"{self.metadata.namespace}/{self.metadata.name}"

    def get_plan_in_progress(self) -> PlanStatus | None:
        """The status of the currently running plan, or None."""
        return next(
            (p for p in self.status.plan_status.values() if p.status.is_running()),
            None,
        )

    def no_plan_ever_executed(self) -> bool:
        """True for a new instance on which no plan has run yet."""
        return all(
            p.status is ExecutionStatus.NEVER_RUN for p in self.status.plan_status.values()
        )

    def ensure_plan_status_initialized(self, ov: OperatorVersion) -> None:
        """Create status entries for every plan of ``ov``, keeping known statuses."""
        for plan_name, plan in ov.spec.plans.items():
            existing_plan = self.status.plan_status.get(plan_name)
            plan_status = PlanStatus(
                name=plan_name,
                status=existing_plan.status if existing_plan else ExecutionStatus.NEVER_RUN,
            )
            for phase in plan.phases:
                existing_phase = None
                if existing_plan is not None:
                    for old_phase in existing_plan.phases:
                        if old_phase.name == phase.name:
                            existing_phase = old_phase
                phase_status = PhaseStatus(
                    name=phase.name,
                    status=existing_phase.status if existing_phase else ExecutionStatus.NEVER_RUN,
                )
                for step in phase.steps:
                    step_status = StepStatus(name=step.name)
                    if existing_phase is not None:
                        for old_step in existing_phase.steps:
                            if old_step.name == step.name:
                                step_status.status = old_step.status
                    phase_status.steps.append(step_status)
                plan_status.phases.append(phase_status)
            self.status.plan_status[plan_name] = plan_status

    def start_plan_execution(self, plan_name: str, ov: OperatorVersion) -> None:
        """Mark a plan as pending and snapshot the spec it runs against."""
        if self.no_plan_ever_executed() or is_upgrade_plan(plan_name):
            self.ensure_plan_status_initialized(ov)

        plan_status = next(
            (p for p in self.status.plan_status.values() if p.name == plan_name), None
        )
        if plan_status is None:
            raise InstanceError(
                f"asked to execute a plan {plan_name} but no such plan found "
                f"in instance {self._full_name}",
                "PlanNotFound",
            )

        plan_status.status = ExecutionStatus.PENDING
        for phase in plan_status.phases:
            phase.status = ExecutionStatus.PENDING
            for step in phase.steps:
                step.status = ExecutionStatus.PENDING

        self.status.aggregated_status.status = ExecutionStatus.PENDING
        self.status.aggregated_status.active_plan_name = plan_name

        self.save_snapshot()

    def update_instance_status(self, plan_status: PlanStatus) -> None:
        """Store ``plan_status`` and update the aggregated status from it."""
        for key, existing in list(self.status.plan_status.items()):
            if existing.name == plan_status.name:
                self.status.plan_status[key] = plan_status
                self.status.aggregated_status.status = plan_status.status
                if plan_status.status.is_terminal():
                    self.status.aggregated_status.active_plan_name = ""

    def save_snapshot(self) -> None:
        """Store the current spec in the snapshot annotation."""
        self.metadata.annotations[SNAPSHOT_ANNOTATION] = json.dumps(
            self.spec.to_dict(), separators=(",", ":")
        )

    def snapshot_spec(self) -> InstanceSpec | None:
        """The spec stored by the last snapshot, or None if there is none."""
        snapshot = self.metadata.annotations.get(SNAPSHOT_ANNOTATION)
        if snapshot is None:
            return None
        data = json.loads(snapshot)
        if data is None:
            return None
        return InstanceSpec.from_dict(data)

    def get_plan_to_be_executed(self, ov: OperatorVersion) -> str | None:
        """Name of the plan that should run next, or None if nothing should."""
        if self.get_plan_in_progress() is not None:
            return None

        if self.no_plan_ever_executed():
            return DEPLOY_PLAN_NAME

        snapshot = self.snapshot_spec()
        if snapshot is None:
            raise InstanceError(
                "unexpected state: no plan is running, no snapshot present "
                f"for instance {self._full_name}",
                "UnexpectedState",
            )

        if snapshot.operator_version.name != self.spec.operator_version.name:
            log.info(
                "Instance: instance %s was upgraded from %s to %s operatorversion",
                self._full_name,
                snapshot.operator_version.name,
                self.spec.operator_version.name,
            )
            plan = select_plan([UPGRADE_PLAN_NAME, UPDATE_PLAN_NAME, DEPLOY_PLAN_NAME], ov)
            if plan is None:
                raise InstanceError(
                    f"supposed to execute plan because instance {self._full_name} was "
                    "upgraded but none of the deploy, upgrade, update plans found "
                    "in linked operatorVersion",
                    "PlanNotFound",
                )
            return plan

        if snapshot.parameters != self.spec.parameters:
            log.info(
                "Instance: instance %s has updated parameters from %s to %s",
                self._full_name,
                snapshot.parameters,
                self.spec.parameters,
            )
            diff = parameter_difference(snapshot.parameters, self.spec.parameters)
            plan = plan_name_from_parameters(get_param_definitions(diff, ov), ov)
            if plan is None:
                raise InstanceError(
                    f"supposed to execute plan because instance {self._full_name} was "
                    "updated but none of the deploy, update plans found in linked "
                    "operatorVersion",
                    "PlanNotFound",
                )
            return plan

        return None

    def operator_version_namespace(self) -> str:
        """Namespace of the referenced OperatorVersion, defaulting to the instance's."""
        return self.spec.operator_version.namespace or self.metadata.namespace
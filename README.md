# kudoapi

kudoapi is a Python model of the KUDO `kudo.dev/v1alpha1` API types: operators, operator versions and instances. It also holds the logic that decides which plan an instance should run next.

## Installation

```
pip install .
```

The `test` extra installs pytest, which the test suite needs:

```
pip install ".[test]"
```

## Modules

- `kudoapi.meta` holds the group/version identifiers and the metadata types.
  - The identifiers are `GroupVersion`, `GroupResource`, `SCHEME_GROUP_VERSION` and `resource()`. For example, `resource("instances")` gives `instances.kudo.dev`.
  - The metadata types are `ObjectMeta`, `TypeMeta` and `ObjectReference`. `ObjectReference` has `to_dict()` and `from_dict()`, which convert to and from the camel-case wire form.
- `kudoapi.operatorversion` describes operators and operator versions.
  - It defines `Operator`, `OperatorSpec`, `Maintainer`, `OperatorVersion`, `OperatorVersionSpec`, `Plan`, `Phase`, `Step`, `Parameter`, `TaskSpec`, `OperatorDependency` and the `Ordering` strategies (`serial`, `parallel`).
  - `OperatorVersion.from_dict()`, `Plan.from_dict()` and `Parameter.from_dict()` build objects from parsed YAML or JSON.
- `kudoapi.instance` holds `Instance`, its status types (`InstanceStatus`, `PlanStatus`, `PhaseStatus`, `StepStatus`, `AggregatedStatus`) and the `ExecutionStatus` enum. It also implements the plan lifecycle:
  - `ensure_plan_status_initialized()` creates status entries for every plan of an operator version and keeps the statuses already known.
  - `start_plan_execution()` marks a plan and all of its phases and steps as pending, then saves a snapshot of the spec.
  - `update_instance_status()` records a plan's status and updates the aggregated status from it.
  - `save_snapshot()` and `snapshot_spec()` store and read the last applied spec in the `kudo.dev/last-applied-instance-state` annotation.
  - `get_plan_to_be_executed()` chooses the plan to run. A fresh instance gets `deploy`. An instance whose operator version changed gets `upgrade`, `update` or `deploy`, the first of these that exists. An instance whose parameters changed gets the changed parameters' trigger plan, and otherwise `update` or `deploy`.
  - The helper functions `select_plan()`, `plan_name_from_parameters()`, `get_param_definitions()`, `parameter_difference()` and `is_upgrade_plan()` are also available.

## Example

```python
from kudoapi.operatorversion import OperatorVersion
from kudoapi.instance import Instance

ov = OperatorVersion.from_dict({
    "metadata": {"name": "zookeeper-0.1.0"},
    "spec": {
        "plans": {
            "deploy": {
                "strategy": "serial",
                "phases": [
                    {"name": "main", "strategy": "serial",
                     "steps": [{"name": "everything", "tasks": ["app"]}]},
                ],
            },
        },
    },
})

instance = Instance()
plan = instance.get_plan_to_be_executed(ov)   # "deploy" for a fresh instance
instance.start_plan_execution(plan, ov)
print(instance.status.aggregated_status.active_plan_name)  # deploy
```

When a plan cannot be found, or when the instance is in a state it cannot be in, the lifecycle methods raise `InstanceError`. The exception's `event_name` attribute (`"PlanNotFound"` or `"UnexpectedState"`) names the warning event to report.

## What this package does not do

kudoapi works only with in-memory objects. It does not:

- talk to a Kubernetes cluster;
- run a controller;
- apply templates or tasks;
- provide a command-line tool;
- validate service specifications.
import pytest

from kudoapi.meta import ObjectReference
from kudoapi.operatorversion import (
    Maintainer,
    Operator,
    OperatorSpec,
    OperatorVersion,
    Ordering,
    Parameter,
    Plan,
)


@pytest.fixture
def ov_document():
    return {
        "apiVersion": "kudo.dev/v1alpha1",
        "kind": "OperatorVersion",
        "metadata": {"name": "zk-1.0", "namespace": "ns", "labels": {"app": "zk"}},
        "spec": {
            "operator": {"name": "zk", "kind": "Operator"},
            "version": "1.0",
            "templates": {"deploy.yaml": "kind: Pod"},
            "tasks": {"app": {"resources": ["deploy.yaml"]}},
            "parameters": [
                {"name": "COUNT", "default": "3", "trigger": "update", "required": True},
                {"name": "IMAGE", "displayName": "Image"},
            ],
            "plans": {
                "deploy": {
                    "strategy": "serial",
                    "phases": [
                        {
                            "name": "main",
                            "strategy": "parallel",
                            "steps": [
                                {"name": "everything", "tasks": ["app"]},
                                {"name": "cleanup", "tasks": ["app"], "delete": True},
                            ],
                        }
                    ],
                }
            },
            "connectionString": "zk://host",
            "dependencies": [
                {"referenceName": "kafka", "kind": "Operator", "name": "kafka", "version": "^3.1.4"}
            ],
            "upgradableFrom": [{"metadata": {"name": "zk-0.9"}, "spec": {"version": "0.9"}}],
        },
    }


def test_ordering_values():
    assert Ordering("serial") is Ordering.SERIAL
    assert Ordering("parallel") is Ordering.PARALLEL
    assert str(Ordering.PARALLEL) == "parallel"


def test_parameter_from_dict_with_default():
    p = Parameter.from_dict({"name": "COUNT", "default": "3", "trigger": "update"})
    assert p.name == "COUNT"
    assert p.default == "3"
    assert p.trigger == "update"
    assert p.required is False


def test_parameter_without_default_is_none():
    p = Parameter.from_dict({"name": "IMAGE"})
    assert p.default is None
    assert p.trigger == ""


def test_parameter_empty_default_is_kept():
    assert Parameter.from_dict({"name": "X", "default": ""}).default == ""


def test_plan_from_dict_parses_phases_and_steps():
    plan = Plan.from_dict(
        {
            "strategy": "serial",
            "phases": [{"name": "p", "strategy": "parallel", "steps": [{"name": "s", "tasks": ["t"]}]}],
        }
    )
    assert plan.strategy is Ordering.SERIAL
    assert [ph.name for ph in plan.phases] == ["p"]
    assert plan.phases[0].strategy is Ordering.PARALLEL
    assert plan.phases[0].steps[0].tasks == ["t"]
    assert plan.phases[0].steps[0].delete is False


def test_plan_unknown_or_missing_strategy_is_kept_as_text():
    assert Plan.from_dict({"strategy": "random"}).strategy == "random"
    missing = Plan.from_dict({})
    assert missing.strategy == ""
    assert missing.phases == []


def test_operator_version_from_dict(ov_document):
    ov = OperatorVersion.from_dict(ov_document)
    assert ov.type_meta.kind == "OperatorVersion"
    assert ov.type_meta.api_version == "kudo.dev/v1alpha1"
    assert ov.metadata.name == "zk-1.0"
    assert ov.metadata.namespace == "ns"
    assert ov.metadata.labels == {"app": "zk"}
    assert ov.spec.operator == ObjectReference(kind="Operator", name="zk")
    assert ov.spec.version == "1.0"
    assert ov.spec.templates == {"deploy.yaml": "kind: Pod"}
    assert ov.spec.tasks["app"].resources == ["deploy.yaml"]
    assert ov.spec.connection_string == "zk://host"


def test_operator_version_parameters_and_plans(ov_document):
    ov = OperatorVersion.from_dict(ov_document)
    assert [p.name for p in ov.spec.parameters] == ["COUNT", "IMAGE"]
    assert ov.spec.parameters[0].required is True
    assert ov.spec.parameters[1].display_name == "Image"
    assert set(ov.spec.plans) == {"deploy"}
    steps = ov.spec.plans["deploy"].phases[0].steps
    assert [s.name for s in steps] == ["everything", "cleanup"]
    assert steps[1].delete is True


def test_operator_version_dependencies_and_upgradable_from(ov_document):
    ov = OperatorVersion.from_dict(ov_document)
    dep = ov.spec.dependencies[0]
    assert dep.reference_name == "kafka"
    assert dep.reference.name == "kafka"
    assert dep.reference.kind == "Operator"
    assert dep.version == "^3.1.4"
    older = ov.spec.upgradable_from[0]
    assert older.metadata.name == "zk-0.9"
    assert older.spec.version == "0.9"
    assert older.spec.plans == {}


def test_operator_version_from_empty_document():
    ov = OperatorVersion.from_dict({})
    assert ov.spec.plans == {}
    assert ov.spec.parameters == []
    assert ov.metadata.name == ""


def test_operator_holds_maintainers():
    op = Operator(
        spec=OperatorSpec(
            description="zk",
            maintainers=[Maintainer(name="Someone", email="someone@example.com")],
        )
    )
    assert op.spec.maintainers[0].email == "someone@example.com"
    assert Operator().spec.maintainers == []
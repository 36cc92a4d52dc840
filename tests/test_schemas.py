import pytest
from pydantic import ValidationError

from stack_restart_cli.schemas import (
    ActionKind,
    FilterSpec,
    PlannedAction,
    ReadinessState,
    RestartSettings,
    RestartStrategy,
    ServiceStatus,
    HealthStatus,
)


@pytest.mark.parametrize("state, ready", [
    (ReadinessState.RUNNING, True),
    (ReadinessState.HEALTHY, True),
    (ReadinessState.UNKNOWN, False),
    (ReadinessState.STARTING, False),
    (ReadinessState.UNHEALTHY, False),
    (ReadinessState.TIMED_OUT, False),
])
def test_readiness_state_is_ready(state, ready):
    assert state.is_ready is ready


def test_filter_spec_from_settings():
    settings = RestartSettings(only=["a", "b", "a"], exclude=["b"], running_only=True)

    spec = FilterSpec.from_settings(settings)

    assert spec.include == frozenset({"a", "b"})
    assert spec.exclude == frozenset({"b"})
    assert spec.running_only is True


def test_empty_filter_spec():
    spec = FilterSpec.from_settings(RestartSettings())
    assert spec.include == frozenset()
    assert spec.running_only is False


def test_planned_action_describe():
    assert PlannedAction(kind=ActionKind.RECREATE, services=["web", "db"], force_recreate=True).describe() == \
        "recreate web, db (forced)"
    assert PlannedAction(kind=ActionKind.START_ALL).describe() == "start all services"
    assert PlannedAction(kind=ActionKind.STOP_ALL).describe() == "stop stack"


def test_settings_strategy_from_value():
    assert RestartSettings(strategy="full").strategy == RestartStrategy.FULL


def test_settings_reject_unknown_strategy():
    with pytest.raises(ValidationError):
        RestartSettings(strategy="sideways")


def test_service_status_defaults_to_no_health():
    status = ServiceStatus(name="web", is_running=True)
    assert status.health == HealthStatus.NONE

import pytest
from unittest.mock import MagicMock

from stack_restart_cli.config import Config
from stack_restart_cli.errors import BackendError
from stack_restart_cli.schemas import PlannedAction, RestartSettings, ServiceStatus
from stack_restart_cli.stack_manager import StackManager


class FakeBackend:
    """In-memory StackBackend that records every call it receives."""

    def __init__(self, declared=None, running=None, statuses=None, fail_on=None):
        self.declared = list(declared if declared is not None else ["a", "b", "c"])
        self.running = list(running if running is not None else self.declared)
        # service -> list of ServiceStatus or Exception; the last entry repeats
        self.statuses = {name: list(seq) for name, seq in (statuses or {}).items()}
        self.fail_on = set(fail_on or [])
        self.calls = []
        self.status_calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise BackendError(f"{name} failed", returncode=1)

    @property
    def mutations(self):
        queries = {"list_declared_services", "list_running_services"}
        return [call for call in self.calls if call[0] not in queries]

    def list_declared_services(self):
        self._record("list_declared_services")
        return list(self.declared)

    def list_running_services(self):
        self._record("list_running_services")
        return list(self.running)

    def pull_images(self, services):
        self._record("pull_images", list(services))

    def recreate_services(self, services, force_recreate=False):
        self._record("recreate_services", list(services), force_recreate)

    def stop_all(self):
        self._record("stop_all")

    def start_all(self, services=None, force_recreate=False):
        self._record("start_all", services, force_recreate)

    def prune(self):
        self._record("prune")

    def get_status(self, service):
        self.status_calls.append(service)
        sequence = self.statuses.get(service)
        if not sequence:
            return ServiceStatus(name=service, is_running=True)
        item = sequence.pop(0) if len(sequence) > 1 else sequence[0]
        if isinstance(item, Exception):
            raise item
        return item

    def describe(self, action: PlannedAction) -> str:
        return " ".join(["compose", action.kind.value] + action.services)


@pytest.fixture
def make_backend():
    """Fixture returning the FakeBackend class, for tests that need a custom stack."""
    return FakeBackend


@pytest.fixture
def fake_backend():
    """Fixture for a three-service stack that is fully running without health checks."""
    return FakeBackend()


@pytest.fixture
def mock_display():
    """Fixture to create a mocked Display object."""
    return MagicMock()


@pytest.fixture
def compose_file(tmp_path):
    """Fixture for a readable compose file."""
    path = tmp_path / "docker-compose.yml"
    path.write_text("services:\n  a:\n    image: busybox\n")
    return path


@pytest.fixture
def make_settings(compose_file):
    """Fixture building RestartSettings that pass the guard by default."""
    def _make(**overrides):
        values = {"compose_file": str(compose_file), "require_mount": "", "poll_interval": 0.01}
        values.update(overrides)
        return RestartSettings(**values)
    return _make


@pytest.fixture
def mock_app_context(fake_backend, compose_file):
    """Fixture to mock the AppContext while running the real pipeline against the fake backend."""
    mock_context = MagicMock()
    mock_context.display = MagicMock()
    mock_context.config = Config(
        env_path=None,
        environ={"COMPOSE_FILE": str(compose_file), "REQUIRE_MOUNT": "", "POLL_INTERVAL": "0.01"},
    )
    mock_context.stack_manager.side_effect = lambda settings: StackManager(
        settings, mock_context.display, backend=fake_backend
    )
    return mock_context

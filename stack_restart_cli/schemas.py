from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


class RestartStrategy(str, Enum):
    """How the targeted services are cycled."""
    ROLLING = "rolling"
    FULL = "full"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    STARTING = "starting"
    NONE = "none"


class ReadinessState(str, Enum):
    UNKNOWN = "unknown"
    STARTING = "starting"
    RUNNING = "running"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    TIMED_OUT = "timed out"

    @property
    def is_ready(self) -> bool:
        return self in (ReadinessState.RUNNING, ReadinessState.HEALTHY)


class ActionKind(str, Enum):
    PULL = "pull"
    RECREATE = "recreate"
    STOP_ALL = "stop_all"
    START_ALL = "start_all"
    PRUNE = "prune"


class RestartSettings(BaseModel):
    """Settings for a single invocation, resolved once from defaults, env file, environment and flags."""
    model_config = ConfigDict(frozen=True)

    compose_file: str = "docker-compose.yml"
    compose_command: List[str] = Field(default_factory=lambda: ["docker", "compose"])
    require_mount: str = "/mnt/nas"
    strategy: RestartStrategy = RestartStrategy.ROLLING
    only: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)
    running_only: bool = False
    force_recreate: bool = False
    refresh_images: bool = False
    scoped_start: bool = False
    prune: bool = False
    wait_health: bool = True
    wait_secs: float = Field(default=120, ge=0)
    poll_interval: float = Field(default=3, gt=0)
    dry_run: bool = False


class FilterSpec(BaseModel):
    """Inclusion, exclusion and running-only filters applied to the catalog."""
    model_config = ConfigDict(frozen=True)

    include: frozenset[str] = Field(default_factory=frozenset)
    exclude: frozenset[str] = Field(default_factory=frozenset)
    running_only: bool = False

    @classmethod
    def from_settings(cls, settings: RestartSettings) -> "FilterSpec":
        return cls(
            include=frozenset(settings.only),
            exclude=frozenset(settings.exclude),
            running_only=settings.running_only,
        )


class ServiceStatus(BaseModel):
    name: str
    is_running: bool
    health: HealthStatus = HealthStatus.NONE


class PlannedAction(BaseModel):
    """One atomic backend mutation, recorded identically in live and dry-run mode."""
    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    services: List[str] = Field(default_factory=list)
    force_recreate: bool = False

    def describe(self) -> str:
        scope = ", ".join(self.services) if self.services else "all services"
        if self.kind == ActionKind.PULL:
            return f"pull images for {scope}"
        if self.kind == ActionKind.RECREATE:
            return f"recreate {scope}" + (" (forced)" if self.force_recreate else "")
        if self.kind == ActionKind.STOP_ALL:
            return "stop stack"
        if self.kind == ActionKind.START_ALL:
            return f"start {scope}" + (" (forced)" if self.force_recreate else "")
        return "prune unused Docker resources"


class ExecutionPlan(BaseModel):
    dry_run: bool = False
    actions: List[PlannedAction] = Field(default_factory=list)


class ReadinessRecord(BaseModel):
    state: ReadinessState = ReadinessState.UNKNOWN
    last_checked_at: Optional[datetime] = None
    detail: Optional[str] = None


class RestartReport(BaseModel):
    """What a restart run decided and observed."""
    catalog: List[str]
    targets: List[str]
    plan: ExecutionPlan
    readiness: Dict[str, ReadinessRecord] = Field(default_factory=dict)
    waited: bool = False

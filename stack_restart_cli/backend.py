"""Typed interface to the container-orchestration backend."""

from typing import List, Optional, Protocol

from .schemas import PlannedAction, ServiceStatus


class StackBackend(Protocol):
    """Port for everything the restart pipeline asks of the stack.

    Query methods raise BackendError when the backend cannot answer.
    Mutating methods raise BackendError when the backend reports failure.
    """

    def list_declared_services(self) -> List[str]:
        """Return the services declared by the stack descriptor, in declaration order."""

    def list_running_services(self) -> List[str]:
        """Return the services that currently have a running container."""

    def pull_images(self, services: List[str]) -> None:
        """Refresh the images of the given services."""

    def recreate_services(self, services: List[str], force_recreate: bool = False) -> None:
        """Recreate the given services in place, leaving the rest of the stack running."""

    def stop_all(self) -> None:
        """Stop and remove every container of the stack."""

    def start_all(self, services: Optional[List[str]] = None, force_recreate: bool = False) -> None:
        """Start the stack, or only the given services when a list is passed."""

    def prune(self) -> None:
        """Remove unused images, networks and stopped containers."""

    def get_status(self, service: str) -> ServiceStatus:
        """Return the running state and health of one service."""

    def describe(self, action: PlannedAction) -> str:
        """Return the command line equivalent of a planned action."""

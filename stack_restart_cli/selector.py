import logging
from typing import Iterable, List, Optional

from .errors import SelectionError
from .schemas import FilterSpec

log = logging.getLogger(__name__)


def select_services(
    catalog: List[str],
    filter_spec: FilterSpec,
    running: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Narrows the catalog to the services to restart.

    Filters apply in a fixed order: inclusion, then exclusion, then the
    running-only restriction, so a service named in both include and exclude
    is always dropped. Tokens that match nothing in the catalog are ignored.
    The result keeps catalog order.

    Args:
        catalog: Declared services, in declaration order
        filter_spec: Inclusion/exclusion/running-only filters
        running: Currently running services; required when running_only is set

    Raises:
        SelectionError: When nothing is left after filtering
    """
    selected = set(catalog)

    if filter_spec.include:
        selected &= filter_spec.include
    selected -= filter_spec.exclude

    if filter_spec.running_only:
        if running is None:
            raise ValueError("running_only filter requires the running service list")
        selected &= set(running)

    unknown = (filter_spec.include | filter_spec.exclude) - set(catalog)
    if unknown:
        log.debug(f"Ignoring filter tokens not in the catalog: {', '.join(sorted(unknown))}")

    targets = [service for service in catalog if service in selected]
    if not targets:
        raise SelectionError(catalog)
    return targets

import itertools
import pytest

from stack_restart_cli.errors import SelectionError
from stack_restart_cli.schemas import FilterSpec
from stack_restart_cli.selector import select_services

CATALOG = ["db", "web", "worker", "cache"]


def spec(include=(), exclude=(), running_only=False):
    return FilterSpec(include=frozenset(include), exclude=frozenset(exclude), running_only=running_only)


# --- Scenarios ---

def test_exclusion_wins_over_inclusion():
    """catalog {a,b,c}, include {a,b}, exclude {b} selects only a."""
    assert select_services(["a", "b", "c"], spec(include={"a", "b"}, exclude={"b"})) == ["a"]


def test_running_only_restricts_to_running_set():
    """catalog {a,b}, no include/exclude, running-only with {a} running selects a."""
    assert select_services(["a", "b"], spec(running_only=True), running=["a"]) == ["a"]


def test_include_unknown_service_fails_with_catalog():
    with pytest.raises(SelectionError) as excinfo:
        select_services(["a", "b"], spec(include={"x"}))
    assert excinfo.value.catalog == ["a", "b"]
    assert "All services: a b" in str(excinfo.value)


def test_empty_filters_select_everything_in_catalog_order():
    assert select_services(CATALOG, spec()) == CATALOG


def test_result_keeps_catalog_order_not_filter_order():
    assert select_services(CATALOG, spec(include={"cache", "db"})) == ["db", "cache"]


def test_unknown_exclude_tokens_are_ignored():
    assert select_services(CATALOG, spec(exclude={"nope"})) == CATALOG


def test_excluding_everything_fails():
    with pytest.raises(SelectionError):
        select_services(["a"], spec(exclude={"a"}))


def test_running_only_with_nothing_running_fails():
    with pytest.raises(SelectionError):
        select_services(CATALOG, spec(running_only=True), running=[])


def test_running_services_outside_catalog_are_not_selected():
    assert select_services(["a"], spec(running_only=True), running=["a", "orphan"]) == ["a"]


def test_running_only_requires_running_list():
    with pytest.raises(ValueError):
        select_services(CATALOG, spec(running_only=True))


def test_running_list_is_ignored_without_running_only():
    assert select_services(CATALOG, spec(), running=["db"]) == CATALOG


def test_service_names_are_case_sensitive():
    with pytest.raises(SelectionError):
        select_services(["Web"], spec(include={"web"}))


# --- Properties ---

def _filter_specs():
    tokens = ["db", "web", "ghost"]
    subsets = [set(c) for n in range(len(tokens) + 1) for c in itertools.combinations(tokens, n)]
    for include, exclude, running_only in itertools.product(subsets, subsets, [False, True]):
        yield spec(include=include, exclude=exclude, running_only=running_only)


def test_targets_are_always_a_subset_of_the_catalog():
    running = ["web", "cache", "ghost"]
    for filter_spec in _filter_specs():
        try:
            targets = select_services(CATALOG, filter_spec, running=running)
        except SelectionError:
            continue
        assert set(targets) <= set(CATALOG)
        assert not set(targets) & filter_spec.exclude


def test_selection_is_idempotent():
    filter_spec = spec(include={"db", "web", "worker"}, exclude={"worker"}, running_only=True)
    first = select_services(CATALOG, filter_spec, running=["web", "db"])
    second = select_services(CATALOG, filter_spec, running=["web", "db"])
    assert first == second == ["db", "web"]

from __future__ import annotations

import random

import pytest

from contracts.errors import CyclicDependencyError
from planner.graph import DependencyGraph
from planner.scheduler import Scheduler, completion_time, plan_order
from planner.task import ALPHABET, task_duration

EXAMPLE_RULES = [
    "Step C must be finished before step A can begin.",
    "Step C must be finished before step F can begin.",
    "Step A must be finished before step B can begin.",
    "Step A must be finished before step D can begin.",
    "Step B must be finished before step E can begin.",
    "Step D must be finished before step E can begin.",
    "Step F must be finished before step E can begin.",
]


def _example_graph() -> DependencyGraph:
    return DependencyGraph.from_rules(EXAMPLE_RULES, seed_alphabet=False)


def _random_rules(seed: int, edges: int = 40) -> list[str]:
    rng = random.Random(seed)
    rules = []
    for _ in range(edges):
        parent, child = sorted(rng.sample(ALPHABET, 2))
        rules.append(f"Step {parent} must be finished before step {child} can begin.")
    return rules


def test_single_worker_order_example():
    result = Scheduler(_example_graph(), worker_count=1, base_offset=0).run()
    assert result.order == "CABDFE"
    assert plan_order(_example_graph()) == "CABDFE"


def test_two_workers_without_offset_example():
    assert completion_time(_example_graph(), worker_count=2, base_offset=0) == 15


def test_five_workers_with_offset_example():
    result = Scheduler(_example_graph(), worker_count=5, base_offset=60).run()
    assert result.elapsed == 253
    assert result.order == "CAFBDE"


def test_seeded_alphabet_order_appends_dormant_steps():
    graph = DependencyGraph.from_rules(EXAMPLE_RULES)
    assert plan_order(graph) == "CABDFE" + "".join(ALPHABET[6:])


def test_run_is_repeatable_and_leaves_graph_untouched():
    graph = DependencyGraph.from_rules(_random_rules(3))
    before = graph.snapshot()
    scheduler = Scheduler(graph, worker_count=4, base_offset=10)
    first = scheduler.run()
    second = scheduler.run()
    assert first == second
    assert graph.snapshot() == before


def test_rule_order_does_not_change_result():
    rules = _random_rules(11)
    shuffled = list(rules)
    random.Random(5).shuffle(shuffled)
    a = Scheduler.from_rules(rules, worker_count=3, base_offset=5).run()
    b = Scheduler.from_rules(shuffled, worker_count=3, base_offset=5).run()
    assert (a.elapsed, a.order, a.assignments) == (b.elapsed, b.order, b.assignments)


@pytest.mark.parametrize("seed", range(6))
def test_single_worker_matches_iterative_topological_sort(seed):
    graph = DependencyGraph.from_rules(_random_rules(seed))
    for offset in (0, 60):
        assert Scheduler(graph, worker_count=1, base_offset=offset).run().order == plan_order(graph)


@pytest.mark.parametrize("seed", range(4))
def test_order_is_smallest_valid_topological_order(seed):
    graph = DependencyGraph.from_rules(_random_rules(seed, edges=25))
    order = plan_order(graph)
    position = {step: index for index, step in enumerate(order)}
    for parent, child in graph.edges():
        assert position[parent] < position[child]

    # Greedy check: at each position no smaller step was already available.
    done: set[str] = set()
    for step in order:
        available = [
            candidate
            for candidate in ALPHABET
            if candidate not in done and graph.prerequisites(candidate) <= done
        ]
        assert step == min(available)
        done.add(step)


def _critical_path(graph: DependencyGraph, base_offset: int) -> int:
    finish: dict[str, int] = {}
    for step in plan_order(graph):
        ready_at = max((finish[parent] for parent in graph.prerequisites(step)), default=0)
        finish[step] = ready_at + task_duration(step, base_offset)
    return max(finish.values(), default=0)


def test_more_workers_never_take_longer_on_example():
    times = [completion_time(_example_graph(), worker_count=workers, base_offset=0) for workers in range(1, 6)]
    assert times == [21, 15, 14, 14, 14]


@pytest.mark.parametrize("seed", range(4))
def test_elapsed_is_bounded_by_total_work_and_critical_path(seed):
    graph = DependencyGraph.from_rules(_random_rules(seed))
    total = sum(task_duration(step, 60) for step in graph)
    critical = _critical_path(graph, 60)

    assert completion_time(graph, worker_count=1, base_offset=60) == total
    for workers in range(2, 8):
        assert critical <= completion_time(graph, worker_count=workers, base_offset=60) <= total
    assert completion_time(graph, worker_count=26, base_offset=60) == critical


def test_conservation_every_step_retired_once():
    graph = DependencyGraph.from_rules(_random_rules(21))
    result = Scheduler(graph, worker_count=5, base_offset=60).run()
    assert sorted(result.order) == list(ALPHABET)
    assert len({item.task for item in result.assignments}) == 26
    assert sorted(result.trace.finished_tasks()) == list(ALPHABET)


def test_assignments_respect_dependencies_and_durations():
    result = Scheduler(_example_graph(), worker_count=2, base_offset=0).run()
    finish = {item.task: item.finish for item in result.assignments}
    start = {item.task: item.start for item in result.assignments}
    for parent, child in _example_graph().edges():
        assert finish[parent] <= start[child]
    for item in result.assignments:
        assert item.duration == task_duration(item.task, 0)
    assert max(finish.values()) == result.elapsed


def test_no_edges_with_enough_workers_takes_longest_step():
    graph = DependencyGraph.from_rules([])
    assert completion_time(graph, worker_count=26, base_offset=60) == 86
    assert completion_time(graph, worker_count=40, base_offset=0) == 26


def test_no_edges_with_few_workers_still_finishes():
    graph = DependencyGraph.from_rules([])
    result = Scheduler(graph, worker_count=5, base_offset=0).run()
    assert len(result.order) == 26
    assert result.elapsed >= 26
    assert result.elapsed <= sum(range(1, 27))


def test_empty_declared_graph_finishes_at_zero():
    result = Scheduler(DependencyGraph(), worker_count=2, base_offset=60).run()
    assert (result.elapsed, result.order) == (0, "")


def test_final_batch_is_drained_once():
    graph = DependencyGraph.from_rules(
        ["Step A must be finished before step B can begin."], seed_alphabet=False
    )
    graph.add_task("Z")
    result = Scheduler(graph, worker_count=2, base_offset=0).run()
    # A(1) and Z(26) start together; B(2) runs 1..3 while Z keeps going to 26.
    assert result.elapsed == 26
    assert result.order == "ABZ"


def test_trace_rounds_follow_the_clock():
    result = Scheduler(_example_graph(), worker_count=2, base_offset=0).run()
    clocks = [entry.clock for entry in result.trace.entries]
    assert clocks == [3, 4, 6, 9, 10, 15]
    assert result.trace.entries[0].assigned == ((0, "C"),)
    assert result.trace.entries[1].assigned == ((0, "A"), (1, "F"))


def test_cycle_is_reported_instead_of_stalling():
    rules = [
        "Step A must be finished before step B can begin.",
        "Step B must be finished before step C can begin.",
        "Step C must be finished before step B can begin.",
    ]
    graph = DependencyGraph.from_rules(rules, seed_alphabet=False)
    with pytest.raises(CyclicDependencyError) as excinfo:
        Scheduler(graph, worker_count=2, base_offset=0).run()
    assert excinfo.value.blocked == ("B", "C")
    with pytest.raises(CyclicDependencyError):
        plan_order(graph)


def test_scheduler_rejects_bad_parameters():
    with pytest.raises(ValueError):
        Scheduler(DependencyGraph(), worker_count=0, base_offset=0)
    with pytest.raises(ValueError):
        Scheduler(DependencyGraph(), worker_count=1, base_offset=-5)

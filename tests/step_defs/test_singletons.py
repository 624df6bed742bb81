"""
Step definitions for the Singleton Processes feature.

These tests verify:
- implicit spawn on first SendToSingleton, exactly once per batch
- binding happens before the init message, so self-addressing is safe
- a killed singleton is replaced by a new PID, never the old one
- ResolveOrSpawnSingleton ordering
"""
from pytest_bdd import parsers, scenarios, then, when

from actor_kernel import (
    Batch,
    Kill,
    ResolveOrSpawnSingleton,
    SendToPID,
    SendToSingleton,
    SpawnSingleton,
)

from sample_app import envelope, pid_by_sequence, singleton_pid

# Load scenarios from feature file
scenarios("../features/singletons.feature")


# =============================================================================
# When Steps
# =============================================================================


@when(parsers.parse('I send "{text}" to singleton "{name}"'))
def send_to_singleton(test_context, text: str, name: str):
    test_context["app"].dispatch(SendToSingleton(name=name, payload=envelope(name, text)))


@when(parsers.parse('I batch-send "{first}" and "{second}" to singleton "{name}"'))
def batch_send_to_singleton(test_context, first: str, second: str, name: str):
    test_context["app"].dispatch(
        Batch(
            items=[
                SendToSingleton(name=name, payload=envelope(name, first)),
                SendToSingleton(name=name, payload=envelope(name, second)),
            ]
        )
    )


@when(parsers.parse('I spawn singleton "{name}" twice in one batch'))
def spawn_singleton_twice(test_context, name: str):
    test_context["app"].dispatch(
        Batch(items=[SpawnSingleton(name=name), SpawnSingleton(name=name)])
    )


@when(parsers.parse('I kill singleton "{name}"'))
def kill_singleton(test_context, name: str):
    test_context["app"].dispatch(Kill(pid=singleton_pid(test_context, name)))


@when(parsers.parse('I resolve singleton "{name}" and send it "{text}"'))
def resolve_and_send(test_context, name: str, text: str):
    test_context["app"].dispatch(
        ResolveOrSpawnSingleton(
            name=name,
            continuation=lambda pid: SendToPID(pid=pid, payload=envelope(name, text)),
        )
    )


# =============================================================================
# Then Steps
# =============================================================================


@then(parsers.parse('singleton "{name}" is bound to sequence {seq:d}'))
def check_binding(test_context, name: str, seq: int):
    pid = singleton_pid(test_context, name)
    assert pid.sequence == seq
    assert pid.is_singleton


@then(parsers.parse('exactly one live process runs actor "{actor}"'))
def check_single_instance(test_context, actor: str):
    state = test_context["app"].state
    running = [entry for entry in state.processes.values() if entry.actor == actor]
    assert len(running) == 1, f"Expected one {actor}, got {running}"


@then(parsers.parse("sequence {seq:d} is no longer live"))
def check_sequence_dead(test_context, seq: int):
    assert not test_context["app"].state.is_live(pid_by_sequence(test_context, seq))


@then("no processes are live")
def check_no_processes(test_context):
    assert test_context["app"].state.live_pids() == []

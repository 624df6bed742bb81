"""
Step definitions for the Process Lifecycle feature.

These tests verify:
- kill consults the teardown hook, removes the entry, then dispatches output
- kill is terminal and idempotent
- host-delivered system events
- unroutable payloads become diagnostics without halting the batch
"""
from pytest_bdd import parsers, scenarios, then, when

from actor_kernel import (
    Batch,
    Envelope,
    SendToPID,
    SystemEvent,
    SystemEventKind,
    SystemEventMessage,
)

from sample_app import Note, Stop, envelope, pid_by_sequence, pid_of

# Load scenarios from feature file
scenarios("../features/lifecycle.feature")


# =============================================================================
# When Steps
# =============================================================================


@when(parsers.parse('I make "{alias}" stop itself and then send it "{text}"'))
def stop_self_then_send(test_context, alias: str, text: str):
    pid = pid_of(test_context, alias)
    test_context["app"].dispatch(
        Batch(
            items=[
                SendToPID(pid=pid, payload=envelope("journal", "stop", Stop(pid))),
                SendToPID(pid=pid, payload=envelope("journal", text)),
            ]
        )
    )


@when(parsers.parse('I tell "{alias}" that sequence {seq:d} was not found'))
def deliver_pid_not_found(test_context, alias: str, seq: int):
    event = SystemEvent(
        kind=SystemEventKind.PID_NOT_FOUND,
        subject=pid_by_sequence(test_context, seq),
    )
    test_context["app"].dispatch(SystemEventMessage(pid=pid_of(test_context, alias), event=event))


@when('I dispatch a batch with a foreign payload for "a" and "ok" for "b"')
def dispatch_foreign_payload(test_context):
    a = pid_of(test_context, "a")
    b = pid_of(test_context, "b")
    test_context["app"].dispatch(
        Batch(
            items=[
                SendToPID(pid=a, payload=Envelope(actor="svc", body=Note("foreign"))),
                SendToPID(pid=b, payload=envelope("journal", "ok")),
            ]
        )
    )


# =============================================================================
# Then Steps
# =============================================================================


@then(parsers.parse('a "{kind}" diagnostic was reported for "{alias}"'))
def diagnostic_for_alias(test_context, kind: str, alias: str):
    pid = pid_of(test_context, alias)
    matching = [
        d for d in test_context["app"].diagnostics
        if d.kind.value == kind and d.pid == pid
    ]
    assert len(matching) == 1, f"Got {test_context['app'].diagnostics}"
    assert matching[0].details["actor"] == "journal"

"""
Pytest configuration and shared steps for actor-kernel tests.

Steps used by more than one feature live here; feature-specific steps live
in tests/step_defs/.
"""
from typing import Any, Dict

import pytest
from pytest_bdd import given, parsers, then, when

from actor_kernel import Kill, SendToPID, SpawnSingleton

from sample_app import (
    envelope,
    expected_journal,
    pid_by_sequence,
    pid_of,
    singleton_pid,
    start_app,
)


@pytest.fixture
def test_context() -> Dict[str, Any]:
    """Shared context for passing data between steps."""
    return {"app": None, "pids": {}, "before": None, "result": None}


@pytest.fixture
def app():
    """A started application outside of BDD scenarios."""
    return start_app()


# =============================================================================
# Background
# =============================================================================


@given("a running application")
def running_application(test_context):
    test_context["app"] = start_app()


# =============================================================================
# When Steps
# =============================================================================


@when(parsers.parse('I spawn a "{actor}" process as "{alias}"'))
def spawn_alias(test_context, actor: str, alias: str):
    test_context["pids"][alias] = test_context["app"].spawn(actor)


@when(parsers.parse('I spawn singleton "{name}"'))
def spawn_singleton(test_context, name: str):
    test_context["app"].dispatch(SpawnSingleton(name=name))


@when(parsers.parse('I kill "{alias}"'))
def kill_alias(test_context, alias: str):
    test_context["app"].dispatch(Kill(pid=pid_of(test_context, alias)))


@when(parsers.parse('I kill "{alias}" capturing the result'))
def kill_alias_capturing(test_context, alias: str):
    app = test_context["app"]
    test_context["before"] = app.state
    test_context["result"] = app.kernel.dispatch(Kill(pid=pid_of(test_context, alias)), app.state)


@when(parsers.parse('I send "{text}" to "{alias}"'))
def send_to_alias(test_context, text: str, alias: str):
    app = test_context["app"]
    pid = pid_of(test_context, alias)
    actor = app.state.lookup(pid).actor
    app.send(pid, actor, text)


@when(parsers.parse('I send "{text}" to "{alias}" capturing the result'))
def send_to_alias_capturing(test_context, text: str, alias: str):
    app = test_context["app"]
    message = SendToPID(pid=pid_of(test_context, alias), payload=envelope("journal", text))
    test_context["before"] = app.state
    test_context["result"] = app.kernel.dispatch(message, app.state)


# =============================================================================
# Then Steps
# =============================================================================


@then(parsers.parse('"{alias}" is absent'))
def alias_is_absent(test_context, alias: str):
    app = test_context["app"]
    assert not app.state.is_live(pid_of(test_context, alias))


@then("the state is unchanged and no effects were produced")
def state_unchanged(test_context):
    new_state, effects = test_context["result"]
    assert new_state == test_context["before"]
    assert effects == []


@then("no diagnostics were reported")
def no_diagnostics(test_context):
    assert test_context["app"].diagnostics == []


@then(parsers.parse('the journal of "{alias}" is empty'))
def journal_is_empty(test_context, alias: str):
    assert test_context["app"].journal(pid_of(test_context, alias)) == ()


@then(parsers.parse('the journal of "{alias}" is "{entries}"'))
def journal_of_alias(test_context, alias: str, entries: str):
    journal = test_context["app"].journal(pid_of(test_context, alias))
    assert journal == expected_journal(entries), f"Got {journal}"


@then(parsers.parse('the journal of singleton "{name}" is "{entries}"'))
def journal_of_singleton(test_context, name: str, entries: str):
    journal = test_context["app"].journal(singleton_pid(test_context, name))
    assert journal == expected_journal(entries), f"Got {journal}"


@then(parsers.parse('the journal of sequence {seq:d} is "{entries}"'))
def journal_of_sequence(test_context, seq: int, entries: str):
    journal = test_context["app"].journal(pid_by_sequence(test_context, seq))
    assert journal == expected_journal(entries), f"Got {journal}"


@then(parsers.parse('a "{kind}" diagnostic was reported'))
def diagnostic_reported(test_context, kind: str):
    kinds = [d.kind.value for d in test_context["app"].diagnostics]
    assert kind in kinds, f"Expected {kind} in {kinds}"

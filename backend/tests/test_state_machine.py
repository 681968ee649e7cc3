"""Tests for the transition-table state machine and the creative workflow table."""

import pytest

from adcanvas.errors import WorkflowStateError
from adcanvas.graph.creative import CREATIVE_MACHINE
from adcanvas.graph.machine import StateMachine
from adcanvas.graph.state import CreativeEvent, CreativePhase


@pytest.fixture
def door():
    return StateMachine(
        {
            ("closed", "open"): "opened",
            ("opened", "close"): "closed",
            ("closed", "lock"): "locked",
            ("locked", "knock"): "locked",
        },
        terminal={"locked"},
        pauses={"knock"},
    )


class TestStateMachine:

    def test_transition(self, door):
        assert door.transition("closed", "open") == "opened"
        assert door.transition("opened", "close") == "closed"

    def test_missing_transition_raises(self, door):
        with pytest.raises(WorkflowStateError, match="No transition from 'opened' on event 'lock'"):
            door.transition("opened", "lock")

    def test_allows(self, door):
        assert door.allows("closed", "lock")
        assert not door.allows("locked", "open")

    def test_terminal_and_pauses(self, door):
        assert door.is_terminal("locked")
        assert not door.is_terminal("closed")
        assert door.halts_on("knock")
        assert not door.halts_on("open")


class TestCreativeTable:

    def test_happy_path(self):
        phase = CreativePhase.ANALYZE
        for event in (CreativeEvent.ANALYZED, CreativeEvent.PLANNED,
                      CreativeEvent.GENERATED, CreativeEvent.AUTO_APPROVED):
            phase = CREATIVE_MACHINE.transition(phase, event)
        assert phase == CreativePhase.APPLY
        assert CREATIVE_MACHINE.is_terminal(phase)

    @pytest.mark.parametrize("event", [
        CreativeEvent.AWAIT_DECISION, CreativeEvent.NO_OPTIONS, CreativeEvent.REJECTED,
    ])
    def test_review_self_loops_and_pauses(self, event):
        assert CREATIVE_MACHINE.transition(CreativePhase.REVIEW, event) == CreativePhase.REVIEW
        assert CREATIVE_MACHINE.halts_on(event)

    def test_approval_leaves_review(self):
        assert CREATIVE_MACHINE.transition(CreativePhase.REVIEW, CreativeEvent.APPROVED) == CreativePhase.APPLY

    def test_decisions_only_accepted_in_review(self):
        for phase in (CreativePhase.ANALYZE, CreativePhase.PLAN, CreativePhase.GENERATE, CreativePhase.APPLY):
            assert not CREATIVE_MACHINE.allows(phase, CreativeEvent.APPROVED)

"""Finite-state machine driven by an explicit transition table.

The table maps ``(state, event) -> next state``. Callers own the control loop:
run the handler for the current state, feed its event to ``transition()``.
"""

from typing import Generic, Hashable, Iterable, TypeVar

from adcanvas.errors import WorkflowStateError

S = TypeVar("S", bound=Hashable)
E = TypeVar("E", bound=Hashable)


class StateMachine(Generic[S, E]):
    """Transition table plus the sets of terminal states and pausing events.

    Args:
        transitions: ``(state, event) -> next state``
        terminal: states after which the control loop stops
        pauses: events that stop the control loop until an external input arrives
    """

    def __init__(
        self,
        transitions: dict[tuple[S, E], S],
        terminal: Iterable[S] = (),
        pauses: Iterable[E] = (),
    ):
        self.transitions = dict(transitions)
        self.terminal = frozenset(terminal)
        self.pauses = frozenset(pauses)

    def transition(self, state: S, event: E) -> S:
        try:
            return self.transitions[(state, event)]
        except KeyError:
            raise WorkflowStateError(
                f"No transition from '{_label(state)}' on event '{_label(event)}'"
            ) from None

    def allows(self, state: S, event: E) -> bool:
        return (state, event) in self.transitions

    def is_terminal(self, state: S) -> bool:
        return state in self.terminal

    def halts_on(self, event: E) -> bool:
        return event in self.pauses


def _label(value) -> str:
    return getattr(value, "value", value)

"""Minimal state machine driven by transitions returned from each state."""

from __future__ import annotations

import abc
import enum
from typing import Generic, TypeVar

StateT = TypeVar("StateT")


class Transition(enum.Enum):
    """Outcome of running a state."""

    REPEAT = 0
    NEXT1 = 1
    NEXT2 = 2
    NEXT3 = 3
    NEXT4 = 4
    ERROR = 5


class StateMachine(abc.ABC, Generic[StateT]):
    """Runs the current state and moves on according to its transition."""

    def __init__(self, starting_state: StateT) -> None:
        self._current_state = starting_state

    @property
    def state(self) -> StateT:
        return self._current_state

    def iterate_once(self) -> None:
        """Run the current state once and apply the resulting transition."""
        transition = self.run_current_state()
        if transition is not Transition.REPEAT:
            self._current_state = self.choose_next_state(self._current_state, transition)

    @abc.abstractmethod
    def run_current_state(self) -> Transition:
        """Do the work of the current state and report how to continue."""

    @abc.abstractmethod
    def choose_next_state(self, current_state: StateT, transition: Transition) -> StateT:
        """Map a state and a transition to the next state."""
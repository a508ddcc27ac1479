# prompts.py
"""
Interactive TMK entry as an explicit state machine.

    AWAIT_ZONE -> AWAIT_SECTION -> AWAIT_PLAT -> AWAIT_PARCEL -> COMPLETE
                                        \\ (no plat) ----------> COMPLETE

Plat and parcel each start with a y/n gate; "n" leaves the field unspecified
and turns the request into a range query. Any bad answer raises, and the
session ends there (no re-prompting).
"""

from enum import Enum
from typing import Callable, Optional

from errors import InvalidInputError
from models import TmkQuery
from utils import UNSPECIFIED, build_tmk, parse_int, validate_field


class PromptState(Enum):
    AWAIT_ZONE = "zone"
    AWAIT_SECTION = "section"
    AWAIT_PLAT = "plat"
    AWAIT_PARCEL = "parcel"
    COMPLETE = "complete"


QUESTIONS = {
    PromptState.AWAIT_ZONE: "Enter a Hawaii (Big Island) Zone number between 1-9:",
    PromptState.AWAIT_SECTION: "Enter a Section number between 1-9:",
    PromptState.AWAIT_PLAT: "Enter a Plat number between 1-999:",
    PromptState.AWAIT_PARCEL: "Enter a Parcel number between 1-999:",
}

GATES = {
    PromptState.AWAIT_PLAT: "Do you want to enter a specific plat number? y/n:",
    PromptState.AWAIT_PARCEL: "Do you want to enter a specific parcel number? y/n:",
}


def parse_yes_no(answer: Optional[str]) -> bool:
    if answer is None:  # EOF reads as "no"
        return False
    a = answer.strip().lower()
    if a in ("y", "yes"):
        return True
    if a in ("n", "no"):
        return False
    raise InvalidInputError(f"Please answer y or n, got {answer!r}")


class TmkPromptMachine:
    def __init__(self):
        self.state = PromptState.AWAIT_ZONE
        self.values = {}
        self._gate_passed = False

    @property
    def done(self) -> bool:
        return self.state is PromptState.COMPLETE

    def question(self) -> str:
        if self.state in GATES and not self._gate_passed:
            return GATES[self.state]
        return QUESTIONS[self.state]

    def _advance(self, nxt: PromptState) -> None:
        self.state = nxt
        self._gate_passed = False

    def feed(self, answer: Optional[str]) -> PromptState:
        """Consume one answer for the current question and return the new state."""
        state = self.state
        if state is PromptState.COMPLETE:
            raise InvalidInputError("TMK is already complete")

        if state in GATES and not self._gate_passed:
            if parse_yes_no(answer):
                self._gate_passed = True
                return self.state
            self.values[state.value] = UNSPECIFIED
            self._advance(PromptState.COMPLETE)
            return self.state

        if answer is None:
            raise InvalidInputError(f"No {state.value} number given")
        self.values[state.value] = validate_field(state.value, parse_int(answer))

        order = list(PromptState)
        self._advance(order[order.index(state) + 1])
        return self.state

    def query(self) -> TmkQuery:
        if not self.done:
            raise InvalidInputError(f"TMK is incomplete (waiting for {self.state.value})")
        return build_tmk(
            self.values["zone"],
            self.values["section"],
            self.values.get("plat", UNSPECIFIED),
            self.values.get("parcel", UNSPECIFIED),
        )


def _read(ask: Callable[[str], str], question: str) -> Optional[str]:
    try:
        return ask(question)
    except EOFError:
        return None


def collect_query(ask: Callable[[str], str] = input) -> TmkQuery:
    """Walk the prompts with `ask` (defaults to input()) until the TMK is complete."""
    machine = TmkPromptMachine()
    while not machine.done:
        machine.feed(_read(ask, machine.question() + " "))
    return machine.query()

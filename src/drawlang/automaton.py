"""Finite automata recognising DrawLang lexemes.

Two encodings share one interface: ``TableDrivenAutomaton`` walks a static
transition table, ``DirectAutomaton`` hard-codes the same machine as a
decision function. Both must accept exactly the same language.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto

from drawlang.tokens import TokenCategory, is_digit, is_letter

START = 0
ERROR = -1

# Character class keys used in the transition table
LETTER = "<letter>"
DIGIT = "<digit>"


class StateKind(Enum):
    START = auto()
    ACCEPTING = auto()
    REJECTING = auto()
    ERROR = auto()


class Encoding(Enum):
    TABLE = "table"
    DIRECT = "direct"


@dataclass(frozen=True, slots=True)
class StateInfo:
    id: int
    kind: StateKind
    category: TokenCategory | None
    description: str


@dataclass(frozen=True, slots=True)
class AutomatonStats:
    states: int
    transitions: int


# (state, class-or-char, next)
TRANSITIONS: tuple[tuple[int, str, int], ...] = (
    (0, LETTER, 1),
    (0, DIGIT, 2),
    (0, "*", 4),
    (0, "/", 6),
    (0, "+", 8),
    (0, "-", 7),
    (0, ",", 9),
    (0, ";", 10),
    (0, "(", 11),
    (0, ")", 12),
    (1, LETTER, 1),
    (1, DIGIT, 1),
    (2, DIGIT, 2),
    (2, ".", 3),
    (2, "e", 14),
    (2, "E", 14),
    (3, DIGIT, 3),
    (3, "e", 14),
    (3, "E", 14),
    (4, "*", 5),
    (6, "/", 13),
    (7, "-", 13),
    (14, "+", 15),
    (14, "-", 15),
    (14, DIGIT, 16),
    (15, DIGIT, 16),
    (16, DIGIT, 16),
)

FINAL_STATES: dict[int, TokenCategory] = {
    1: TokenCategory.IDENTIFIER,
    2: TokenCategory.LITERAL,
    3: TokenCategory.LITERAL,
    4: TokenCategory.OPERATOR,
    5: TokenCategory.OPERATOR,
    6: TokenCategory.OPERATOR,
    7: TokenCategory.OPERATOR,
    8: TokenCategory.OPERATOR,
    9: TokenCategory.PUNCTUATION,
    10: TokenCategory.PUNCTUATION,
    11: TokenCategory.PUNCTUATION,
    12: TokenCategory.PUNCTUATION,
    13: TokenCategory.COMMENT,
    16: TokenCategory.LITERAL,
}

DESCRIPTIONS: dict[int, str] = {
    ERROR: "error",
    0: "start",
    1: "identifier",
    2: "integer",
    3: "decimal",
    4: "'*'",
    5: "'**'",
    6: "'/'",
    7: "'-'",
    8: "'+'",
    9: "','",
    10: "';'",
    11: "'('",
    12: "')'",
    13: "comment",
    14: "exponent marker",
    15: "exponent sign",
    16: "exponent digits",
}

STATE_COUNT = len(DESCRIPTIONS) - 1


def char_class(ch: str) -> str:
    """Map *ch* to its class key, or the character itself."""
    if is_letter(ch):
        return LETTER
    if is_digit(ch):
        return DIGIT
    return ch


def state_info(state: int) -> StateInfo:
    if state == ERROR:
        kind = StateKind.ERROR
    elif state == START:
        kind = StateKind.START
    elif state in FINAL_STATES:
        kind = StateKind.ACCEPTING
    else:
        kind = StateKind.REJECTING
    return StateInfo(state, kind, FINAL_STATES.get(state), DESCRIPTIONS.get(state, "unknown"))


class Automaton(ABC):
    """Common driver: current state, lexeme so far, and a snapshot stack.

    Subclasses supply only ``_move``, the pure transition function.
    """

    def __init__(self) -> None:
        self._state = START
        self._lexeme: list[str] = []
        self._saved: list[tuple[int, str]] = []

    @abstractmethod
    def _move(self, state: int, ch: str) -> int:
        """Return the successor of *state* on *ch*, or ERROR."""

    def reset(self) -> None:
        self._state = START
        self._lexeme.clear()
        self._saved.clear()

    def feed(self, ch: str) -> bool:
        """Advance on *ch*. On rejection the automaton is left unchanged."""
        if not ch or self._state == ERROR:
            return False
        nxt = self._move(self._state, ch)
        if nxt == ERROR:
            return False
        self._state = nxt
        self._lexeme.append(ch)
        return True

    @property
    def state(self) -> StateInfo:
        return state_info(self._state)

    @property
    def state_id(self) -> int:
        return self._state

    @property
    def processed_input(self) -> str:
        return "".join(self._lexeme)

    def is_accepting(self) -> bool:
        return self._state in FINAL_STATES

    def is_error(self) -> bool:
        return self._state == ERROR

    def accepted_category(self) -> TokenCategory | None:
        return FINAL_STATES.get(self._state)

    def backtrack(self) -> bool:
        """Drop the last character and replay the rest from the start state."""
        if not self._lexeme:
            return False
        self._lexeme.pop()
        state = START
        for ch in self._lexeme:
            state = self._move(state, ch)
            if state == ERROR:
                break
        self._state = state
        return True

    def save_state(self) -> None:
        self._saved.append((self._state, self.processed_input))

    def restore_state(self) -> bool:
        if not self._saved:
            return False
        self._state, lexeme = self._saved.pop()
        self._lexeme = list(lexeme)
        return True

    @abstractmethod
    def stats(self) -> AutomatonStats: ...


class TableDrivenAutomaton(Automaton):
    """Automaton driven by the ``TRANSITIONS`` table."""

    _index: dict[tuple[int, str], int] = {(s, key): nxt for s, key, nxt in TRANSITIONS}

    def _move(self, state: int, ch: str) -> int:
        nxt = self._index.get((state, char_class(ch)))
        if nxt is None:
            # Letters like 'e' are also listed verbatim
            nxt = self._index.get((state, ch), ERROR)
        return nxt

    def stats(self) -> AutomatonStats:
        return AutomatonStats(STATE_COUNT, len(TRANSITIONS))


class DirectAutomaton(Automaton):
    """The same machine written out as nested conditionals."""

    TRANSITION_COUNT = 27

    def _move(self, state: int, ch: str) -> int:
        letter = is_letter(ch)
        digit = is_digit(ch)

        if state == 0:
            if letter:
                return 1
            if digit:
                return 2
            return {
                "*": 4,
                "/": 6,
                "+": 8,
                "-": 7,
                ",": 9,
                ";": 10,
                "(": 11,
                ")": 12,
            }.get(ch, ERROR)
        if state == 1:
            return 1 if letter or digit else ERROR
        if state == 2:
            if digit:
                return 2
            if ch == ".":
                return 3
            if ch in ("e", "E"):
                return 14
            return ERROR
        if state == 3:
            if digit:
                return 3
            if ch in ("e", "E"):
                return 14
            return ERROR
        if state == 4:
            return 5 if ch == "*" else ERROR
        if state == 6:
            return 13 if ch == "/" else ERROR
        if state == 7:
            return 13 if ch == "-" else ERROR
        if state == 14:
            if ch in ("+", "-"):
                return 15
            return 16 if digit else ERROR
        if state in (15, 16):
            return 16 if digit else ERROR
        return ERROR

    def stats(self) -> AutomatonStats:
        return AutomatonStats(STATE_COUNT, self.TRANSITION_COUNT)


def create_automaton(encoding: Encoding | str = Encoding.TABLE) -> Automaton:
    """Build an automaton for *encoding* (an ``Encoding`` or its value)."""
    encoding = Encoding(encoding)
    if encoding is Encoding.DIRECT:
        return DirectAutomaton()
    return TableDrivenAutomaton()

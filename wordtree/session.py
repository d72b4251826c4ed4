"""
session.py

A game in progress against a decision tree, in the shape a chat bot keeps it:
the chain of packed feedback codes entered so far plus the marks the player is
currently toggling for the latest guess. Replaying the chain from the root
always lands on the same node, so the session is all the state there is.

Sessions serialize to a short URL-safe base64 token:

    <B word length> <H chain length> <I code>*chain  <B mark>*word length
"""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass
from typing import List, Tuple

from wordtree.errors import InvalidSessionState, NoCandidatesLeft
from wordtree.feedback import BASE, Evaluation, Mark, code_count, int_to_pattern, normalize
from wordtree.tree import DecisionTree

HEADER = struct.Struct("<BH")


@dataclass(frozen=True)
class GameSession:
    word_length: int
    chain: Tuple[int, ...] = ()
    pending: Tuple[Mark, ...] = ()

    def __post_init__(self) -> None:
        if self.word_length < 1:
            raise ValueError("word_length must be positive")
        if not self.pending:
            object.__setattr__(self, "pending", (Mark.ABSENT,) * self.word_length)
        if len(self.pending) != self.word_length:
            raise ValueError(
                f"expected {self.word_length} pending marks, got {len(self.pending)}"
            )
        object.__setattr__(self, "pending", tuple(Mark(m) for m in self.pending))
        object.__setattr__(self, "chain", tuple(int(c) for c in self.chain))

    @classmethod
    def new(cls, word_length: int) -> "GameSession":
        return cls(word_length)

    # -------------------------
    # Transitions
    # -------------------------
    def cycle(self, position: int, step: int = 1) -> "GameSession":
        """Rotate the pending mark at `position` (ABSENT -> PRESENT -> CORRECT -> ...)."""
        if position < 0 or position >= self.word_length:
            raise IndexError(f"position out of range: {position}")
        marks = list(self.pending)
        marks[position] = Mark((marks[position] + step) % BASE)
        return GameSession(self.word_length, self.chain, tuple(marks))

    def advance(self, tree: DecisionTree) -> "GameSession":
        """Commit the pending marks as feedback for the current guess."""
        node = self.current_node(tree)
        if node.is_leaf:
            raise NoCandidatesLeft(f"the game is over: the word is {node.word!r}")
        code = Evaluation(normalize(self.pending, node.word)).pack()
        node.child(code)  # NoCandidatesLeft if no word gives this feedback
        return GameSession(self.word_length, self.chain + (code,))

    def undo(self) -> "GameSession":
        """Drop the last committed feedback and make it pending again."""
        if not self.chain:
            return self
        last = self.chain[-1]
        marks = tuple(Mark(d) for d in int_to_pattern(last, self.word_length))
        return GameSession(self.word_length, self.chain[:-1], marks)

    # -------------------------
    # Replay
    # -------------------------
    def current_node(self, tree: DecisionTree) -> DecisionTree:
        if len(tree.word) != self.word_length:
            raise InvalidSessionState(
                f"session is for {self.word_length}-letter words, tree has {len(tree.word)}"
            )
        node = tree
        for code in self.chain:
            node = node.child(code)
        return node

    def word_chain(self, tree: DecisionTree) -> List[str]:
        """Guesses made so far, ending with the one currently being scored."""
        node = tree
        words = [node.word]
        for code in self.chain:
            node = node.child(code)
            words.append(node.word)
        return words

    def is_finished(self, tree: DecisionTree) -> bool:
        return self.current_node(tree).is_leaf

    # -------------------------
    # Token codec
    # -------------------------
    def encode(self) -> str:
        raw = HEADER.pack(self.word_length, len(self.chain))
        raw += struct.pack(f"<{len(self.chain)}I", *self.chain)
        raw += bytes(int(m) for m in self.pending)
        return base64.urlsafe_b64encode(raw).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "GameSession":
        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii"))
            word_length, n = HEADER.unpack_from(raw)
            codes = struct.unpack_from(f"<{n}I", raw, HEADER.size)
            tail = raw[HEADER.size + 4 * n:]
        except (binascii.Error, struct.error, UnicodeEncodeError, AttributeError) as e:
            raise InvalidSessionState(f"malformed session token: {e}") from e

        if word_length < 1 or len(tail) != word_length:
            raise InvalidSessionState("session token has the wrong number of marks")
        if any(b >= BASE for b in tail):
            raise InvalidSessionState("session token holds an unknown mark")
        limit = code_count(word_length)
        if any(c >= limit for c in codes):
            raise InvalidSessionState("session token holds an out-of-range code")
        return cls(word_length, tuple(codes), tuple(Mark(b) for b in tail))

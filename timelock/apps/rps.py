from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from constant_sorrow.constants import NO_MOVE_SELECTED
from twisted.internet.defer import Deferred

from timelock.core.commitments import Commitment
from timelock.core.reveal import RevealController
from timelock.exceptions import RevealFailure
from timelock.types import Label


class Move(Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"

    @classmethod
    def from_text(cls, text: str) -> "Move":
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(f"'{text}' is not a move; expected one of {', '.join(m.value for m in cls)}")


class Outcome(Enum):
    TIE = "tie"
    PLAYER_A_WINS = "player A wins"
    PLAYER_B_WINS = "player B wins"

    @property
    def announcement(self) -> str:
        return _ANNOUNCEMENTS[self]


_ANNOUNCEMENTS = {
    Outcome.TIE: "It's a tie!",
    Outcome.PLAYER_A_WINS: "Player 1 wins!",
    Outcome.PLAYER_B_WINS: "Player 2 wins!",
}

# winner -> loser
BEATS = {
    Move.ROCK: Move.SCISSORS,
    Move.SCISSORS: Move.PAPER,
    Move.PAPER: Move.ROCK,
}


def resolve(move_a: Move, move_b: Move) -> Outcome:
    if move_a is move_b:
        return Outcome.TIE
    if BEATS[move_a] is move_b:
        return Outcome.PLAYER_A_WINS
    return Outcome.PLAYER_B_WINS


PLAYER_ONE = "player1"
PLAYER_TWO = "player2"
PLAYERS = (PLAYER_ONE, PLAYER_TWO)


@dataclass
class PlayerSlot:
    player: Label
    move: object = NO_MOVE_SELECTED
    commitment: Optional[Commitment] = None
    submitted: bool = False


class RockPaperScissors(RevealController):
    """
    Two players commit encrypted moves under one shared identity.  Neither
    move can be decrypted until both are committed and the key-release
    network publishes the identity's key; the moves are then resolved.
    """

    LABELS = PLAYERS

    class MoveLocked(ValueError):
        """A player tried to change or resubmit a move after submitting it."""

    def __init__(self, *args, **kwargs):
        kwargs.pop("labels", None)
        super().__init__(labels=PLAYERS, *args, **kwargs)
        self.slots: Dict[Label, PlayerSlot] = {player: PlayerSlot(player=player) for player in PLAYERS}

    def _slot(self, player: Label) -> PlayerSlot:
        try:
            return self.slots[player]
        except KeyError:
            raise ValueError(f"Unknown player '{player}'; expected one of {', '.join(PLAYERS)}")

    def choose(self, player: Label, move: Move) -> None:
        slot = self._slot(player)
        if slot.submitted:
            raise self.MoveLocked(f"{player} has already submitted a move")
        slot.move = move if isinstance(move, Move) else Move.from_text(move)

    def submit(self, player: Label) -> Deferred:
        slot = self._slot(player)
        if slot.submitted:
            raise self.MoveLocked(f"{player} has already submitted a move")
        if slot.move is NO_MOVE_SELECTED:
            raise self.CommitmentRejected(f"Please select a move for {player}")

        d = self.commit(label=player, plaintext=slot.move.value)
        slot.submitted = True

        def _record(commitment: Commitment) -> Commitment:
            slot.commitment = commitment
            return commitment

        def _reopen(failure):
            if not self.terminal:
                slot.submitted = False
            return failure

        d.addCallbacks(_record, _reopen)
        return d

    def play(self, player: Label, move: Move) -> Deferred:
        self.choose(player, move)
        return self.submit(player)

    def _interpret(self, plaintexts: Dict[Label, str]) -> Outcome:
        try:
            move_a = Move.from_text(plaintexts[PLAYER_ONE])
            move_b = Move.from_text(plaintexts[PLAYER_TWO])
        except (KeyError, ValueError) as e:
            raise RevealFailure("A decrypted move is not rock, paper or scissors") from e
        return resolve(move_a, move_b)

    @property
    def outcome(self) -> Optional[Outcome]:
        if self.revelation is None:
            return None
        return self.revelation.outcome

import itertools

import pytest
from constant_sorrow.constants import NO_MOVE_SELECTED

from timelock.apps.rps import (
    PLAYER_ONE,
    PLAYER_TWO,
    Move,
    Outcome,
    RockPaperScissors,
    resolve,
)
from timelock.core.reveal import RevealController
from timelock.exceptions import RegistrationFailure, RevealFailure
from tests.constants import TEST_RELEASE_DELAY, TEST_RELEASE_MARGIN
from tests.mock.registry import MockRegistry
from tests.utils.deferreds import failure_result_of, success_result_of

ROCK, PAPER, SCISSORS = Move.ROCK, Move.PAPER, Move.SCISSORS


@pytest.mark.parametrize("move_a, move_b, outcome", (
    (ROCK, ROCK, Outcome.TIE),
    (ROCK, PAPER, Outcome.PLAYER_B_WINS),
    (ROCK, SCISSORS, Outcome.PLAYER_A_WINS),
    (PAPER, ROCK, Outcome.PLAYER_A_WINS),
    (PAPER, PAPER, Outcome.TIE),
    (PAPER, SCISSORS, Outcome.PLAYER_B_WINS),
    (SCISSORS, ROCK, Outcome.PLAYER_B_WINS),
    (SCISSORS, PAPER, Outcome.PLAYER_A_WINS),
    (SCISSORS, SCISSORS, Outcome.TIE),
))
def test_resolve(move_a, move_b, outcome):
    assert resolve(move_a, move_b) is outcome


@pytest.mark.parametrize("move_a, move_b", itertools.product(Move, repeat=2))
def test_resolve_is_symmetric(move_a, move_b):
    swapped = {
        Outcome.TIE: Outcome.TIE,
        Outcome.PLAYER_A_WINS: Outcome.PLAYER_B_WINS,
        Outcome.PLAYER_B_WINS: Outcome.PLAYER_A_WINS,
    }
    assert resolve(move_b, move_a) is swapped[resolve(move_a, move_b)]


def test_outcome_announcements():
    assert Outcome.TIE.announcement == "It's a tie!"
    assert Outcome.PLAYER_A_WINS.announcement == "Player 1 wins!"
    assert Outcome.PLAYER_B_WINS.announcement == "Player 2 wins!"


@pytest.mark.parametrize("text, move", (("rock", ROCK), (" Paper ", PAPER), ("SCISSORS", SCISSORS)))
def test_move_from_text(text, move):
    assert Move.from_text(text) is move


def test_invalid_move_from_text():
    with pytest.raises(ValueError, match="lizard"):
        Move.from_text("lizard")


#
# Game
#

def test_game(game, clock):
    assert game.slots[PLAYER_ONE].move is NO_MOVE_SELECTED
    assert game.outcome is None

    rock = success_result_of(game.play(PLAYER_ONE, ROCK))
    assert game.state is RevealController.State.COMMITTING
    scissors = success_result_of(game.play(PLAYER_TWO, "scissors"))
    assert game.state is RevealController.State.AWAITING_RELEASE

    assert rock.identity == scissors.identity
    assert game.slots[PLAYER_ONE].commitment == rock
    assert game.slots[PLAYER_TWO].commitment == scissors

    clock.advance(TEST_RELEASE_DELAY + TEST_RELEASE_MARGIN)
    assert game.state is RevealController.State.REVEALED
    assert game.plaintexts == {PLAYER_ONE: "rock", PLAYER_TWO: "scissors"}
    assert game.outcome is Outcome.PLAYER_A_WINS
    assert game.revelation.outcome is Outcome.PLAYER_A_WINS


def test_moves_are_hidden_until_release(game, clock):
    success_result_of(game.play(PLAYER_ONE, PAPER))
    success_result_of(game.play(PLAYER_TWO, PAPER))
    commitments = [slot.commitment for slot in game.slots.values()]
    assert commitments[0].ciphertext != commitments[1].ciphertext

    clock.advance(TEST_RELEASE_DELAY)
    assert game.plaintexts == {}
    assert game.outcome is None

    clock.advance(TEST_RELEASE_MARGIN)
    assert game.outcome is Outcome.TIE


def test_submit_requires_a_move(game):
    with pytest.raises(RevealController.CommitmentRejected, match="Please select a move for player1"):
        game.submit(PLAYER_ONE)
    assert game.state is RevealController.State.IDLE


def test_moves_are_locked_once_submitted(game):
    game.choose(PLAYER_ONE, ROCK)
    game.choose(PLAYER_ONE, PAPER)
    success_result_of(game.submit(PLAYER_ONE))

    with pytest.raises(RockPaperScissors.MoveLocked):
        game.choose(PLAYER_ONE, SCISSORS)
    with pytest.raises(RockPaperScissors.MoveLocked):
        game.submit(PLAYER_ONE)
    assert game.slots[PLAYER_ONE].move is PAPER


def test_unknown_player(game):
    with pytest.raises(ValueError):
        game.choose("player3", ROCK)


def test_failed_registration_reopens_the_slot(get_controller):
    game = get_controller(RockPaperScissors, registry=MockRegistry(registration_failures=1))

    failure_result_of(game.play(PLAYER_ONE, ROCK), RegistrationFailure)
    assert not game.slots[PLAYER_ONE].submitted
    assert game.state is RevealController.State.IDLE

    success_result_of(game.submit(PLAYER_ONE))
    assert game.slots[PLAYER_ONE].submitted


def test_no_reveal_before_both_players_commit(game, clock):
    success_result_of(game.play(PLAYER_ONE, ROCK))
    clock.advance(TEST_RELEASE_DELAY + TEST_RELEASE_MARGIN)
    assert game.state is RevealController.State.COMMITTING
    failure_result_of(game.attempt_reveal(), RevealFailure)


def test_undecipherable_move_fails_the_game(game, clock):
    success_result_of(game.commit(PLAYER_ONE, "rock"))
    success_result_of(game.commit(PLAYER_TWO, "lizard"))

    clock.advance(TEST_RELEASE_DELAY + TEST_RELEASE_MARGIN)
    assert game.state is RevealController.State.FAILED
    assert isinstance(game.error, RevealFailure)
    assert game.outcome is None

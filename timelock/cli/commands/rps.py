import click
from twisted.internet.defer import gatherResults

from timelock.apps.rps import PLAYER_ONE, PLAYER_TWO, Move, RockPaperScissors
from timelock.cli.config import group_general_config
from timelock.cli.literature import (
    DECRYPTING_MOVES,
    FAILED_TO_DECRYPT_MOVES,
    REGISTERING_RELEASE,
)
from timelock.cli.options import group_session_options
from timelock.cli.painting import (
    CountdownPainter,
    paint_commitment,
    paint_game_result,
)
from timelock.cli.utils import run_session, setup_emitter

option_move = click.Choice([move.value for move in Move], case_sensitive=False)


@click.group()
def rps():
    """Play Rock-Paper-Scissors with time-locked moves."""


@rps.command()
@click.option("--player-one", "move_one", help="Player 1's move", type=option_move, required=True)
@click.option("--player-two", "move_two", help="Player 2's move", type=option_move, required=True)
@group_session_options
@group_general_config
def play(general_config, session_options, move_one, move_two):
    """Commit both moves, wait for the release, then reveal the winner."""
    emitter = setup_emitter(general_config)
    registry, cipher = session_options.create_backends(emitter=emitter)
    game = RockPaperScissors(registry=registry, cipher=cipher, **session_options.controller_kwargs())
    game.add_observer(CountdownPainter(emitter, decrypting_message=DECRYPTING_MOVES))

    def start():
        emitter.message(REGISTERING_RELEASE.format(delay=session_options.delay), verbosity=2)
        submissions = []
        for player, move in ((PLAYER_ONE, move_one), (PLAYER_TWO, move_two)):
            d = game.play(player, Move.from_text(move))
            d.addCallback(lambda commitment: paint_commitment(emitter, commitment))
            submissions.append(d)
        return gatherResults(submissions, consumeErrors=True)

    run_session(
        controller=game,
        start=start,
        emitter=emitter,
        on_revealed=lambda _: paint_game_result(emitter, game),
        failure_message=FAILED_TO_DECRYPT_MOVES,
    )

import click

from timelock.apps.rps import PLAYERS, RockPaperScissors
from timelock.cli.literature import (
    COMMITTED,
    COUNTDOWN,
    DECRYPTED_MESSAGE,
    RELEASE_SCHEDULED,
    REVEALED_MOVES,
)
from timelock.config.constants import USER_LOG_DIR
from timelock.core.reveal import RevealController
from timelock.utilities.logging import truncate_hex


TIMELOCK_BANNER = r"""
 _   _               _            _
| |_(_)_ __ ___   ___| | ___   ___| | __
| __| | '_ ` _ \ / _ \ |/ _ \ / __| |/ /
| |_| | | | | | |  __/ | (_) | (__|   <
 \__|_|_| |_| |_|\___|_|\___/ \___|_|\_\

v{version}
"""


def echo_version(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    from timelock import __version__
    click.secho(TIMELOCK_BANNER.format(version=__version__), bold=True)
    ctx.exit()


def echo_logging_root_path(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.secho(str(USER_LOG_DIR.absolute()))
    ctx.exit()


def paint_commitment(emitter, commitment) -> None:
    emitter.message(COMMITTED.format(label=commitment.label, ciphertext=truncate_hex(commitment.ciphertext, 42)))


def paint_release_schedule(emitter, controller: RevealController) -> None:
    release_time = controller.release_clock.release_time
    emitter.message(RELEASE_SCHEDULED.format(
        release_time=release_time.iso8601(),
        slang=release_time.slang_time(),
        ready_time=controller.release_clock.ready_time.iso8601(),
    ))


class CountdownPainter:
    """Controller observer that paints the countdown on one console line."""

    def __init__(self, emitter, decrypting_message: str):
        self.emitter = emitter
        self.decrypting_message = decrypting_message
        self._last_state = None
        self._last_remaining = None

    def __call__(self, controller: RevealController) -> None:
        state = controller.state
        if state is RevealController.State.AWAITING_RELEASE:
            if self._last_state is not state:
                paint_release_schedule(self.emitter, controller)
            remaining = controller.countdown
            if remaining and remaining != self._last_remaining:
                self.emitter.echo(f"\r{COUNTDOWN.format(seconds=remaining)}   ", nl=False)
            self._last_remaining = remaining
        elif state is RevealController.State.KEY_FETCH_IN_FLIGHT and self._last_state is not state:
            self.emitter.echo(f"\r{self.decrypting_message}" + " " * 24)
        self._last_state = state


def paint_decrypted_message(emitter, message: str) -> None:
    emitter.message(DECRYPTED_MESSAGE.format(message=message), color="green", bold=True)


def paint_game_result(emitter, game: RockPaperScissors) -> None:
    for player in PLAYERS:
        emitter.message(REVEALED_MOVES.format(player=player, move=game.plaintexts[player]))
    emitter.message(game.outcome.announcement, color="green", bold=True)

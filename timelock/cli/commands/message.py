import click

from timelock.apps.message import TimelockedMessage
from timelock.cli.config import group_general_config
from timelock.cli.literature import (
    DECRYPTING_MESSAGE,
    FAILED_TO_DECRYPT_MESSAGE,
    REGISTERING_RELEASE,
)
from timelock.cli.options import group_session_options
from timelock.cli.painting import (
    CountdownPainter,
    paint_commitment,
    paint_decrypted_message,
)
from timelock.cli.utils import run_session, setup_emitter


@click.group()
def message():
    """Encrypt a message that can only be decrypted after its release time."""


@message.command()
@click.argument("text", type=click.STRING)
@group_session_options
@group_general_config
def encrypt(general_config, session_options, text):
    """Encrypt TEXT, wait for the release, then decrypt it."""
    emitter = setup_emitter(general_config)
    registry, cipher = session_options.create_backends(emitter=emitter)
    session = TimelockedMessage(registry=registry, cipher=cipher, **session_options.controller_kwargs())
    session.add_observer(CountdownPainter(emitter, decrypting_message=DECRYPTING_MESSAGE))

    def start():
        emitter.message(REGISTERING_RELEASE.format(delay=session_options.delay), verbosity=2)
        d = session.encrypt(text)
        d.addCallback(lambda commitment: paint_commitment(emitter, commitment))
        return d

    run_session(
        controller=session,
        start=start,
        emitter=emitter,
        on_revealed=lambda _: paint_decrypted_message(emitter, session.message),
        failure_message=FAILED_TO_DECRYPT_MESSAGE,
    )

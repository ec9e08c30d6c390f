import os
from typing import Callable

from twisted.internet.defer import Deferred, FirstError, maybeDeferred
from twisted.internet.task import react
from twisted.python.failure import Failure

from timelock.core.reveal import RevealController
from timelock.exceptions import RevealFailure, TimelockError
from timelock.utilities.emitters import StdoutEmitter

TRUTHY = ("y", "yes", "t", "true", "on", "1")
FALSY = ("n", "no", "f", "false", "off", "0")


def get_env_bool(var_name: str, default: bool) -> bool:
    if var_name in os.environ:
        value = os.environ[var_name].strip().lower()
        if value in TRUTHY:
            return True
        if value in FALSY:
            return False
        raise ValueError(f"Invalid boolean value for {var_name}: '{os.environ[var_name]}'")
    else:
        return default


def setup_emitter(general_config, banner: str = None) -> StdoutEmitter:
    emitter = general_config.emitter
    if banner:
        emitter.banner(banner)
    return emitter


def run_session(controller: RevealController,
                start: Callable[[], Deferred],
                emitter: StdoutEmitter,
                on_revealed: Callable,
                failure_message: str) -> None:
    """
    Runs the reactor until `controller` reaches a terminal state.
    `start` performs the commitments; it is called once the reactor is running.
    """

    def report_failure(failure: Failure) -> None:
        if failure.check(FirstError):
            failure = failure.value.subFailure
        error = failure.value
        if isinstance(error, RevealFailure):
            emitter.error(failure_message)
        elif isinstance(error, TimelockError):
            emitter.error(error.user_message)
        else:
            emitter.error(f"{failure_message} ({failure.getErrorMessage()})")
        emitter.log.debug(f"Session ended with {failure.type.__name__}: {failure.getErrorMessage()}")
        controller.cancel()
        raise SystemExit(1)

    def main(_reactor):
        d = maybeDeferred(start)
        d.addCallback(lambda _: controller.when_revealed())
        d.addCallback(on_revealed)
        d.addErrback(report_failure)
        return d

    react(main)

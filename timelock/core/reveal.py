from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from constant_sorrow.constants import NO_RELEASE_SCHEDULED
from twisted.internet import defer, reactor, threads
from twisted.internet.defer import CancelledError, Deferred
from twisted.internet.interfaces import IReactorTime
from twisted.python.failure import Failure

from timelock.config.constants import RELEASE_DELAY, RELEASE_MARGIN
from timelock.core.clock import ReleaseClock, ReleaseTicker
from timelock.core.commitments import Commitment, CommitmentEngine
from timelock.crypto.cipher import IdentityCipher
from timelock.crypto.codec import payload_to_text
from timelock.exceptions import (
    DecryptionFailed,
    InvalidReleaseTime,
    KeyNotYetAvailable,
    RegistrationFailure,
    RevealFailure,
    SessionCancelled,
    TimelockError,
)
from timelock.network.registry import RegistryClient, ReleaseEvent
from timelock.types import DecryptionKey, Identity, Label
from timelock.utilities.logging import Logger, truncate_hex


@dataclass(frozen=True)
class Revelation:
    identity: Identity
    plaintexts: Dict[Label, str] = field(default_factory=dict)
    outcome: Optional[object] = None


class RevealController:
    """
    Drives one release event from the first commitment to the reveal.

    IDLE -> COMMITTING -> AWAITING_RELEASE -> KEY_FETCH_IN_FLIGHT -> REVEALED,
    with FAILED reachable from every state that is not terminal.

    Network and cipher work runs through `blocking_call` (a thread by default)
    so that one party can commit while the release clock is ticking.  A key
    fetch is only ever issued from AWAITING_RELEASE once the release clock
    reports readiness; a key that is not yet published sends the controller
    back to AWAITING_RELEASE until the next tick.
    """

    class State(Enum):
        IDLE = "idle"
        COMMITTING = "committing"
        AWAITING_RELEASE = "awaiting release"
        KEY_FETCH_IN_FLIGHT = "key fetch in flight"
        REVEALED = "revealed"
        FAILED = "failed"

    class CommitmentRejected(ValueError):
        """The commitment is not acceptable in the controller's current state."""

    class InvalidTransition(RuntimeError):
        pass

    LABELS = ("message",)

    _TRANSITIONS = {
        State.IDLE: (State.COMMITTING, State.FAILED),
        State.COMMITTING: (State.IDLE, State.AWAITING_RELEASE, State.FAILED),
        State.AWAITING_RELEASE: (State.KEY_FETCH_IN_FLIGHT, State.FAILED),
        State.KEY_FETCH_IN_FLIGHT: (State.AWAITING_RELEASE, State.REVEALED, State.FAILED),
        State.REVEALED: (),
        State.FAILED: (),
    }

    def __init__(self,
                 registry: RegistryClient,
                 cipher: IdentityCipher,
                 labels: Iterable[Label] = None,
                 release_delay: int = RELEASE_DELAY,
                 margin: int = RELEASE_MARGIN,
                 clock: IReactorTime = reactor,
                 blocking_call: Callable[..., Deferred] = threads.deferToThread,
                 auto_reveal: bool = True):

        self.log = Logger(self.__class__.__name__)

        self.labels = tuple(labels or self.LABELS)
        if not self.labels or len(set(self.labels)) != len(self.labels):
            raise ValueError(f"Commitment labels must be unique and non-empty; got {self.labels}")
        if release_delay <= 0:
            raise InvalidReleaseTime(f"Release delay must be positive; got {release_delay}")
        if margin < 0:
            raise ValueError(f"Release margin must not be negative; got {margin}")

        self.registry = registry
        self.cipher = cipher
        self.clock = clock
        self.release_delay = release_delay
        self.margin = margin
        self.auto_reveal = auto_reveal
        self.engine = CommitmentEngine(registry=registry, cipher=cipher, clock=clock)
        self._blocking_call = blocking_call

        self.__state = self.State.IDLE
        self.release_timestamp = NO_RELEASE_SCHEDULED
        self.release: Optional[ReleaseEvent] = None
        self.release_clock: Optional[ReleaseClock] = None
        self.commitments: Dict[Label, Commitment] = {}
        self.revelation: Optional[Revelation] = None
        self.error: Optional[TimelockError] = None

        self._pending_labels = set()
        self._commits_in_flight: List[Deferred] = []
        self._fetch_in_flight: Optional[Deferred] = None
        self._waiters: List[Deferred] = []
        self._pending_attempts: List[Deferred] = []
        self._observers: List[Callable[["RevealController"], None]] = []
        self._ticker = ReleaseTicker(on_tick=self._tick, on_error=self._handle_tick_error, clock=clock)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.state.value}, {self.release})"

    #
    # Introspection
    #

    @property
    def state(self) -> State:
        return self.__state

    @property
    def terminal(self) -> bool:
        return self.__state in (self.State.REVEALED, self.State.FAILED)

    @property
    def committed(self) -> bool:
        return all(label in self.commitments for label in self.labels)

    @property
    def countdown(self) -> Optional[int]:
        if self.release_clock is None:
            return None
        return self.release_clock.remaining()

    @property
    def plaintexts(self) -> Dict[Label, str]:
        if self.revelation is None:
            return dict()
        return dict(self.revelation.plaintexts)

    def add_observer(self, observer: Callable[["RevealController"], None]) -> None:
        """`observer` is called with this controller on every transition and every release tick."""
        self._observers.append(observer)

    def _notify(self) -> None:
        for observer in self._observers:
            observer(self)

    def _transition(self, new_state: State) -> None:
        if new_state is self.__state:
            return
        if new_state not in self._TRANSITIONS[self.__state]:
            raise self.InvalidTransition(f"Cannot go from {self.__state.value} to {new_state.value}")
        self.log.debug(f"{self.__state.value} -> {new_state.value}")
        self.__state = new_state
        self._notify()

    #
    # Commit
    #

    def commit(self, label: Label, plaintext: str) -> Deferred:
        """Encrypts `plaintext` for `label` under this controller's release event."""
        if label not in self.labels:
            raise self.CommitmentRejected(f"Unknown commitment label '{label}'; expected one of {self.labels}")
        if label in self.commitments or label in self._pending_labels:
            raise self.CommitmentRejected(f"'{label}' has already been submitted")
        if self.__state not in (self.State.IDLE, self.State.COMMITTING):
            raise self.CommitmentRejected(f"Cannot commit while {self.__state.value}")

        if self.release_timestamp is NO_RELEASE_SCHEDULED:
            self.release_timestamp = int(self.clock.seconds()) + self.release_delay
            self.log.info(f"Scheduled release at {self.release_timestamp}")

        self._pending_labels.add(label)
        self._transition(self.State.COMMITTING)

        d = self._blocking_call(
            self.engine.commit,
            plaintext=plaintext,
            release_timestamp=self.release_timestamp,
            release=self.release,
            label=label,
        )
        self._commits_in_flight.append(d)
        d.addBoth(self._forget_commit, d)
        d.addCallbacks(self._commitment_created, self._commitment_failed, errbackArgs=(label,))
        return d

    def _forget_commit(self, result, d: Deferred):
        if d in self._commits_in_flight:
            self._commits_in_flight.remove(d)
        return result

    def _commitment_created(self, commitment: Commitment) -> Commitment:
        self._pending_labels.discard(commitment.label)
        if self.terminal:
            return commitment

        if self.release is None:
            self.release_clock = ReleaseClock(
                release_timestamp=commitment.release.release_timestamp,
                margin=self.margin,
                clock=self.clock,
            )
            self.release = commitment.release
        elif commitment.release != self.release:
            self._fail(RevealFailure(f"{commitment} does not share the session's {self.release}"))
            return commitment

        self.commitments[commitment.label] = commitment
        self.log.info(f"Committed '{commitment.label}' to identity {truncate_hex(commitment.identity)}")
        self._notify()

        if self.committed:
            self._transition(self.State.AWAITING_RELEASE)
            self.log.info(f"All commitments received; release at {self.release_clock.release_time.iso8601()}")
            self._ticker.start(now=True)
        return commitment

    def _commitment_failed(self, failure: Failure, label: Label) -> Failure:
        self._pending_labels.discard(label)
        if failure.check(CancelledError) or self.terminal:
            return failure

        if failure.check(InvalidReleaseTime, RegistrationFailure):
            self.log.warn(f"Commitment '{label}' failed: {failure.getErrorMessage()}")
            if not self.commitments and not self._pending_labels:
                self.release_timestamp = NO_RELEASE_SCHEDULED
                self._transition(self.State.IDLE)
            return failure

        self.log.failure(f"Commitment '{label}' failed", failure=failure)
        error = failure.value if isinstance(failure.value, TimelockError) else TimelockError()
        self._fail(error)
        return failure

    #
    # Reveal
    #

    def _tick(self) -> None:
        if self.__state is not self.State.AWAITING_RELEASE:
            return
        self._notify()
        if self.auto_reveal and self.release_clock.is_ready():
            self._reveal()

    def _handle_tick_error(self, failure: Failure) -> None:
        self._fail(RevealFailure())

    def attempt_reveal(self) -> Deferred:
        """
        One explicit, clock-gated reveal attempt.

        Fires with the `Revelation`, or with None if the key cannot be
        released yet (the controller keeps waiting).  Fails with
        `RevealFailure` if commitments are missing or the reveal failed.
        """
        if self.__state is self.State.REVEALED:
            return defer.succeed(self.revelation)
        if self.__state is self.State.FAILED:
            return defer.fail(self.error)
        if self.__state is self.State.KEY_FETCH_IN_FLIGHT:
            d = Deferred()
            self._pending_attempts.append(d)
            return d
        if self.__state is not self.State.AWAITING_RELEASE:
            missing = [label for label in self.labels if label not in self.commitments]
            return defer.fail(RevealFailure(f"Cannot reveal without commitments for {', '.join(missing)}"))
        if not self.release_clock.is_ready():
            self.log.info(f"{KeyNotYetAvailable.message} ({self.release_clock.remaining()}s + {self.margin}s margin)")
            return defer.succeed(None)
        d = self._reveal()
        d.addCallback(self._attempt_result)
        return d

    def _attempt_result(self, result):
        if self.__state is self.State.FAILED:
            raise self.error
        return result

    def _reveal(self) -> Deferred:
        self._transition(self.State.KEY_FETCH_IN_FLIGHT)
        d = self._blocking_call(self._fetch_and_decrypt, release=self.release)
        self._fetch_in_flight = d
        d.addCallbacks(self._revealed, self._reveal_failed)
        return d

    def _fetch_and_decrypt(self, release: ReleaseEvent) -> Revelation:
        decryption_key = self.registry.fetch_release_key(release.identity)
        plaintexts = self._decrypt_all(release=release, decryption_key=decryption_key)
        return Revelation(identity=release.identity, plaintexts=plaintexts, outcome=self._interpret(plaintexts))

    def _decrypt_all(self, release: ReleaseEvent, decryption_key: DecryptionKey) -> Dict[Label, str]:
        if self.__state is not self.State.KEY_FETCH_IN_FLIGHT:
            raise RevealFailure(f"Refusing to decrypt while {self.__state.value}")
        plaintexts = dict()
        for label in self.labels:
            commitment = self.commitments.get(label)
            if commitment is None or not commitment.ciphertext or commitment.ciphertext.lower() == "0x":
                raise RevealFailure(f"No commitment was submitted for '{label}'")
            if commitment.release != release:
                raise RevealFailure(f"'{label}' was committed to a different release event")
            try:
                payload = self.cipher.decrypt(ciphertext=commitment.ciphertext, decryption_key=decryption_key)
                plaintexts[label] = payload_to_text(payload)
            except (DecryptionFailed, ValueError) as e:
                raise RevealFailure(f"Failed to decrypt '{label}'") from e
        return plaintexts

    def _interpret(self, plaintexts: Dict[Label, str]) -> Optional[object]:
        """Derives an application outcome from the decrypted plaintexts."""
        return None

    def _revealed(self, revelation: Revelation) -> Optional[Revelation]:
        self._fetch_in_flight = None
        if self.terminal:
            return None
        self.revelation = revelation
        self._ticker.stop()
        self._transition(self.State.REVEALED)
        self.log.info(f"Revealed {len(revelation.plaintexts)} commitment(s) for identity {truncate_hex(revelation.identity)}")
        waiters, self._waiters = self._waiters, []
        waiters.extend(self._settle_attempts())
        for waiter in waiters:
            waiter.callback(revelation)
        return revelation

    def _settle_attempts(self) -> List[Deferred]:
        attempts, self._pending_attempts = self._pending_attempts, []
        return attempts

    def _reveal_failed(self, failure: Failure) -> None:
        self._fetch_in_flight = None
        if failure.check(CancelledError) or self.terminal:
            return None

        if failure.check(KeyNotYetAvailable):
            self.log.info("Decryption key is not published yet; retrying on the next tick")
            self._transition(self.State.AWAITING_RELEASE)
            for attempt in self._settle_attempts():
                attempt.callback(None)
            return None

        if failure.check(RevealFailure):
            error = failure.value
        else:
            error = RevealFailure(f"Reveal failed: {failure.getErrorMessage()}")
        self.log.warn(f"Reveal for identity {truncate_hex(self.release.identity)} failed: {error}")
        self._fail(error)
        return None

    #
    # Termination
    #

    def when_revealed(self) -> Deferred:
        """Fires with the `Revelation`, or fails with the session's error."""
        if self.__state is self.State.REVEALED:
            return defer.succeed(self.revelation)
        if self.__state is self.State.FAILED:
            return defer.fail(self.error)
        d = Deferred()
        self._waiters.append(d)
        return d

    def _fail(self, error: TimelockError) -> None:
        if self.terminal:
            return
        self.error = error
        self._ticker.stop()
        self._transition(self.State.FAILED)
        waiters, self._waiters = self._waiters, []
        waiters.extend(self._settle_attempts())
        for waiter in waiters:
            waiter.errback(Failure(error))

    def cancel(self) -> None:
        """Ends the session: stops the release ticker and abandons any in-flight work."""
        if self.terminal:
            return
        self.log.info("Cancelling session")
        self._fail(SessionCancelled())
        in_flight = list(self._commits_in_flight)
        if self._fetch_in_flight is not None:
            in_flight.append(self._fetch_in_flight)
        for d in in_flight:
            d.cancel()

from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

from twisted.internet import reactor
from twisted.internet.interfaces import IReactorTime

from timelock.crypto.cipher import IdentityCipher
from timelock.crypto.codec import fresh_blinding_value, text_to_payload
from timelock.exceptions import InvalidReleaseTime
from timelock.network.registry import RegistryClient, ReleaseEvent
from timelock.types import Ciphertext, Label, ReleaseTimestamp
from timelock.utilities.logging import Logger, truncate_hex


@dataclass(frozen=True)
class Commitment:
    """A ciphertext binding its creator to a plaintext until the release key is published."""

    label: Label
    ciphertext: Ciphertext
    release: ReleaseEvent

    @property
    def identity(self):
        return self.release.identity

    def __repr__(self):
        return f"Commitment({self.label}, {truncate_hex(self.ciphertext)}, {self.release})"


class CommitmentEngine:
    """
    Encrypts payloads against the identity of a release event.

    The first commitment for a release timestamp registers an identity with
    the key-release network; later commitments for the same timestamp reuse
    that registration, so all of them open with one released key.
    """

    def __init__(self,
                 registry: RegistryClient,
                 cipher: IdentityCipher,
                 clock: IReactorTime = reactor):
        self.log = Logger(self.__class__.__name__)
        self.registry = registry
        self.cipher = cipher
        self.clock = clock
        self.__releases: Dict[ReleaseTimestamp, ReleaseEvent] = {}
        self.__registration_lock = Lock()

    def now(self) -> int:
        return int(self.clock.seconds())

    def _obtain_release(self, release_timestamp: ReleaseTimestamp) -> ReleaseEvent:
        with self.__registration_lock:
            release = self.__releases.get(release_timestamp)
            if release is None:
                # raises RegistrationFailure and leaves nothing behind
                release = self.registry.register_identity(release_timestamp)
                self.__releases[release_timestamp] = release
            return release

    def commit(self,
               plaintext: str,
               release_timestamp: int,
               release: Optional[ReleaseEvent] = None,
               label: Label = "message") -> Commitment:
        release_timestamp = ReleaseTimestamp(int(release_timestamp))
        if release_timestamp <= self.now():
            raise InvalidReleaseTime(f"Release timestamp {release_timestamp} is not in the future")

        if release is None:
            release = self._obtain_release(release_timestamp)
        elif release.release_timestamp != release_timestamp:
            raise ValueError(f"{release} does not release at {release_timestamp}")

        payload = text_to_payload(plaintext)
        sigma = fresh_blinding_value()
        ciphertext = self.cipher.encrypt(
            payload=payload,
            identity=release.identity,
            eon_key=release.eon_key,
            sigma=sigma,
        )
        commitment = Commitment(label=label, ciphertext=Ciphertext(ciphertext), release=release)
        self.log.debug(f"Created {commitment}")
        return commitment

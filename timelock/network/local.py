from threading import Lock
from typing import Dict

from eth_utils import encode_hex, keccak
from twisted.internet import reactor
from twisted.internet.interfaces import IReactorTime

from timelock.crypto.codec import secure_random
from timelock.crypto.mock import derive_release_key
from timelock.exceptions import KeyFetchFailure, KeyNotYetAvailable
from timelock.network.registry import RegistryClient, ReleaseEvent
from timelock.types import DecryptionKey, EonKey, Identity, ReleaseTimestamp


class LocalKeyReleaseService(RegistryClient):
    """
    In-process key-release network for development sessions and tests.

    Keys are produced with the insecure development cipher's key derivation
    and are only handed out once the clock reaches the release timestamp
    plus `publication_latency` seconds.  Pair with
    `timelock.crypto.mock.InsecureDevelopmentCipher`.
    """

    EON_KEY_LENGTH = 48

    def __init__(self, clock: IReactorTime = reactor, publication_latency: int = 2, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.clock = clock
        self.publication_latency = publication_latency
        self.eon = 1
        self.eon_key = EonKey(encode_hex(secure_random(self.EON_KEY_LENGTH)))
        self.__published: Dict[Identity, ReleaseTimestamp] = {}
        self.__lock = Lock()

    def __repr__(self):
        return f"{self.__class__.__name__}(eon={self.eon})"

    def _register(self, release_timestamp: ReleaseTimestamp) -> ReleaseEvent:
        identity_prefix = secure_random(32)
        identity = Identity(encode_hex(keccak(identity_prefix + release_timestamp.to_bytes(8, "big"))))
        with self.__lock:
            self.__published[identity] = release_timestamp
        return ReleaseEvent(release_timestamp=release_timestamp, eon_key=self.eon_key, identity=identity)

    def _fetch(self, identity: Identity) -> DecryptionKey:
        with self.__lock:
            release_timestamp = self.__published.get(identity)
        if release_timestamp is None:
            raise KeyFetchFailure(f"Unknown identity {identity}")
        if self.clock.seconds() < release_timestamp + self.publication_latency:
            raise KeyNotYetAvailable()
        return derive_release_key(eon_key=self.eon_key, identity=identity)

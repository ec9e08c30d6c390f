from abc import ABC, abstractmethod
from dataclasses import dataclass
from http import HTTPStatus

import requests
from eth_utils import encode_hex
from requests.exceptions import RequestException

from timelock.config.constants import (
    IDENTITY_PREFIX_LENGTH,
    REGISTRY_CACHE_TTL,
    REGISTRY_REQUEST_TIMEOUT,
    REGISTRY_URL,
)
from timelock.crypto.codec import normalize_hex, secure_random
from timelock.exceptions import (
    KeyFetchFailure,
    KeyNotYetAvailable,
    RegistrationFailure,
)
from timelock.network.schemas import (
    DecryptionKeySchema,
    InvalidRegistryResponse,
    RegistrationSchema,
    unwrap_message,
)
from timelock.types import DecryptionKey, EonKey, Identity, ReleaseTimestamp
from timelock.utilities.cache import TTLCache
from timelock.utilities.logging import Logger, truncate_hex

RequestErrors = (
    # https://requests.readthedocs.io/en/latest/user/quickstart/#errors-and-exceptions
    ConnectionError,
    TimeoutError,
    RequestException,
)


@dataclass(frozen=True)
class ReleaseEvent:
    """
    The outcome of one identity registration: the identity every commitment
    of the event is encrypted to, the eon key to encrypt with, and the time
    after which the network releases the identity's decryption key.
    """

    release_timestamp: ReleaseTimestamp
    eon_key: EonKey
    identity: Identity

    def __repr__(self):
        return f"ReleaseEvent({self.release_timestamp}, identity={truncate_hex(self.identity)})"


class RegistryClient(ABC):
    """
    The two operations of a key-release network: register an identity for a
    future release timestamp, and fetch the identity's key once released.

    Successful results are cached for the session, so repeating a call with
    the same input returns the same result; failed calls cache nothing.
    """

    def __init__(self, cache_ttl: int = REGISTRY_CACHE_TTL):
        self.log = Logger(self.__class__.__name__)
        self._registrations = TTLCache(ttl=cache_ttl)
        self._keys = TTLCache(ttl=cache_ttl)

    def register_identity(self, release_timestamp: int) -> ReleaseEvent:
        release_timestamp = ReleaseTimestamp(int(release_timestamp))
        cached = self._registrations[release_timestamp]
        if cached:
            return cached
        self.log.debug(f"Registering identity for release at {release_timestamp}")
        release = self._register(release_timestamp=release_timestamp)
        self.log.info(f"Registered {release}")
        return self._registrations.setdefault(release_timestamp, release)

    def fetch_release_key(self, identity: str) -> DecryptionKey:
        identity = Identity(normalize_hex(identity))
        cached = self._keys[identity]
        if cached:
            return cached
        decryption_key = self._fetch(identity=identity)
        self.log.info(f"Received decryption key for identity {truncate_hex(identity)}")
        return self._keys.setdefault(identity, decryption_key)

    @abstractmethod
    def _register(self, release_timestamp: ReleaseTimestamp) -> ReleaseEvent:
        raise NotImplementedError

    @abstractmethod
    def _fetch(self, identity: Identity) -> DecryptionKey:
        raise NotImplementedError


class ShutterRegistryClient(RegistryClient):
    """Registry client for a Shutter-style HTTP key-release API."""

    REGISTER_PATH = "register_identity"
    DECRYPTION_KEY_PATH = "get_decryption_key"

    NOT_READY_STATUS_CODES = (HTTPStatus.NOT_FOUND, HTTPStatus.TOO_EARLY)
    NOT_READY_HINTS = ("too early", "not reached", "not yet", "not available")

    def __init__(self,
                 registry_url: str = REGISTRY_URL,
                 timeout: int = REGISTRY_REQUEST_TIMEOUT,
                 *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout

    def __repr__(self):
        return f"{self.__class__.__name__}({self.registry_url})"

    def _url(self, path: str) -> str:
        return f"{self.registry_url}/{path}"

    def _register(self, release_timestamp: ReleaseTimestamp) -> ReleaseEvent:
        identity_prefix = encode_hex(secure_random(IDENTITY_PREFIX_LENGTH))
        url = self._url(self.REGISTER_PATH)
        try:
            response = requests.post(
                url,
                json={"decryptionTimestamp": release_timestamp, "identityPrefix": identity_prefix},
                timeout=self.timeout,
            )
        except RequestErrors as e:
            error = f"Failed to register identity at {url}: {str(e)}"
            self.log.warn(error)
            raise RegistrationFailure(error) from e

        if response.status_code != HTTPStatus.OK:
            error = f"Failed to register identity at {url} with status code {response.status_code}"
            self.log.warn(error)
            raise RegistrationFailure(error)

        try:
            data = RegistrationSchema().load(unwrap_message(response.json()))
        except (InvalidRegistryResponse, ValueError) as e:
            error = f"Invalid registration response from {url}: {str(e)}"
            self.log.warn(error)
            raise RegistrationFailure(error) from e

        return ReleaseEvent(
            release_timestamp=release_timestamp,
            eon_key=EonKey(data["eon_key"]),
            identity=Identity(data["identity"]),
        )

    def _is_not_ready(self, response) -> bool:
        if response.status_code in self.NOT_READY_STATUS_CODES:
            return True
        if response.status_code == HTTPStatus.BAD_REQUEST:
            text = (response.text or "").lower()
            return any(hint in text for hint in self.NOT_READY_HINTS)
        return False

    def _fetch(self, identity: Identity) -> DecryptionKey:
        url = self._url(self.DECRYPTION_KEY_PATH)
        try:
            response = requests.get(url, params={"identity": identity}, timeout=self.timeout)
        except RequestErrors as e:
            error = f"Failed to fetch decryption key from {url}: {str(e)}"
            self.log.warn(error)
            raise KeyFetchFailure(error) from e

        if self._is_not_ready(response):
            self.log.debug(f"Decryption key for {truncate_hex(identity)} is not published yet")
            raise KeyNotYetAvailable()

        if response.status_code != HTTPStatus.OK:
            error = f"Failed to fetch decryption key from {url} with status code {response.status_code}"
            self.log.warn(error)
            raise KeyFetchFailure(error)

        if not response.content:
            raise KeyNotYetAvailable()

        try:
            message = unwrap_message(response.json())
            if not message.get("decryption_key") or message["decryption_key"] == "0x":
                raise KeyNotYetAvailable()
            data = DecryptionKeySchema().load(message)
        except (InvalidRegistryResponse, ValueError) as e:
            error = f"Invalid decryption key response from {url}: {str(e)}"
            self.log.warn(error)
            raise KeyFetchFailure(error) from e

        if data.get("identity") and data["identity"].lower() != identity.lower():
            error = f"{url} returned a key for identity {truncate_hex(data['identity'])}, not {truncate_hex(identity)}"
            self.log.warn(error)
            raise KeyFetchFailure(error)

        return DecryptionKey(data["decryption_key"])

import os

from eth_utils import add_0x_prefix, decode_hex, encode_hex, is_hex

from timelock.config.constants import SIGMA_LENGTH
from timelock.exceptions import EntropyUnavailable
from timelock.types import Payload, Sigma


def text_to_payload(text: str) -> Payload:
    """UTF-8 encodes text into the 0x-prefixed hex payload expected by the cipher."""
    return Payload(encode_hex(text.encode("utf-8")))


def payload_to_text(payload: str) -> str:
    """
    Inverse of `text_to_payload`.

    Raises ValueError if the payload is not hex, or is not valid UTF-8.
    """
    payload = normalize_hex(payload)
    if not is_hex(payload):
        raise ValueError("Payload is not a hex string")
    return decode_hex(payload).decode("utf-8")


def normalize_hex(value: str) -> str:
    """Adds the 0x prefix to a bare hex string; values already prefixed are returned unchanged."""
    return add_0x_prefix(value)


def secure_random(num_bytes: int) -> bytes:
    """
    Returns an amount `num_bytes` of data from the OS's random device.
    If a randomness source isn't found, raises `EntropyUnavailable`; there is
    no fallback to a weaker source.
    """
    try:
        return os.urandom(num_bytes)
    except NotImplementedError as e:
        raise EntropyUnavailable() from e


def fresh_blinding_value() -> Sigma:
    """A new, single-use 32 byte sigma for one encryption."""
    return Sigma(encode_hex(secure_random(SIGMA_LENGTH)))

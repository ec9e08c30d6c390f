"""
An insecure stand-in for the identity-based encryption primitive.

WARNING: DO NOT USE THIS CODE TO PROTECT ANYTHING.  The release key for an
identity is a hash of public values, so anyone can derive it before the
release time.  It exists for `--dev` sessions and tests, together with
`timelock.network.local.LocalKeyReleaseService`.
"""

import hmac

from eth_utils import decode_hex, encode_hex, keccak

from timelock.config.constants import SIGMA_LENGTH
from timelock.crypto.cipher import IdentityCipher
from timelock.exceptions import DecryptionFailed
from timelock.types import Ciphertext, DecryptionKey, EonKey, Identity, Payload, Sigma

TAG_LENGTH = 16
BLOCK_LENGTH = 32


def derive_release_key(eon_key: EonKey, identity: Identity) -> DecryptionKey:
    """The key that a development key-release service publishes for `identity`."""
    return DecryptionKey(encode_hex(keccak(decode_hex(eon_key) + decode_hex(identity))))


def _keystream(key: bytes, sigma: bytes, length: int) -> bytes:
    blocks = (length + BLOCK_LENGTH - 1) // BLOCK_LENGTH
    stream = b"".join(keccak(key + sigma + counter.to_bytes(4, "big")) for counter in range(blocks))
    return stream[:length]


def _tag(key: bytes, sigma: bytes, body: bytes) -> bytes:
    return keccak(b"tag" + key + sigma + body)[:TAG_LENGTH]


class InsecureDevelopmentCipher(IdentityCipher):

    name = "insecure-development"

    def encrypt(self, payload: Payload, identity: Identity, eon_key: EonKey, sigma: Sigma) -> Ciphertext:
        key = decode_hex(derive_release_key(eon_key=eon_key, identity=identity))
        sigma_bytes = decode_hex(sigma)
        if len(sigma_bytes) != SIGMA_LENGTH:
            raise ValueError(f"sigma must be {SIGMA_LENGTH} bytes; got {len(sigma_bytes)}")
        plaintext = decode_hex(payload)
        body = bytes(a ^ b for a, b in zip(plaintext, _keystream(key, sigma_bytes, len(plaintext))))
        return Ciphertext(encode_hex(sigma_bytes + _tag(key, sigma_bytes, body) + body))

    def decrypt(self, ciphertext: Ciphertext, decryption_key: DecryptionKey) -> Payload:
        try:
            raw = decode_hex(ciphertext)
            key = decode_hex(decryption_key)
        except ValueError as e:
            raise DecryptionFailed() from e
        if len(raw) < SIGMA_LENGTH + TAG_LENGTH:
            raise DecryptionFailed("Commitment is too short")
        sigma = raw[:SIGMA_LENGTH]
        tag = raw[SIGMA_LENGTH:SIGMA_LENGTH + TAG_LENGTH]
        body = raw[SIGMA_LENGTH + TAG_LENGTH:]
        if not hmac.compare_digest(tag, _tag(key, sigma, body)):
            raise DecryptionFailed()
        plaintext = bytes(a ^ b for a, b in zip(body, _keystream(key, sigma, len(body))))
        return Payload(encode_hex(plaintext))

import pytest
from eth_utils import decode_hex

from timelock.config.constants import SIGMA_LENGTH
from timelock.crypto.codec import fresh_blinding_value, payload_to_text, text_to_payload
from timelock.crypto.mock import TAG_LENGTH, InsecureDevelopmentCipher, derive_release_key
from timelock.exceptions import DecryptionFailed, KeyFetchFailure, KeyNotYetAvailable
from tests.constants import MOCK_EON_KEY, MOCK_IDENTITY, MOCK_NOW, TEST_PUBLICATION_LATENCY

OTHER_IDENTITY = "0x" + "ee" * 32


def test_development_cipher_opens_with_released_key(cipher):
    payload = text_to_payload("hello")
    ciphertext = cipher.encrypt(payload=payload, identity=MOCK_IDENTITY, eon_key=MOCK_EON_KEY, sigma=fresh_blinding_value())
    assert ciphertext.startswith("0x")
    assert payload[2:] not in ciphertext

    decryption_key = derive_release_key(eon_key=MOCK_EON_KEY, identity=MOCK_IDENTITY)
    assert payload_to_text(cipher.decrypt(ciphertext=ciphertext, decryption_key=decryption_key)) == "hello"


def test_development_cipher_is_randomized_by_sigma(cipher):
    payload = text_to_payload("rock")
    ciphertexts = {
        cipher.encrypt(payload=payload, identity=MOCK_IDENTITY, eon_key=MOCK_EON_KEY, sigma=fresh_blinding_value())
        for _ in range(10)
    }
    assert len(ciphertexts) == 10


def test_development_cipher_rejects_wrong_key(cipher):
    ciphertext = cipher.encrypt(payload=text_to_payload("paper"),
                                identity=MOCK_IDENTITY,
                                eon_key=MOCK_EON_KEY,
                                sigma=fresh_blinding_value())

    wrong_key = derive_release_key(eon_key=MOCK_EON_KEY, identity=OTHER_IDENTITY)
    with pytest.raises(DecryptionFailed):
        cipher.decrypt(ciphertext=ciphertext, decryption_key=wrong_key)

    with pytest.raises(DecryptionFailed):
        cipher.decrypt(ciphertext="0x1234", decryption_key=wrong_key)

    with pytest.raises(DecryptionFailed):
        cipher.decrypt(ciphertext="not hex", decryption_key=wrong_key)


def test_development_cipher_requires_32_byte_sigma(cipher):
    with pytest.raises(ValueError):
        cipher.encrypt(payload=text_to_payload("scissors"), identity=MOCK_IDENTITY, eon_key=MOCK_EON_KEY, sigma="0x1234")

    # the codec's blinding values frame every ciphertext
    sigma = fresh_blinding_value()
    ciphertext = cipher.encrypt(payload=text_to_payload("scissors"), identity=MOCK_IDENTITY, eon_key=MOCK_EON_KEY, sigma=sigma)
    assert len(decode_hex(sigma)) == SIGMA_LENGTH
    assert ciphertext.startswith(sigma)
    assert len(decode_hex(ciphertext)) == SIGMA_LENGTH + TAG_LENGTH + len("scissors")


def test_local_service_registers_distinct_identities(local_registry):
    first = local_registry.register_identity(MOCK_NOW + 60)
    second = local_registry.register_identity(MOCK_NOW + 61)
    assert first.identity != second.identity
    assert first.eon_key == second.eon_key == local_registry.eon_key

    # registrations are idempotent per release timestamp
    assert local_registry.register_identity(MOCK_NOW + 60) == first


def test_local_service_withholds_key_until_release(clock, local_registry):
    release = local_registry.register_identity(MOCK_NOW + 60)

    with pytest.raises(KeyNotYetAvailable):
        local_registry.fetch_release_key(release.identity)

    # released, but not published yet
    clock.advance(60)
    with pytest.raises(KeyNotYetAvailable):
        local_registry.fetch_release_key(release.identity)

    clock.advance(TEST_PUBLICATION_LATENCY)
    decryption_key = local_registry.fetch_release_key(release.identity)
    assert decryption_key == derive_release_key(eon_key=release.eon_key, identity=release.identity)


def test_local_service_unknown_identity(local_registry):
    with pytest.raises(KeyFetchFailure):
        local_registry.fetch_release_key(OTHER_IDENTITY)

import pytest_twisted
from twisted.internet import reactor

from timelock.apps.message import MESSAGE, TimelockedMessage
from timelock.core.reveal import RevealController
from timelock.crypto.codec import text_to_payload
from timelock.crypto.mock import InsecureDevelopmentCipher
from timelock.exceptions import RegistrationFailure
from timelock.network.local import LocalKeyReleaseService
from tests.constants import MOCK_NOW, TEST_RELEASE_DELAY, TEST_RELEASE_MARGIN
from tests.mock.registry import MockRegistry
from tests.utils.deferreds import failure_result_of, success_result_of

State = RevealController.State


def test_single_party_message(mocker, message_session, local_registry, clock):
    fetch = mocker.spy(local_registry, "fetch_release_key")

    commitment = success_result_of(message_session.encrypt("hello"))
    assert commitment.ciphertext
    assert commitment.ciphertext != text_to_payload("hello")
    assert commitment.release.release_timestamp == MOCK_NOW + TEST_RELEASE_DELAY

    # Not yet: the release time has not passed, let alone the margin
    assert success_result_of(message_session.decrypt()) is None
    assert message_session.state is State.AWAITING_RELEASE

    clock.advance(TEST_RELEASE_DELAY)
    assert message_session.state is State.AWAITING_RELEASE
    assert fetch.call_count == 0

    # Past R+5 the controller fetches the key on its own and decrypts
    clock.advance(TEST_RELEASE_MARGIN)
    assert message_session.state is State.REVEALED
    assert message_session.message == "hello"
    assert fetch.call_count == 1


def test_registration_transport_error_produces_no_commitment(get_controller):
    registry = MockRegistry(registration_failures=1)
    session = get_controller(TimelockedMessage, registry=registry)

    failure_result_of(session.encrypt("hello"), RegistrationFailure)
    assert session.ciphertext is None
    assert session.commitments == {}
    assert session.state is State.IDLE


@pytest_twisted.inlineCallbacks
def test_message_session_on_the_reactor():
    """Commit and reveal with blocking work on the reactor's thread pool."""
    session = TimelockedMessage(
        registry=LocalKeyReleaseService(clock=reactor, publication_latency=0),
        cipher=InsecureDevelopmentCipher(),
        release_delay=2,
        margin=0,
    )
    commitment = yield session.encrypt("hello from a thread")
    assert session.commitments[MESSAGE] == commitment

    revelation = yield session.when_revealed()
    assert revelation.plaintexts == {MESSAGE: "hello from a thread"}
    assert session.state is State.REVEALED

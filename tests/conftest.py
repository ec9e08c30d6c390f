import pytest
from click.testing import CliRunner
from twisted.internet import defer
from twisted.internet.task import Clock

from timelock.apps.message import TimelockedMessage
from timelock.apps.rps import RockPaperScissors
from timelock.core.commitments import CommitmentEngine
from timelock.core.reveal import RevealController
from timelock.crypto.mock import InsecureDevelopmentCipher
from timelock.network.local import LocalKeyReleaseService
from timelock.utilities.emitters import StdoutEmitter
from timelock.utilities.logging import GlobalLoggerSettings
from tests.constants import (
    MOCK_NOW,
    TEST_PUBLICATION_LATENCY,
    TEST_RELEASE_DELAY,
    TEST_RELEASE_MARGIN,
)
from tests.mock.registry import MockRegistry


#
# Pytest configuration
#

def pytest_collection_modifyitems(config, items):
    GlobalLoggerSettings.set_log_level("debug")


#
# Time
#

@pytest.fixture(scope='function')
def clock():
    """A controllable reactor clock starting at a realistic wall-clock time."""
    clock = Clock()
    clock.advance(MOCK_NOW)
    return clock


#
# Backends
#

@pytest.fixture(scope='function')
def cipher():
    return InsecureDevelopmentCipher()


@pytest.fixture(scope='function')
def local_registry(clock):
    return LocalKeyReleaseService(clock=clock, publication_latency=TEST_PUBLICATION_LATENCY)


@pytest.fixture(scope='function')
def mock_registry():
    return MockRegistry()


@pytest.fixture(scope='function')
def engine(local_registry, cipher, clock):
    return CommitmentEngine(registry=local_registry, cipher=cipher, clock=clock)


#
# Controllers
#

@pytest.fixture(scope='module')
def synchronous_call():
    """Runs blocking work in the calling thread so that task.Clock drives everything."""
    return defer.maybeDeferred


@pytest.fixture(scope='function')
def controller_kwargs(clock, cipher, synchronous_call):
    return dict(
        cipher=cipher,
        clock=clock,
        blocking_call=synchronous_call,
        release_delay=TEST_RELEASE_DELAY,
        margin=TEST_RELEASE_MARGIN,
    )


@pytest.fixture(scope='function')
def get_controller(local_registry, controller_kwargs):
    def __get_controller(controller_class=RevealController, **overrides):
        kwargs = dict(registry=local_registry, **controller_kwargs)
        kwargs.update(overrides)
        return controller_class(**kwargs)
    return __get_controller


@pytest.fixture(scope='function')
def message_session(get_controller):
    return get_controller(TimelockedMessage)


@pytest.fixture(scope='function')
def game(get_controller):
    return get_controller(RockPaperScissors)


#
# CLI
#

@pytest.fixture(scope='module')
def click_runner():
    runner = CliRunner()
    yield runner


@pytest.fixture(scope='function')
def test_emitter():
    # Note that this fixture does not capture console output.
    # Whether the output is captured or not is controlled by
    # the usage of the (built-in) `capsys` fixture or global PyTest run settings.
    return StdoutEmitter()

"""
Synchronous result helpers for Deferreds driven by ``task.Clock``.

These are the plain-function counterparts of
``twisted.trial.unittest.SynchronousTestCase.successResultOf`` and
``failureResultOf``, for pytest-style test functions that have no
TestCase instance to call them on.
"""

from twisted.internet.defer import Deferred
from twisted.python.failure import Failure


def _result_of(d: Deferred):
    # consumes the result; the deferred carries None afterwards
    results = []
    d.addBoth(results.append)
    if not results:
        raise AssertionError(f"{d} has not fired")
    return results[0]


def success_result_of(d: Deferred):
    result = _result_of(d)
    if isinstance(result, Failure):
        raise AssertionError(f"Expected a result, got {result.type.__name__}: {result.getErrorMessage()}")
    return result


def failure_result_of(d: Deferred, *error_types) -> Failure:
    result = _result_of(d)
    if not isinstance(result, Failure):
        raise AssertionError(f"Expected a failure, got {result!r}")
    if error_types and not result.check(*error_types):
        raise AssertionError(f"Expected one of {error_types}, got {result.type.__name__}")
    return result

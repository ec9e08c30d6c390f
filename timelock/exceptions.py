"""
Error taxonomy for time-locked commitments.

Every error carries a ``message`` that is safe to show to a user: it never
contains key material, blinding values or plaintext.
"""


class TimelockError(Exception):
    """Base class for all timelock errors."""

    message = "Something went wrong."

    def __init__(self, *args):
        if not args:
            args = (self.message,)
        super().__init__(*args)

    @property
    def user_message(self) -> str:
        return self.message


#
# Commitment
#

class InvalidReleaseTime(TimelockError, ValueError):
    """The release timestamp is not in the future; rejected before any network I/O."""

    message = "The release time must be in the future."


class RegistrationFailure(TimelockError):
    """Transport or service error while registering an identity."""

    message = "Failed to register the release identity. Please try again."


class EntropyUnavailable(TimelockError):
    """The operating system cannot provide secure randomness."""

    message = "No secure source of randomness is available; refusing to encrypt."


#
# Reveal
#

class KeyNotYetAvailable(TimelockError):
    """The key-release network has not published the key yet.  Not an error, keep waiting."""

    message = "Please wait before decryption key is available."


class KeyFetchFailure(TimelockError):
    """Fetching the decryption key failed for a reason other than it not being published yet."""

    message = "Failed to fetch the decryption key."


class DecryptionFailed(TimelockError):
    """Raised by a cipher when a commitment cannot be opened with the supplied key."""

    message = "The commitment could not be decrypted with this key."


class RevealFailure(TimelockError):
    """The reveal attempt failed and will not be retried automatically."""

    message = "Failed to decrypt message. Please try again."


class SessionCancelled(TimelockError):
    """The session ended before the commitments were revealed."""

    message = "The session was cancelled before the reveal."


class CipherNotConfigured(TimelockError, RuntimeError):

    message = "No identity-based cipher is configured."
    MESSAGE = """
    No identity-based cipher is configured. Provide one with --cipher or {envvar}
    (e.g. "package.module:ClassName"), or use --dev for the insecure development cipher.
    """

    def __init__(self, envvar: str, *args):
        super().__init__(self.MESSAGE.format(envvar=envvar), *args)

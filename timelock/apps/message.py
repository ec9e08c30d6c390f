from typing import Optional

from twisted.internet.defer import Deferred

from timelock.core.reveal import RevealController

MESSAGE = "message"


class TimelockedMessage(RevealController):
    """A single party encrypts one message that nobody can read before its release time."""

    LABELS = (MESSAGE,)

    def __init__(self, *args, **kwargs):
        kwargs.pop("labels", None)
        super().__init__(labels=self.LABELS, *args, **kwargs)

    def encrypt(self, text: str) -> Deferred:
        return self.commit(label=MESSAGE, plaintext=text)

    def decrypt(self) -> Deferred:
        return self.attempt_reveal()

    @property
    def ciphertext(self) -> Optional[str]:
        commitment = self.commitments.get(MESSAGE)
        return commitment.ciphertext if commitment else None

    @property
    def message(self) -> Optional[str]:
        return self.plaintexts.get(MESSAGE)

from abc import ABC, abstractmethod
from importlib import import_module

from timelock.exceptions import CipherNotConfigured
from timelock.types import Ciphertext, DecryptionKey, EonKey, Identity, Payload, Sigma


class IdentityCipher(ABC):
    """
    The identity-based encryption primitive, consumed as an opaque capability.

    Implementations encrypt a hex payload against an (identity, eon key) pair
    published by the key-release network and decrypt with the per-identity
    key that the network releases later.  `decrypt` raises
    `timelock.exceptions.DecryptionFailed` when the key does not open the commitment.
    """

    name = NotImplemented

    @abstractmethod
    def encrypt(self, payload: Payload, identity: Identity, eon_key: EonKey, sigma: Sigma) -> Ciphertext:
        raise NotImplementedError

    @abstractmethod
    def decrypt(self, ciphertext: Ciphertext, decryption_key: DecryptionKey) -> Payload:
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name})"


def load_cipher(import_path: str, envvar: str) -> IdentityCipher:
    """Instantiates the cipher class found at `import_path` ("package.module:ClassName")."""
    if not import_path:
        raise CipherNotConfigured(envvar)
    module_name, _, class_name = import_path.partition(":")
    if not class_name:
        raise ValueError(f"Invalid cipher import path '{import_path}'; expected 'package.module:ClassName'")
    module = import_module(module_name)
    cipher_class = getattr(module, class_name)
    if not issubclass(cipher_class, IdentityCipher):
        raise TypeError(f"{import_path} is not an {IdentityCipher.__name__}")
    return cipher_class()

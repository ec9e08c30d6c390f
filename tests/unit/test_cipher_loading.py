import pytest

from timelock.crypto.cipher import load_cipher
from timelock.crypto.mock import InsecureDevelopmentCipher
from timelock.exceptions import CipherNotConfigured

ENVVAR = "TIMELOCK_CIPHER"


def test_load_cipher_by_import_path():
    cipher = load_cipher("timelock.crypto.mock:InsecureDevelopmentCipher", envvar=ENVVAR)
    assert isinstance(cipher, InsecureDevelopmentCipher)
    assert "insecure-development" in repr(cipher)


@pytest.mark.parametrize("import_path", ("", None))
def test_missing_cipher(import_path):
    with pytest.raises(CipherNotConfigured, match=ENVVAR):
        load_cipher(import_path, envvar=ENVVAR)


def test_invalid_cipher_import_paths():
    with pytest.raises(ValueError):
        load_cipher("timelock.crypto.mock", envvar=ENVVAR)

    with pytest.raises(ImportError):
        load_cipher("timelock.crypto.nothing:Cipher", envvar=ENVVAR)

    with pytest.raises(AttributeError):
        load_cipher("timelock.crypto.mock:NothingHere", envvar=ENVVAR)

    with pytest.raises(TypeError):
        load_cipher("timelock.network.local:LocalKeyReleaseService", envvar=ENVVAR)

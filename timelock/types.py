from typing import NewType

from eth_typing import HexStr

ReleaseTimestamp = NewType("ReleaseTimestamp", int)

EonKey = NewType("EonKey", HexStr)
Identity = NewType("Identity", HexStr)
Sigma = NewType("Sigma", HexStr)
Payload = NewType("Payload", HexStr)
Ciphertext = NewType("Ciphertext", HexStr)
DecryptionKey = NewType("DecryptionKey", HexStr)

Label = str

from eth_utils import encode_hex, keccak

# 2023-11-14T22:13:20Z; test clocks start here instead of the epoch
MOCK_NOW = 1_700_000_000

TEST_RELEASE_DELAY = 120
TEST_RELEASE_MARGIN = 5
TEST_PUBLICATION_LATENCY = 2

MOCK_REGISTRY_URL = "https://registry.timelock.test/api"

MOCK_EON_KEY = encode_hex(keccak(text="eon-key") * 3)
MOCK_IDENTITY = encode_hex(keccak(text="identity"))
MOCK_IDENTITY_PREFIX = encode_hex(keccak(text="identity-prefix"))

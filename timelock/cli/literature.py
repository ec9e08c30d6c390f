"""Text blobs that are implemented as part of timelock CLI emitter messages."""


# Common
DEVELOPMENT_MODE_WARNING = "WARNING: Running in development mode; commitments are NOT secret"
USING_REGISTRY = "Using key-release network at {registry}"

# Commit
REGISTERING_RELEASE = "Registering a release {delay} seconds from now..."
COMMITTED = "Committed {label}: {ciphertext}"
RELEASE_SCHEDULED = "Decryption key will be released at {release_time} ({slang}); decrypting from {ready_time}"

# Countdown
COUNTDOWN = "Decryption available in: {seconds} seconds"
DECRYPTING_MESSAGE = "Decrypting message..."
DECRYPTING_MOVES = "Decrypting moves..."

# Results
DECRYPTED_MESSAGE = "Decrypted message: {message}"
REVEALED_MOVES = "{player} played {move}"
FAILED_TO_DECRYPT_MESSAGE = "Failed to decrypt message. Please try again."
FAILED_TO_DECRYPT_MOVES = "Failed to decrypt moves. Please try again."

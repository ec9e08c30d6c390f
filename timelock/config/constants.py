import os
from pathlib import Path

from appdirs import AppDirs

import timelock

# Environment variables
TIMELOCK_ENVVAR_RELEASE_DELAY = "TIMELOCK_RELEASE_DELAY"
TIMELOCK_ENVVAR_RELEASE_MARGIN = "TIMELOCK_RELEASE_MARGIN"
TIMELOCK_ENVVAR_REGISTRY_URL = "TIMELOCK_REGISTRY_URL"
TIMELOCK_ENVVAR_CIPHER = "TIMELOCK_CIPHER"

# Base Filepaths
TIMELOCK_PACKAGE = Path(timelock.__file__).parent.resolve()
BASE_DIR = TIMELOCK_PACKAGE.parent.resolve()

# User Application Filepaths
APP_DIR = AppDirs(timelock.__title__, timelock.__author__)
USER_LOG_DIR = Path(os.getenv('TIMELOCK_USER_LOG_DIR', default=APP_DIR.user_log_dir))
DEFAULT_LOG_FILENAME = "timelock.log"
DEFAULT_JSON_LOG_FILENAME = "timelock.json"

# Release Timing (seconds)
DEFAULT_RELEASE_DELAY = 120
DEFAULT_RELEASE_MARGIN = 5
RELEASE_DELAY = int(os.getenv(TIMELOCK_ENVVAR_RELEASE_DELAY, default=DEFAULT_RELEASE_DELAY))
RELEASE_MARGIN = int(os.getenv(TIMELOCK_ENVVAR_RELEASE_MARGIN, default=DEFAULT_RELEASE_MARGIN))
TICK_INTERVAL = 1

# Key-Release Network
MAINNET = "mainnet"
CHIADO = "chiado"
REGISTRY_URLS = {
    MAINNET: "https://shutter-api.shutter.network/api",
    CHIADO: "https://shutter-api.chiado.staging.shutter.network/api",
}
DEFAULT_NETWORK = CHIADO
REGISTRY_URL = os.getenv(TIMELOCK_ENVVAR_REGISTRY_URL, default=REGISTRY_URLS[DEFAULT_NETWORK])
REGISTRY_REQUEST_TIMEOUT = 10
IDENTITY_PREFIX_LENGTH = 32

# Registrations and keys are only needed for one session
REGISTRY_CACHE_TTL = 60 * 60 * 24

# Identity-based cipher, as an import path ("package.module:ClassName")
CIPHER_IMPORT_PATH = os.getenv(TIMELOCK_ENVVAR_CIPHER)

# Blinding values
SIGMA_LENGTH = 32

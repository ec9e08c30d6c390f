import functools
from collections import namedtuple

import click

from timelock.config.constants import (
    CIPHER_IMPORT_PATH,
    DEFAULT_NETWORK,
    REGISTRY_URLS,
    RELEASE_DELAY,
    RELEASE_MARGIN,
    TIMELOCK_ENVVAR_CIPHER,
    TIMELOCK_ENVVAR_REGISTRY_URL,
)
from timelock.crypto.cipher import IdentityCipher, load_cipher
from timelock.crypto.mock import InsecureDevelopmentCipher
from timelock.exceptions import CipherNotConfigured
from timelock.cli.literature import DEVELOPMENT_MODE_WARNING, USING_REGISTRY
from timelock.network.local import LocalKeyReleaseService
from timelock.network.registry import RegistryClient, ShutterRegistryClient


def group_options(option_class, **options):
    argnames = sorted(list(options.keys()))
    decorators = list(options.values())

    if isinstance(option_class, str):
        option_name = option_class
        option_class = namedtuple(option_class, argnames)
    else:
        option_name = option_class.__option_name__

    def _decorator(func):

        @functools.wraps(func)
        def wrapper(**kwargs):
            to_group = {}
            for name in argnames:
                if name not in kwargs:
                    raise ValueError(
                        f"When trying to group CLI options into {option_name}, "
                        f"{name} was not found among arguments")
                to_group[name] = kwargs[name]
                del kwargs[name]

            kwargs[option_name] = option_class(**to_group)
            return func(**kwargs)

        for dec in decorators:
            wrapper = dec(wrapper)

        return wrapper

    return _decorator


option_dev = click.option(
    "--dev",
    help="Use the in-process key-release network and the INSECURE development cipher",
    is_flag=True,
)
option_delay = click.option(
    "--delay",
    help="Seconds from the first commitment until the decryption key is released",
    type=click.IntRange(min=1),
    default=RELEASE_DELAY,
    show_default=True,
)
option_margin = click.option(
    "--margin",
    help="Extra seconds to wait after the release time before fetching the key",
    type=click.IntRange(min=0),
    default=RELEASE_MARGIN,
    show_default=True,
)
option_network = click.option(
    "--network",
    help="Key-release network",
    type=click.Choice(sorted(REGISTRY_URLS)),
    default=DEFAULT_NETWORK,
    show_default=True,
)
option_registry_url = click.option(
    "--registry-url",
    help="Key-release API base URL; overrides --network",
    type=click.STRING,
    envvar=TIMELOCK_ENVVAR_REGISTRY_URL,
)
option_cipher = click.option(
    "--cipher",
    help="Identity-based cipher as an import path, e.g. 'package.module:ClassName'",
    type=click.STRING,
    envvar=TIMELOCK_ENVVAR_CIPHER,
)


class SessionOptions:
    __option_name__ = "session_options"

    def __init__(self, dev, delay, margin, network, registry_url, cipher):
        self.dev = dev
        self.delay = delay
        self.margin = margin
        self.network = network
        self.registry_url = registry_url
        self.cipher = cipher

    def create_backends(self, emitter) -> (RegistryClient, IdentityCipher):
        if self.dev:
            emitter.message(DEVELOPMENT_MODE_WARNING, color="yellow")
            return LocalKeyReleaseService(), InsecureDevelopmentCipher()

        try:
            cipher = load_cipher(self.cipher or CIPHER_IMPORT_PATH, envvar=TIMELOCK_ENVVAR_CIPHER)
        except CipherNotConfigured as e:
            raise click.BadOptionUsage(option_name="cipher", message=str(e))
        except (ImportError, AttributeError, TypeError, ValueError) as e:
            raise click.BadParameter(str(e), param_hint="--cipher")
        registry = ShutterRegistryClient(registry_url=self.registry_url or REGISTRY_URLS[self.network])
        emitter.message(USING_REGISTRY.format(registry=registry.registry_url), verbosity=2)
        return registry, cipher

    def controller_kwargs(self) -> dict:
        return dict(release_delay=self.delay, margin=self.margin)


group_session_options = group_options(
    SessionOptions,
    dev=option_dev,
    delay=option_delay,
    margin=option_margin,
    network=option_network,
    registry_url=option_registry_url,
    cipher=option_cipher,
)

"""Config wrappers.

A wrapper takes a Config and returns the Config a component should use, for
example a prefix view or a copy with extra defaults. Wrappers are applied in
order while wiring components together.
"""

from collections.abc import Callable, Iterable

from refconfig.config.config import Config
from refconfig.config.errors import ConfigError

ConfigWrapper = Callable[[Config], Config]


def apply_wrappers(config: Config, wrappers: Iterable[ConfigWrapper]) -> Config:
    """Apply wrappers in order and return the final Config.

    Raises:
        ConfigError: If a wrapper returns something other than a Config
    """
    for wrapper in wrappers:
        result = wrapper(config)
        if not isinstance(result, Config):
            name = getattr(wrapper, "__name__", repr(wrapper))
            raise ConfigError(f"config wrapper {name} returned {type(result).__name__}, not Config")
        config = result
    return config


def with_prefix(prefix: str) -> ConfigWrapper:
    """Wrapper that narrows a Config to a prefix view."""

    def _wrap(config: Config) -> Config:
        return config.of(prefix)

    _wrap.__name__ = f"with_prefix({prefix!r})"
    return _wrap


def with_defaults(defaults: dict[str, object]) -> ConfigWrapper:
    """Wrapper that registers defaults below the Config's prefix."""

    def _wrap(config: Config) -> Config:
        for key, value in defaults.items():
            config.set_default(key, value)
        return config

    _wrap.__name__ = "with_defaults"
    return _wrap

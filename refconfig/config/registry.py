"""Registry of named configuration sources.

Every registry holds two reserved entries: ``this`` (the primary store) and
``env`` (environment variables). Reserved names always win over caller
sources registered under the same name.
"""

from collections.abc import Iterator, Mapping
from typing import cast

from refconfig.config.errors import ReferenceSourceNotFoundError
from refconfig.config.store import ConfigSource, EnvStore, KeyValueStore
from refconfig.observability.logging import get_logger

logger = get_logger(__name__)

THIS_SOURCE = "this"
ENV_SOURCE = "env"
RESERVED_SOURCES = frozenset({THIS_SOURCE, ENV_SOURCE})


class SourceRegistry(Mapping[str, ConfigSource]):
    """Immutable mapping of source name to source."""

    def __init__(
        self,
        primary: KeyValueStore,
        references: Mapping[str, ConfigSource] | None = None,
        env: ConfigSource | None = None,
    ) -> None:
        sources: dict[str, ConfigSource] = {}

        for name, source in (references or {}).items():
            if name in RESERVED_SOURCES:
                logger.warning("reserved_source_shadowed", source=name)
                continue
            sources[name] = source

        sources[THIS_SOURCE] = primary
        sources[ENV_SOURCE] = env if env is not None else EnvStore()
        self._sources = sources

    def __getitem__(self, name: str) -> ConfigSource:
        return self._sources[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __repr__(self) -> str:
        return f"SourceRegistry(sources={sorted(self._sources)})"

    @property
    def primary(self) -> KeyValueStore:
        return cast(KeyValueStore, self._sources[THIS_SOURCE])

    def require(self, name: str, key: str | None = None) -> ConfigSource:
        """Return the named source or fail.

        Raises:
            ReferenceSourceNotFoundError: If no source has that name
        """
        source = self._sources.get(name)
        if source is None:
            raise ReferenceSourceNotFoundError(name, key)
        return source

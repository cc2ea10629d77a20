"""Reference resolution for the primary store.

Every key of the primary store whose value is a reference token is rewritten,
in place, with the terminal value found by following the chain of references
across the registry. A missing source, a missing key, or a cycle aborts the
whole pass with a ``FatalConfigError``.

When a chain ends at a mapping, references among its leaves are resolved
before the mapping is written, with the cycle check carried into each leaf.
"""

from typing import Any

from refconfig.config.errors import (
    CircularReferenceError,
    FatalConfigError,
    ReferenceKeyNotFoundError,
)
from refconfig.config.reference import ReferenceToken, parse_reference
from refconfig.config.registry import THIS_SOURCE, SourceRegistry
from refconfig.config.store import join_key
from refconfig.observability.logging import get_logger
from refconfig.observability.metrics import (
    REFERENCE_CHAIN_DEPTH,
    REFERENCES_RESOLVED,
    RESOLUTION_FAILURES,
)

logger = get_logger(__name__)


class ReferenceResolver:
    """Resolves reference tokens in a registry's primary store.

    Resolution is run once, eagerly, when a Config is built. Values written
    afterwards through ``set``/``set_default`` are stored as literals.
    """

    def __init__(self, registry: SourceRegistry) -> None:
        self._registry = registry

    def resolve_all(self) -> int:
        """Rewrite every reference in the primary store.

        Returns:
            Number of keys that were rewritten

        Raises:
            FatalConfigError: If any reference cannot be resolved
        """
        primary = self._registry.primary
        resolved = 0

        for key in primary.all_keys():
            token = parse_reference(primary.get(key))
            if token is None:
                continue

            try:
                value, depth = self.resolve(token, origin_key=key)
            except FatalConfigError as e:
                RESOLUTION_FAILURES.labels(reason=type(e).__name__).inc()
                logger.error("reference_resolution_failed", key=key, error=e.message)
                raise

            primary.set(key, value)
            resolved += 1
            REFERENCES_RESOLVED.labels(source=token.source_name).inc()
            REFERENCE_CHAIN_DEPTH.observe(depth)
            logger.debug(
                "reference_resolved",
                key=key,
                source=token.source_name,
                depth=depth,
            )

        return resolved

    def resolve(
        self,
        token: ReferenceToken,
        origin_key: str | None = None,
    ) -> tuple[Any, int]:
        """Follow a reference chain to its terminal value.

        A terminal mapping is returned with every reference among its leaves
        resolved too, so no token survives inside a copied subtree.

        Args:
            token: The first reference in the chain
            origin_key: Primary key holding the token, if any

        Returns:
            Tuple of (terminal value, longest number of hops followed)
        """
        visited: set[tuple[str, str]] = set()
        chain: list[str] = []
        if origin_key is not None:
            visited.add((THIS_SOURCE, origin_key.lower()))
            chain.append(f"{THIS_SOURCE}:{origin_key}")

        return self._follow(token, origin_key, visited, chain)

    def _follow(
        self,
        token: ReferenceToken,
        origin_key: str | None,
        visited: set[tuple[str, str]],
        chain: list[str],
    ) -> tuple[Any, int]:
        visited = set(visited)
        chain = list(chain)

        current = token
        depth = 0
        while True:
            depth += 1
            hop = (current.source_name, current.key_path.lower())
            chain.append(f"{current.source_name}:{current.key_path}")
            if hop in visited:
                raise CircularReferenceError(chain)
            visited.add(hop)

            source = self._registry.require(current.source_name, origin_key)
            value = source.get(current.key_path)
            if value is None:
                raise ReferenceKeyNotFoundError(current.source_name, current.key_path)

            next_token = parse_reference(value)
            if next_token is not None:
                current = next_token
                continue

            if isinstance(value, dict):
                value, nested = self._resolve_subtree(
                    value,
                    current.source_name,
                    current.key_path,
                    origin_key,
                    visited,
                    chain,
                )
                depth += nested
            return value, depth

    def _resolve_subtree(
        self,
        tree: dict[str, Any],
        source_name: str,
        key_path: str,
        origin_key: str | None,
        visited: set[tuple[str, str]],
        chain: list[str],
    ) -> tuple[dict[str, Any], int]:
        """Resolve every reference leaf of a mapping copied from a source."""
        resolved: dict[str, Any] = {}
        depth = 0

        for name, value in tree.items():
            leaf_path = join_key(key_path, name)
            leaf_origin = join_key(origin_key or "", name)
            hops = 0

            if isinstance(value, dict):
                value, hops = self._resolve_subtree(
                    value, source_name, leaf_path, leaf_origin, visited, chain
                )
            else:
                token = parse_reference(value)
                if token is not None:
                    value, hops = self._follow(
                        token,
                        leaf_origin,
                        visited | {(source_name, leaf_path.lower())},
                        [*chain, f"{source_name}:{leaf_path}"],
                    )

            resolved[name] = value
            depth = max(depth, hops)

        return resolved, depth


def resolve_all(registry: SourceRegistry) -> int:
    """Resolve every reference in the registry's primary store."""
    return ReferenceResolver(registry).resolve_all()

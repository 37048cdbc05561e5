"""Holds the live policy snapshot and swaps it atomically on reload."""

import asyncio
import logging
from pathlib import Path

from crudguard.application.services.policy_loader import load_policy
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.exceptions import ConfigurationException

logger = logging.getLogger(__name__)


class PolicyHolder:
    """Publishes one immutable PolicySnapshot at a time.

    Readers call current() once per request and keep that snapshot for the
    whole request. reload() builds and validates the replacement completely
    before publishing it with a single reference assignment; the snapshot
    itself is never mutated.
    """

    def __init__(self, snapshot: PolicySnapshot, path: str | Path | None = None) -> None:
        self._snapshot = snapshot
        self._path = path
        self._reload_lock = asyncio.Lock()

    @classmethod
    def from_path(cls, path: str | Path | None = None) -> "PolicyHolder":
        """Load the initial snapshot. Raises ConfigurationException when invalid."""
        return cls(load_policy(path), path)

    def current(self) -> PolicySnapshot:
        return self._snapshot

    async def reload(self) -> PolicySnapshot:
        """Re-read the policy document and publish it.

        On failure the previous snapshot stays live and ConfigurationException
        propagates.
        """
        async with self._reload_lock:
            try:
                replacement = await asyncio.to_thread(load_policy, self._path)
            except ConfigurationException:
                logger.exception("Policy reload failed; keeping previous policy")
                raise
            self._snapshot = replacement
            logger.info("Policy reloaded from %s", replacement.source)
            return replacement

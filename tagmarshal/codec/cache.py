"""Process-wide cache of type descriptors."""

import logging
import threading

from .descriptor import TypeDescriptor, build_descriptor
from .fields import DEFAULT_TAG_KEY

logger = logging.getLogger(__name__)


class DescriptorCache:
    """Type-keyed store of descriptors, populated lazily and never evicted.

    Reads go straight to a dict. A miss builds the descriptor without
    holding any lock and then publishes it with ``setdefault`` under a
    short lock, so racing first builds converge on one stored descriptor
    and readers only ever see complete ones.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[type, str], TypeDescriptor] = {}
        self._publish_lock = threading.Lock()
        self._builds = 0

    def get_or_build(self, record_type: type, tag_key: str = DEFAULT_TAG_KEY) -> TypeDescriptor:
        """Return the descriptor for a record type, building it on first use."""
        key = (record_type, tag_key)
        descriptor = self._entries.get(key)
        if descriptor is not None:
            return descriptor

        built = build_descriptor(record_type, tag_key)
        with self._publish_lock:
            self._builds += 1
            descriptor = self._entries.setdefault(key, built)

        if descriptor is built:
            logger.debug(
                "Cached descriptor for %s (%s): %d fields",
                record_type.__qualname__,
                tag_key,
                len(built.fields),
            )
        return descriptor

    @property
    def builds(self) -> int:
        """Number of descriptor builds performed, including lost races."""
        return self._builds

    def clear(self) -> None:
        """Drop all entries. Intended for tests."""
        with self._publish_lock:
            self._entries.clear()
            self._builds = 0

    def __contains__(self, record_type: object) -> bool:
        return any(cached_type is record_type for cached_type, _ in list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


default_cache = DescriptorCache()

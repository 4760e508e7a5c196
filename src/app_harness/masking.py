"""Masking of secret settings in logged configuration.

Masking only affects what is written to the log. The configuration handed to
the app is never modified.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

MASKED_VALUE: Final = "***masked***"


@dataclass(frozen=True, slots=True)
class MaskSet:
    """Set of setting ids whose values must not appear in logs.

    Attributes:
        ids: Setting ids to mask
    """

    ids: frozenset[str] = frozenset()

    @classmethod
    def from_string(cls, value: str) -> "MaskSet":
        """Parse a comma-separated list of setting ids.

        Items are stripped and empty items are dropped, so an empty string
        yields an empty set.

        Args:
            value: Comma-separated setting ids, e.g. ``"api_key,password"``

        Returns:
            New MaskSet instance
        """
        return cls.from_ids(value.split(","))

    @classmethod
    def from_ids(cls, ids: Iterable[Any]) -> "MaskSet":
        # numeric ids from TOML lists become strings
        stripped = (str(item).strip() for item in ids if item is not None)
        return cls(ids=frozenset(setting_id for setting_id in stripped if setting_id))

    def __contains__(self, setting_id: object) -> bool:
        return setting_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def apply(self, config: Mapping[str, Any]) -> dict[str, Any]:
        """Create a copy of ``config`` with masked values replaced.

        Args:
            config: Configuration to mask

        Returns:
            New dict in the original key order
        """
        return {
            setting_id: MASKED_VALUE if setting_id in self.ids else value
            for setting_id, value in config.items()
        }

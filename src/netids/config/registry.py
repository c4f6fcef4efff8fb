"""Identifier range configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

MIN_ID: Final[int] = 10
MAX_ID: Final[int] = 1_000_000


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Closed-open range ``[min_id, max_id)`` of assignable network ids."""

    min_id: int = MIN_ID
    max_id: int = MAX_ID

    def __post_init__(self) -> None:
        if self.min_id <= 0:
            raise ValueError("min_id must be positive")
        if self.max_id <= self.min_id:
            raise ValueError("max_id must be greater than min_id")

    def is_valid(self, value: int) -> bool:
        return self.min_id <= value < self.max_id


def get_registry_config() -> RegistryConfig:
    return RegistryConfig()

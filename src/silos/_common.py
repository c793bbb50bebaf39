# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Foundational model and enum classes shared across the Silos project."""

from __future__ import annotations

from collections.abc import Generator
from enum import Enum, unique
from typing import Any, Self, cast

from pydantic import BaseModel, ConfigDict


class BasedModel(BaseModel):
    """A baser `BaseModel` for all models in the Silos project."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        cache_strings="all",
        serialize_by_alias=True,
        str_strip_whitespace=True,
        use_attribute_docstrings=True,
        validate_by_alias=True,
        validate_by_name=True,
    )


FROZEN_VERBATIM_CONFIG = BasedModel.model_config | ConfigDict(
    frozen=True, str_strip_whitespace=False
)
"""Config for immutable models whose strings must be kept byte-for-byte (rule text, snippets)."""


@unique
class BaseEnum(Enum):
    """An enum class that provides common functionality for all enums in the Silos project.

    Members may declare alternate names through the `aliases` classmethod; `from_string`
    resolves a value, a member name, or any alias, case-insensitively.
    """

    @classmethod
    def aliases(cls) -> dict[str, Self]:
        """Map alternate names to members. Subclasses extend this."""
        return {}

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Convert a string to the corresponding enum member."""
        needle = str(value).strip().lower()
        if member := next(
            (
                member
                for member in cls
                if str(member.value).lower() == needle or member.name.lower() == needle
            ),
            None,
        ):
            return member
        if (member := cls.aliases().get(needle)) is not None:
            return member
        raise ValueError(f"{value} is not a valid {cls.__qualname__} member")

    @classmethod
    def is_member(cls, value: str) -> bool:
        """Check if a value, name, or alias belongs to the enum."""
        try:
            _ = cls.from_string(value)
        except ValueError:
            return False
        return True

    @classmethod
    def members(cls) -> Generator[Self]:
        """Return all members of the enum."""
        yield from cls

    @classmethod
    def values(cls) -> Generator[Any]:
        """Return all member values."""
        yield from (member.value for member in cls)

    def __str__(self) -> str:
        """Return the string representation of the enum member."""
        return cast(str, self.value) if isinstance(self.value, str) else self.name.lower()


__all__ = ("FROZEN_VERBATIM_CONFIG", "BaseEnum", "BasedModel")

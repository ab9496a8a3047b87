# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for crosscheck."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class CrosscheckBaseModel(BaseModel):
    """Base model with shared config for crosscheck schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

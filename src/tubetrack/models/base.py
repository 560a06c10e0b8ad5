"""Shared base model definitions for Tubetrack domain objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TubetrackBaseModel(BaseModel):
    """Base model configured for Tubetrack-wide defaults."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


__all__ = ["TubetrackBaseModel"]

"""Stored window state for the fixed-window limiter.

The JSON shape is ``{"remaining": <int>, "reset": <epoch ms>}`` so entries
written by other clients sharing the store stay readable.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WindowState(BaseModel):
    """Per-key window bookkeeping.

    Attributes:
        remaining: Admits left in the current window. Goes to -1 once the key
            is over its limit and stays there until the window expires.
        reset_at: Epoch milliseconds at which the window expires.
    """

    remaining: int = Field(..., description="Requests left in the current window")
    reset_at: int = Field(
        ...,
        alias="reset",
        description="Window expiry as epoch milliseconds",
    )

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

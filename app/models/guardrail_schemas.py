"""
Pydantic models for output moderation.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.realtime_schemas import ItemStatus


class ModerationCategory(str, Enum):
    OFFENSIVE = "OFFENSIVE"
    OFF_BRAND = "OFF_BRAND"
    VIOLENCE = "VIOLENCE"
    NONE = "NONE"


class GuardrailOutput(BaseModel):
    """Structured answer returned by the moderation classifier."""
    model_config = ConfigDict(populate_by_name=True)

    moderation_rationale: str = Field(..., alias="moderationRationale")
    moderation_category: ModerationCategory = Field(..., alias="moderationCategory")
    test_text: Optional[str] = Field(default=None, alias="testText")


class GuardrailResult(BaseModel):
    """Moderation annotation attached to a transcript entry."""
    status: ItemStatus = ItemStatus.IN_PROGRESS
    category: Optional[ModerationCategory] = None
    rationale: Optional[str] = None
    test_text: Optional[str] = None


class GuardrailOutcome(BaseModel):
    """Result of running one output guardrail.

    errored distinguishes a classifier failure from a genuine NONE verdict;
    both leave tripwire_triggered False when failing open.
    """
    tripwire_triggered: bool
    output_info: Dict[str, Any] = Field(default_factory=dict)
    errored: bool = False

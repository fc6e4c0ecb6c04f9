"""
Project spec and template catalog schemas.

Used when a session is started: a ProjectSpec describes what the learner
wants to build (input to AI plan forging); TemplateInfo describes one entry
of the bundled template catalog.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    QUICK = "quick"    # 3-10 tasks
    NORMAL = "normal"  # 10-20 tasks
    DEEP = "deep"      # 20-35 tasks


class Tier(str, Enum):
    QUICK = "Quick"
    NORMAL = "Normal"
    ADVANCED = "Advanced"


class ProjectSpec(BaseModel):
    build_type: str = "service"
    difficulty: Difficulty = Difficulty.QUICK
    theme: Optional[str] = None
    description: str = ""
    language: str = "go"
    template: Optional[str] = None  # explicit template choice wins over heuristics


class TemplateInfo(BaseModel):
    name: str
    title: str
    description: str = ""
    tasks: int = Field(..., ge=0)
    tier: Tier = Tier.QUICK

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class CheckResult(BaseModel):
    issues: List[str]
    score: int = Field(ge=0, le=100)
    details: Dict[str, Any]

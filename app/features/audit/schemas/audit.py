from typing import Literal

from pydantic import BaseModel


class AuditRequest(BaseModel):
    url: str
    platform: Literal["web", "mobile"] = "web"
    lang: str = "ru"

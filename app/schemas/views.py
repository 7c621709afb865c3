from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ResolvedViewResponse(BaseModel):
    path: str
    view: str
    params: Dict[str, Any]
    requires_auth: bool
    required_role: Optional[str] = None
    fallback: bool
    not_found: bool = False

"""
Request context for the maintenance API

Authentication and permission checks happen upstream; the gateway forwards
the caller's organization and user ids as headers.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header


@dataclass(frozen=True)
class RequestContext:
    organization_id: str
    user_id: Optional[str] = None

    @property
    def actor(self) -> str:
        return self.user_id or "system"


def get_request_context(
    x_organization_id: str = Header(..., min_length=1),
    x_user_id: Optional[str] = Header(None),
) -> RequestContext:
    return RequestContext(organization_id=x_organization_id, user_id=x_user_id)

from dataclasses import dataclass

from fastapi import Header, HTTPException


@dataclass(frozen=True)
class RequestContext:
    company_id: str
    user_id: str


async def get_request_context(
    x_company_id: str | None = Header(None),
    x_user_id: str | None = Header(None),
) -> RequestContext:
    # Session resolution happens upstream; the gateway forwards the resolved
    # tenant and acting user as headers.
    if not x_company_id or not x_user_id:
        raise HTTPException(status_code=401, detail="Missing company or user context")
    return RequestContext(company_id=x_company_id, user_id=x_user_id)

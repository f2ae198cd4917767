"""Request dependencies shared by the v1 routers."""

from typing import Optional

from fastapi import Header, HTTPException


async def get_api_key(x_api_key: str = Header(default="test", alias="X-API-Key")) -> str:
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API Key")
    return x_api_key


async def get_org_id(x_org_id: Optional[str] = Header(default=None, alias="X-Org-Id")) -> Optional[str]:
    """Organization whose dialect and shortcodes apply; absent means the global default."""
    if x_org_id is None:
        return None
    org_id = x_org_id.strip()
    return org_id or None

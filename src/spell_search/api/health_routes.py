from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import Settings
from ..search.client import TypesenseClient
from .dependencies import get_search_client, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    client: Annotated[TypesenseClient, Depends(get_search_client)],
    cfg: Annotated[Settings, Depends(get_settings)],
):
    backend_ok = await client.health()
    return {
        "status": "ok",
        "backend": "ok" if backend_ok else "unavailable",
        "host": cfg.typesense_host,
    }

from typing import Annotated, AsyncIterator

from fastapi import Depends

from ..config import Settings, settings
from ..search.client import TypesenseClient


def get_settings() -> Settings:
    return settings


async def get_search_client(
    cfg: Annotated[Settings, Depends(get_settings)],
) -> AsyncIterator[TypesenseClient]:
    """
    Provide a Typesense client scoped to the current request.

    Built from the same settings the routes report in diagnostics. Tests
    override this dependency with a fake backend.
    """
    client = TypesenseClient.from_settings(cfg)
    try:
        yield client
    finally:
        await client.aclose()

"""
JSON blob store endpoint.

Backs ``HttpBlobStore``: each collection is a ``<type>.json`` file in
``DATA_DIR`` holding ``{"<type>": [...]}``. Records are stored as sent.

The endpoint is unauthenticated. Any client that reaches it can replace a
collection, and with ``BLOB_STORE=file`` the same files seed the store at
startup. Expose it only on a trusted network.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core import config
from app.core.entities import EntityKind
from app.core.errors import PersistenceUnavailable
from app.core.storage.blob import JsonFileBlobStore
from app.features.save_data.schemas import LoadDataResponse, SaveDataRequest, SaveDataResponse
from app.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["save-data"])


def get_file_store() -> JsonFileBlobStore:
    return JsonFileBlobStore(config.DATA_DIR)


@router.post("", response_model=SaveDataResponse)
async def save_data(
    body: SaveDataRequest,
    file_store: Annotated[JsonFileBlobStore, Depends(get_file_store)],
):
    """Replace one collection file."""
    try:
        await file_store.write(body.type, body.data)
    except PersistenceUnavailable as e:
        log.error(f"Error saving data: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to save data"},
        )
    return SaveDataResponse(
        success=True,
        message=f"{body.type.value} data saved successfully",
        count=len(body.data),
    )


@router.get("", response_model=LoadDataResponse)
async def load_data(
    file_store: Annotated[JsonFileBlobStore, Depends(get_file_store)],
    kind: Annotated[EntityKind | None, Query(alias="type")] = None,
):
    """Read one collection file."""
    if kind is None:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Type parameter is required"},
        )
    try:
        records = await file_store.read(kind)
    except PersistenceUnavailable as e:
        log.error(f"Error loading data: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to load data"},
        )
    return LoadDataResponse(success=True, data=records, count=len(records))

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..domain.content_types import ExtensionTable
from ..errors import AssetNotFoundError, UnsafePathError
from ..logging_conf import get_logger
from ..service import assets
from ..service.assets import Asset

router = APIRouter()
logger = get_logger("api")

# Rejected and missing paths share one response so clients cannot tell them apart.
_NOT_FOUND_DETAIL = {"error_code": "not_found", "error_message": "Not Found"}


def get_asset_root(request: Request) -> Path:
    return request.app.state.settings.asset_root


def get_content_types(request: Request) -> ExtensionTable:
    return request.app.state.content_types


def _asset_response(request: Request, asset: Asset) -> Response:
    # Picked up by the request logging middleware.
    request.state.asset = asset
    # Passing Content-Type as a header keeps Starlette from appending a charset.
    return Response(content=asset.body, headers={"Content-Type": asset.content_type})


def _not_found(request: Request, raw_path: str, exc: Exception) -> HTTPException:
    request.state.asset_rejection = getattr(exc, "code", "")
    logger.info(
        "asset.not_found",
        extra={"event": "asset_not_found", "path": raw_path, "reason": request.state.asset_rejection},
    )
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND_DETAIL)


# Handlers are plain `def` so FastAPI runs the blocking file reads on its threadpool.
@router.get("/", summary="Serve the root index.html", response_class=Response)
def get_index(
    request: Request,
    asset_root: Path = Depends(get_asset_root),
    content_types: ExtensionTable = Depends(get_content_types),
) -> Response:
    """Return `index.html` from the asset root, or 404 if it is missing."""
    try:
        asset = assets.serve_index(asset_root=asset_root, content_types=content_types)
    except AssetNotFoundError as e:
        raise _not_found(request, assets.INDEX_FILE, e)
    return _asset_response(request, asset)


@router.get("/{asset_path:path}", summary="Serve a static asset", response_class=Response)
def get_asset(
    request: Request,
    asset_path: str,
    asset_root: Path = Depends(get_asset_root),
    content_types: ExtensionTable = Depends(get_content_types),
) -> Response:
    """Return the requested file under the asset root, or 404."""
    try:
        asset = assets.serve_path(asset_path, asset_root=asset_root, content_types=content_types)
    except (UnsafePathError, AssetNotFoundError) as e:
        raise _not_found(request, asset_path, e)
    return _asset_response(request, asset)

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field

from tournament_registration.api.auth.dependencies import Credential, require_role
from tournament_registration.api.providers import get_image_proxy
from tournament_registration.api.schemas import ApiModel, MessageResponse
from tournament_registration.fig.image_proxy import FigImageProxy
from tournament_registration.models.enums import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


class ImageInfo(ApiModel):
    fig_id: str
    image_url: str
    proxy_url: str
    cached: bool
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    last_modified: Optional[str] = None


class PreloadRequest(ApiModel):
    fig_ids: List[str] = Field(..., min_length=1, max_length=500)


class PreloadResponse(ApiModel):
    message: str
    total: int
    success: int
    failed: int


class CacheStats(ApiModel):
    cached_images: int
    fig_ids: List[str]
    ttl_seconds: int
    max_image_size: int
    total_requests: int
    errors: int


class CacheClearResponse(MessageResponse):
    removed: int


@router.get("/fig/{fig_id}")
async def get_fig_image(fig_id: str, proxy: FigImageProxy = Depends(get_image_proxy)):
    """Serve a FIG athlete picture through the cache"""
    image = await proxy.get_image(fig_id)
    return Response(
        content=image.data,
        media_type=image.content_type,
        headers={
            "Content-Length": str(image.content_length),
            "Last-Modified": image.last_modified,
            "ETag": image.etag,
            "Cache-Control": f"public, max-age={proxy.cache_ttl}, immutable",
            "X-Content-Source": "FIG-Proxy-Cache",
        },
    )


@router.get("/fig/{fig_id}/info", response_model=ImageInfo)
async def get_fig_image_info(fig_id: str, proxy: FigImageProxy = Depends(get_image_proxy)):
    return await proxy.info(fig_id)


@router.post("/preload", response_model=PreloadResponse)
async def preload_images(
    payload: PreloadRequest,
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    proxy: FigImageProxy = Depends(get_image_proxy),
):
    """Warm the image cache for a list of FIG ids"""
    logger.info(f"{user.username} preloading {len(payload.fig_ids)} FIG images")
    result = await proxy.preload(payload.fig_ids)
    return PreloadResponse(
        message="Preload completed",
        total=len(payload.fig_ids),
        success=result["success"],
        failed=result["failed"],
    )


@router.get("/cache/stats", response_model=CacheStats)
async def get_cache_stats(
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    proxy: FigImageProxy = Depends(get_image_proxy),
):
    return await proxy.cache_stats()


@router.delete("/cache", response_model=CacheClearResponse, status_code=status.HTTP_200_OK)
async def clear_image_cache(
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    proxy: FigImageProxy = Depends(get_image_proxy),
):
    removed = await proxy.clear_cache()
    logger.info(f"{user.username} cleared the image cache ({removed} entries)")
    return CacheClearResponse(message="Image cache cleared", removed=removed)


@router.delete("/cache/{fig_id}", response_model=CacheClearResponse)
async def clear_cached_image(
    fig_id: str,
    user: Credential = Depends(require_role(UserRole.ADMIN)),
    proxy: FigImageProxy = Depends(get_image_proxy),
):
    removed = await proxy.clear_cache(fig_id)
    return CacheClearResponse(message=f"Cache cleared for FIG ID: {fig_id}", removed=removed)

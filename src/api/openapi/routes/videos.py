"""Video catalog endpoints.

Handlers translate HTTP input into service calls and render the
service result with the response envelopes. Caller identity is taken
from the identity header and passed explicitly to every service call.
"""

import asyncio
import shutil
import tempfile
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Any, BinaryIO

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    CallerIdDep,
    LifecycleServiceDep,
    QueryServiceDep,
    SettingsDep,
)
from src.application.dtos import (
    ListVideosQuery,
    PublishVideoRequest,
    UpdateVideoRequest,
    render,
)
from src.commons.telemetry import get_logger
from src.domain.result import Failure, Success
from src.infrastructure.media import LocalMedia

logger = get_logger(__name__)

router = APIRouter()

_CHUNK_SIZE = 1024 * 1024


def _respond(result: Success[Any] | Failure) -> JSONResponse:
    status_code, body = render(result)
    return JSONResponse(status_code=status_code, content=body)


def _require_caller(caller_id: str | None) -> str:
    if caller_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized request",
        )
    return caller_id


def _copy_to_disk(source: BinaryIO, path: Path) -> None:
    with path.open("wb") as fh:
        shutil.copyfileobj(source, fh, _CHUNK_SIZE)


@asynccontextmanager
async def spooled_uploads(
    temp_root: str | None,
    **uploads: UploadFile | None,
) -> AsyncIterator[dict[str, LocalMedia | None]]:
    """Write multipart uploads to a private temp dir for the request.

    Yields a LocalMedia per supplied upload (None for missing or empty
    parts). The directory and its files are removed on exit.
    """
    work_dir = Path(tempfile.mkdtemp(prefix="upload-", dir=temp_root))
    loop = asyncio.get_running_loop()
    try:
        spooled: dict[str, LocalMedia | None] = {}
        for name, upload in uploads.items():
            if upload is None or not upload.filename:
                spooled[name] = None
                continue
            suffix = Path(upload.filename).suffix.lower()
            path = work_dir / f"{uuid.uuid4().hex}{suffix}"
            await upload.seek(0)
            await loop.run_in_executor(None, _copy_to_disk, upload.file, path)
            spooled[name] = LocalMedia(
                path=path,
                content_type=upload.content_type,
                original_filename=upload.filename,
            )
        yield spooled
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)
        for upload in uploads.values():
            if upload is not None:
                await upload.close()


@router.get(
    "/videos",
    summary="List videos",
    description="List published videos with text search, sorting and pagination.",
)
async def list_videos(
    service: QueryServiceDep,
    query: Annotated[str, Query(description="Full-text search terms")] = "",
    sort_by: Annotated[
        str | None,
        Query(alias="sortBy", description="Field to sort by"),
    ] = None,
    sort_type: Annotated[
        str | None,
        Query(alias="sortType", description="asc or desc"),
    ] = None,
    user_id: Annotated[
        str | None,
        Query(alias="userId", description="Only videos of this owner"),
    ] = None,
    page: Annotated[str | None, Query(description="Page number")] = None,
    limit: Annotated[str | None, Query(description="Items per page")] = None,
) -> JSONResponse:
    """List published videos."""
    params = ListVideosQuery(
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        user_id=user_id,
        page=page,
        limit=limit,
    )
    return _respond(await service.list_videos(params))


@router.post(
    "/videos",
    status_code=status.HTTP_201_CREATED,
    summary="Publish video",
    description="Upload a video file and its thumbnail and record the video.",
)
async def publish_video(
    service: LifecycleServiceDep,
    settings: SettingsDep,
    caller_id: CallerIdDep,
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    is_published: Annotated[bool, Form(alias="isPublished")] = True,
    video_file: Annotated[UploadFile | None, File(alias="videoFile")] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> JSONResponse:
    """Publish a new video owned by the caller."""
    owner_id = _require_caller(caller_id)
    async with spooled_uploads(
        settings.media.upload_temp_dir,
        video=video_file,
        thumbnail=thumbnail,
    ) as media:
        request = PublishVideoRequest(
            title=title,
            description=description,
            is_published=is_published,
            video=media["video"],
            thumbnail=media["thumbnail"],
        )
        return _respond(await service.publish(request, owner_id))


@router.get(
    "/videos/{video_id}",
    summary="Get video",
    description="Get one video with owner profile, like and subscription data.",
)
async def get_video(
    video_id: str,
    service: QueryServiceDep,
    caller_id: CallerIdDep,
) -> JSONResponse:
    """Get a single enriched video as seen by the caller."""
    return _respond(await service.get_video_detail(video_id, viewer_id=caller_id))


@router.patch(
    "/videos/toggle/publish/{video_id}",
    summary="Toggle publish status",
    description="Flip whether the video is published.",
)
async def toggle_publish_status(
    video_id: str,
    service: LifecycleServiceDep,
    caller_id: CallerIdDep,
) -> JSONResponse:
    """Flip the published flag."""
    caller = _require_caller(caller_id)
    return _respond(await service.toggle_publish(video_id, caller_id=caller))


@router.patch(
    "/videos/{video_id}/views",
    summary="Count a view",
    description="Increment the view counter of a video.",
)
async def increment_views(
    video_id: str,
    service: LifecycleServiceDep,
) -> JSONResponse:
    """Record one view."""
    return _respond(await service.increment_views(video_id))


@router.patch(
    "/videos/{video_id}",
    summary="Update video",
    description="Edit the title, description and/or thumbnail of a video.",
)
async def update_video(
    video_id: str,
    service: LifecycleServiceDep,
    settings: SettingsDep,
    caller_id: CallerIdDep,
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> JSONResponse:
    """Update a video."""
    caller = _require_caller(caller_id)
    async with spooled_uploads(
        settings.media.upload_temp_dir,
        thumbnail=thumbnail,
    ) as media:
        request = UpdateVideoRequest(
            title=title,
            description=description,
            thumbnail=media["thumbnail"],
        )
        return _respond(await service.update(video_id, request, caller_id=caller))


@router.delete(
    "/videos/{video_id}",
    summary="Delete video",
    description="Delete a video and its stored media.",
)
async def delete_video(
    video_id: str,
    service: LifecycleServiceDep,
    caller_id: CallerIdDep,
) -> JSONResponse:
    """Delete a video."""
    caller = _require_caller(caller_id)
    return _respond(await service.delete(video_id, caller_id=caller))

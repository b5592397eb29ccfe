"""Video API routes: upload, YouTube links, listing, CRUD and byte-range streaming."""

from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from fansite.application.services.streaming import iter_file
from fansite.application.services.video_service import VideoService
from fansite.config import get_settings
from fansite.core.exceptions import ValidationError
from fansite.domain.models.user import User
from fansite.domain.schemas.common import MessageResponse
from fansite.domain.schemas.video import VideoPage, VideoQuery, VideoRead, VideoResponse, VideoUpdate, YoutubeLinkCreate
from fansite.interfaces.api.deps import get_current_user, get_optional_user
from fansite.interfaces.deps import get_video_service

settings = get_settings()
router = APIRouter(prefix="/api/videos", tags=["Videos"])


@router.post("/upload", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def upload_video(
    video: Optional[UploadFile] = File(None),
    nombre: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    created = service.upload_file(
        owner_id=user.id,
        stream=video.file if video else None,
        filename=video.filename if video else None,
        content_type=video.content_type if video else None,
        declared_size=video.size if video else None,
        name=nombre,
        description=descripcion,
    )
    return VideoResponse(message="Video uploaded successfully", video=VideoRead.model_validate(created))


@router.post("/youtube", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def add_youtube_video(
    body: YoutubeLinkCreate,
    user: User = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    created = service.add_youtube_link(user.id, body.url, body.name, body.description)
    return VideoResponse(message="YouTube video added successfully", video=VideoRead.model_validate(created))


@router.get("", response_model=VideoPage)
def list_videos(
    page: int = Query(1),
    limit: int = Query(10),
    search: Optional[str] = Query(None),
    tipo: Optional[str] = Query(None),
    uploaded_by: Optional[str] = Query(None, alias="uploadedBy"),
    sort_by: str = Query("uploadedAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    user: Optional[User] = Depends(get_optional_user),
    service: VideoService = Depends(get_video_service),
):
    try:
        query = VideoQuery(
            search=search,
            kind=tipo or None,
            owner_id=uploaded_by,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(
            details=[
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ]
        )

    videos, pagination = service.list_videos(query, user)
    return VideoPage(videos=[VideoRead.model_validate(v) for v in videos], pagination=pagination)


# Declared before /{video_id} so "stream" is never taken for an id
@router.get("/stream/{user_id}/{filename}")
def stream_video(
    user_id: str,
    filename: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    service: VideoService = Depends(get_video_service),
):
    result = service.stream_file(user_id, filename, range_header)
    return StreamingResponse(
        iter_file(result, settings.STREAM_CHUNK_SIZE),
        status_code=result.status_code,
        headers=result.headers(),
        media_type=result.media_type,
    )


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: str,
    user: Optional[User] = Depends(get_optional_user),
    service: VideoService = Depends(get_video_service),
):
    return VideoResponse(video=VideoRead.model_validate(service.get_by_id(video_id, user)))


@router.patch("/{video_id}", response_model=VideoResponse)
def update_video(
    video_id: str,
    body: VideoUpdate,
    user: User = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    updated = service.update_video(video_id, user, body.model_dump(exclude_unset=True))
    return VideoResponse(message="Video updated successfully", video=VideoRead.model_validate(updated))


@router.delete("/{video_id}", response_model=MessageResponse)
def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    service.delete_video(video_id, user)
    return MessageResponse(message="Video deleted successfully")

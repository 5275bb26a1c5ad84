from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from shortlink_app.dependencies import get_current_user, get_link_service
from shortlink_app.exceptions import (
    LinkNotFoundError,
    LinkPermissionError,
    ShortCodeValidationError,
)
from shortlink_app.models.user import User
from shortlink_app.schemas.link import LinkCreate, LinkListItem, LinkResponse, LinkStats
from shortlink_app.services.link_service import LinkService

router = APIRouter(prefix="/urls", tags=["urls"])


def _ownership_error(error: Exception) -> HTTPException:
    if isinstance(error, LinkPermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your short URL")
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Short URL not found")


@router.get("/", response_model=List[LinkListItem])
def list_urls(
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service)
):
    """List the caller's short URLs, newest first"""
    return link_service.list_links(user)


@router.post("/", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
def create_short_url(
    link_data: LinkCreate,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service)
):
    """Create a new short URL"""
    try:
        return link_service.create_link(user, link_data)
    except ShortCodeValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )


@router.get("/{link_id}/stats", response_model=LinkStats)
def get_url_stats(
    link_id: int,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service)
):
    """Click analytics for one of the caller's short URLs"""
    try:
        return link_service.get_link_stats(user, link_id)
    except (LinkNotFoundError, LinkPermissionError) as e:
        raise _ownership_error(e)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_url(
    link_id: int,
    user: User = Depends(get_current_user),
    link_service: LinkService = Depends(get_link_service)
):
    """Delete a short URL together with its click history"""
    try:
        link_service.delete_link(user, link_id)
    except (LinkNotFoundError, LinkPermissionError) as e:
        raise _ownership_error(e)

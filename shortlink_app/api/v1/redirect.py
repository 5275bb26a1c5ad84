from fastapi import APIRouter, Depends, HTTPException, Response, status, Request
from shortlink_app.schemas.click import VisitorInfo
from shortlink_app.services.click_recorder import get_client_ip
from shortlink_app.services.link_service import LinkService
from shortlink_app.dependencies import get_link_service

router = APIRouter(tags=["redirect"])


@router.get("/{short_code}")
def redirect_to_original_url(
    short_code: str,
    request: Request,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Redirect to the original URL.

    Flow:
    1. Look up an active, unexpired link by code
    2. Record the click (failures are logged, never surfaced)
    3. Bump the link's click counter
    4. 301 to the stored URL
    """
    visitor = VisitorInfo(
        ip_address=get_client_ip(
            request.headers,
            request.client.host if request.client else None
        ),
        user_agent=request.headers.get("user-agent"),
        referer=request.headers.get("referer"),
    )

    original_url = link_service.resolve_for_redirect(short_code, visitor)

    if not original_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found or has expired"
        )

    # Location is the stored URL verbatim, never re-quoted
    return Response(
        status_code=status.HTTP_301_MOVED_PERMANENTLY,
        headers={"location": original_url}
    )

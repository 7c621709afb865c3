from fastapi import APIRouter, Query

from app.core.view_routes import resolve_view
from app.schemas.views import ResolvedViewResponse

router = APIRouter(prefix="/views")


@router.get("/resolve", response_model=ResolvedViewResponse)
def resolve(path: str = Query("/")):
    """
    Map a client path (e.g. `/issues/<id>` or `#/report`) to the view that
    renders it. Unknown paths resolve to the landing view.
    """
    v = resolve_view(path)
    return ResolvedViewResponse(
        path=v.path,
        view=v.view,
        params={k: str(val) for k, val in v.params.items()},
        requires_auth=v.requires_auth,
        required_role=v.required_role.value if v.required_role else None,
        fallback=v.fallback,
        not_found=v.not_found,
    )

"""Build agent endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from appaloosa_publisher.api.deps import AgentListerDep
from appaloosa_publisher.core.artifacts import resolve_agent_root
from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ArtifactSearchRequest(BaseModel):
    """Remote artifact search issued by a controller."""

    root: str = Field(..., min_length=1)
    pattern: str


class ArtifactSearchResponse(BaseModel):
    """Relative paths of the files matching the pattern."""

    files: list[str]


@router.post(
    "/artifacts/search",
    response_model=ArtifactSearchResponse,
    summary="Search artifacts on this agent",
)
def search_artifacts(
    request: ArtifactSearchRequest,
    lister: AgentListerDep,
) -> ArtifactSearchResponse:
    """List files under ``root`` on this host matching an ANT pattern.

    ``root`` must lie inside the configured agent artifacts root; relative
    roots are taken from there.
    """
    root = resolve_agent_root(request.root)
    files = lister.list_files(root, request.pattern)
    logger.info(
        "agent.artifacts_searched",
        root=str(root),
        pattern=request.pattern,
        matches=len(files),
    )
    return ArtifactSearchResponse(files=files)

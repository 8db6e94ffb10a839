"""Agent generation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from agent_studio.api.dependencies import get_generator, to_http_exception
from agent_studio.api.schemas import GenerateAgentRequest
from agent_studio.errors import StudioError
from agent_studio.generator import AgentGenerator, AgentSpec

router = APIRouter()


@router.post(
    "/generate",
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}, "description": "Generated project archive"}},
)
def generate_agent(
    payload: GenerateAgentRequest,
    generator: AgentGenerator = Depends(get_generator),
) -> Response:
    """Resolve the agent spec against the registries and return the project as a zip."""

    spec = AgentSpec(**payload.model_dump())
    try:
        filename, archive = generator.generate_archive(spec)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

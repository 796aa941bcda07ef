"""Status application for a node's membership agent."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..__version__ import __version__
from ..core.exceptions import DiscoveryError, create_error_response
from ..features.membership.services.membership_agent import MembershipAgent
from .routers.membership_router import membership_router


def create_status_app(agent: MembershipAgent) -> FastAPI:
    """Create the FastAPI app exposing ``agent`` under ``/membership``."""
    app = FastAPI(
        title="Keycloak Discovery",
        description="Cluster membership status",
        version=__version__,
    )
    app.state.membership_agent = agent

    @app.exception_handler(DiscoveryError)
    async def discovery_error_handler(request: Request, exc: DiscoveryError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response(exc),
        )

    app.include_router(membership_router)
    return app

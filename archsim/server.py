"""FastAPI backend exposing the simulation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from archsim.core.challenge import SAMPLE_CHALLENGES, challenge_by_id
from archsim.core.faults import CHAOS_EVENTS
from archsim.core.topology import validate_design
from archsim.feedback.service import AnthropicFeedbackProvider
from archsim.schema import (
    DesignModel,
    SimulateRequest,
    UnknownFault,
    challenge_to_dict,
    component_type_to_dict,
    fault_to_dict,
    with_traffic,
)
from archsim.simulator import Simulator

if TYPE_CHECKING:
    from archsim.config import EngineConfig


class ValidationReport(BaseModel):
    ok: bool
    warnings: list[str]


def create_app(simulator: Simulator | None = None) -> FastAPI:
    app = FastAPI(title="archsim API")
    if simulator is None:
        simulator = Simulator.build()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/catalog")
    async def get_catalog() -> list[dict[str, Any]]:
        return [component_type_to_dict(t) for t in simulator.catalog.values()]

    @app.get("/api/challenges")
    async def get_challenges() -> list[dict[str, Any]]:
        return [challenge_to_dict(c) for c in SAMPLE_CHALLENGES]

    @app.get("/api/faults")
    async def get_faults() -> list[dict[str, Any]]:
        return [fault_to_dict(e) for e in CHAOS_EVENTS]

    @app.post("/api/validate")
    async def validate(design: DesignModel) -> ValidationReport:
        try:
            engine_design = design.to_design()
        except UnknownFault as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        ok, warnings = validate_design(simulator.catalog, engine_design)
        return ValidationReport(ok=ok, warnings=warnings)

    @app.post("/api/simulate")
    async def simulate(request: SimulateRequest) -> dict[str, Any]:
        challenge = challenge_by_id(request.challenge_id)
        if challenge is None:
            raise HTTPException(
                status_code=404, detail=f"unknown challenge: {request.challenge_id}"
            )
        try:
            design = request.design.to_design()
        except UnknownFault as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

        traffic = request.traffic.to_traffic() if request.traffic is not None else None
        result = await simulator.simulate(with_traffic(challenge, traffic), design)
        return result.to_dict()

    @app.get("/api/feedback/usage")
    async def feedback_usage() -> dict[str, int]:
        provider = simulator.feedback_provider
        if isinstance(provider, AnthropicFeedbackProvider):
            return provider.usage_stats()
        return {"requests_used": 0, "requests_remaining": 0, "cache_size": 0}

    return app


def run_server(
    host: str = "0.0.0.0", port: int = 8000, config: EngineConfig | None = None
) -> None:
    import uvicorn

    app = create_app(Simulator.build(config))
    print(f"Starting archsim server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)

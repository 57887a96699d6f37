"""Analysis API — dependency graphs, cycles and coupling over posted facts."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter
from pydantic import BaseModel

from wiregraph.models import AnalysisConfig, GraphLevel
from wiregraph.analysis.coupling import rank_by_coupling
from wiregraph.analysis.registry import DependencyAnalysisResult, DependencyOptions, analyze
from wiregraph.loader import FactDocument

router = APIRouter(prefix="/api/analysis")


class AnalysisRequest(FactDocument):
    level: GraphLevel = GraphLevel.NAMESPACE
    detect_circular: bool = True
    calculate_metrics: bool = True
    generate_diagrams: bool = True
    excluded_prefixes: list[str] | None = None


class CyclesResponse(BaseModel):
    cycles: list[list[str]]
    component_cycles: list[list[str]]


def _run(req: AnalysisRequest, **overrides) -> DependencyAnalysisResult:
    config = AnalysisConfig()
    if req.excluded_prefixes is not None:
        config.excluded_prefixes = list(req.excluded_prefixes)

    options = DependencyOptions(
        detect_circular=req.detect_circular,
        calculate_metrics=req.calculate_metrics,
        generate_diagrams=req.generate_diagrams,
        level=req.level,
    )
    for key, value in overrides.items():
        setattr(options, key, value)

    source_units, components = req.to_facts()
    return analyze(source_units, components, options, config)


@router.post("/dependencies")
async def dependencies(req: AnalysisRequest):
    result = await asyncio.to_thread(_run, req)
    return result.to_dict()


@router.post("/cycles", response_model=CyclesResponse)
async def cycles(req: AnalysisRequest):
    result = await asyncio.to_thread(
        _run, req, detect_circular=True, calculate_metrics=False, generate_diagrams=False,
    )
    return CyclesResponse(cycles=result.structural_cycles, component_cycles=result.component_cycles)


@router.post("/coupling")
async def coupling(req: AnalysisRequest):
    result = await asyncio.to_thread(
        _run, req, detect_circular=False, calculate_metrics=True, generate_diagrams=False,
    )
    return {
        "coupling": [m.to_dict() for m in rank_by_coupling(result.coupling or {})],
    }

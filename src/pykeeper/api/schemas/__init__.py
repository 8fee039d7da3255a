"""Pydantic models for API I/O."""

from .keeper import (
    KeeperCommitRequest,
    KeeperResponse,
    ResolvedKeeperResponse,
    SimulationRequest,
    SimulationResponse,
    WarningResponse,
)
from .override import (
    AuditResponse,
    EligibilityResponse,
    EligibleKeeperResponse,
    OverrideRequest,
    OverrideResponse,
)
from .quote import CostOptionResponse, KeeperCostResponse, QuoteResponse
from .recalculation import KeeperDeltaResponse, RecalculationResponse

__all__ = [
    "AuditResponse",
    "CostOptionResponse",
    "EligibilityResponse",
    "EligibleKeeperResponse",
    "KeeperCommitRequest",
    "KeeperCostResponse",
    "KeeperDeltaResponse",
    "KeeperResponse",
    "OverrideRequest",
    "OverrideResponse",
    "QuoteResponse",
    "RecalculationResponse",
    "ResolvedKeeperResponse",
    "SimulationRequest",
    "SimulationResponse",
    "WarningResponse",
]

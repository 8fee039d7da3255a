"""Keeper cost and slot-cascade resolution engine."""

from .cascade import CascadeResult, SlotRequest, owned_rounds_for, resolve_slots, validate_limits
from .cost import CostOption, KeeperCost, compute_cost, project_costs
from .origin import DataQualityWarning, Origin, OriginSource, WarningCode, resolve_origin
from .recalculate import DeltaStatus, KeeperDelta, RecalculationReport, apply_report, recalculate_all
from .simulation import (
    EligibleKeeper,
    KeeperEngine,
    KeeperQuote,
    ResolvedKeeper,
    RosterEligibility,
    RosterResolution,
    SimulationResult,
    simulate,
)

__all__ = [
    "CascadeResult",
    "CostOption",
    "DataQualityWarning",
    "DeltaStatus",
    "EligibleKeeper",
    "KeeperCost",
    "KeeperDelta",
    "KeeperEngine",
    "KeeperQuote",
    "Origin",
    "OriginSource",
    "RecalculationReport",
    "ResolvedKeeper",
    "RosterEligibility",
    "RosterResolution",
    "SimulationResult",
    "SlotRequest",
    "WarningCode",
    "apply_report",
    "compute_cost",
    "owned_rounds_for",
    "project_costs",
    "recalculate_all",
    "resolve_origin",
    "resolve_slots",
    "simulate",
    "validate_limits",
]

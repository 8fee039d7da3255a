"""REST API for keeper costs, simulations and persisted keeper decisions."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List

from fastapi import FastAPI, HTTPException, Query

from pykeeper.api.schemas import (
    AuditResponse,
    CostOptionResponse,
    EligibilityResponse,
    EligibleKeeperResponse,
    KeeperCommitRequest,
    KeeperCostResponse,
    KeeperDeltaResponse,
    KeeperResponse,
    OverrideRequest,
    OverrideResponse,
    QuoteResponse,
    RecalculationResponse,
    ResolvedKeeperResponse,
    SimulationRequest,
    SimulationResponse,
    WarningResponse,
)
from pykeeper.engine import (
    DataQualityWarning,
    KeeperCost,
    KeeperQuote,
    RecalculationReport,
    RosterEligibility,
    RosterResolution,
)
from pykeeper.errors import (
    KeeperError,
    KeeperLockedError,
    KeeperValidationError,
    UnresolvableCascadeError,
)
from pykeeper.ingest import with_process_defaults
from pykeeper.models import KeeperIntent, LeagueSnapshot
from pykeeper.persistence import AuditRecord, KeeperStore
from pykeeper.service import KeeperService


def _warnings_to_response(warnings: Iterable[DataQualityWarning]) -> List[WarningResponse]:
    return [
        WarningResponse(
            player_id=warning.player_id,
            roster_id=warning.roster_id,
            code=warning.code.value,
            message=warning.message,
        )
        for warning in warnings
    ]


def _cost_to_response(cost: KeeperCost) -> KeeperCostResponse:
    def option(value) -> CostOptionResponse:
        return CostOptionResponse(
            base_cost=value.base_cost,
            final_cost=value.final_cost,
            eligible=value.eligible,
            reason=value.reason,
        )

    return KeeperCostResponse(
        season=cost.season,
        years_held=cost.years_held,
        regular=option(cost.regular),
        franchise=option(cost.franchise),
        must_franchise_tag=cost.must_franchise_tag,
    )


def quote_to_response(quote: KeeperQuote) -> QuoteResponse:
    return QuoteResponse(
        player_id=quote.player_id,
        roster_id=quote.roster_id,
        season=quote.season,
        origin_season=quote.origin.origin_season,
        base_round=quote.origin.base_round,
        origin_source=quote.origin.source.value,
        acquired_via=quote.origin.acquired_via.value if quote.origin.acquired_via else None,
        cost=_cost_to_response(quote.cost),
        projections=[_cost_to_response(cost) for cost in quote.projections],
        warnings=_warnings_to_response(quote.warnings),
    )


def resolution_to_response(resolution: RosterResolution) -> SimulationResponse:
    return SimulationResponse(
        roster_id=resolution.roster_id,
        season=resolution.season,
        keepers=[
            ResolvedKeeperResponse(
                player_id=keeper.player_id,
                keeper_type=keeper.keeper_type,
                base_cost=keeper.base_cost,
                requested_round=keeper.requested_round,
                final_cost=keeper.final_cost,
                years_held=keeper.years_held,
                cascaded=keeper.cascaded,
                cascade_reason=keeper.cascade_reason or None,
            )
            for keeper in resolution.keepers
        ],
        total_slots_taken=resolution.total_slots_taken,
        available_slots=resolution.available_slots,
        available_rounds=list(resolution.available_rounds),
        warnings=_warnings_to_response(resolution.warnings),
    )


def intent_to_response(intent: KeeperIntent) -> KeeperResponse:
    return KeeperResponse.model_validate(intent.model_dump())


def eligibility_to_response(eligibility: RosterEligibility) -> EligibilityResponse:
    return EligibilityResponse(
        roster_id=eligibility.roster_id,
        season=eligibility.season,
        players=[
            EligibleKeeperResponse(
                player_id=entry.player_id,
                eligible=entry.eligible,
                reason=entry.reason,
                keeper_types=list(entry.keeper_types),
                origin_season=entry.quote.origin.origin_season,
                base_round=entry.quote.origin.base_round,
                cost=_cost_to_response(entry.quote.cost),
                existing=intent_to_response(entry.existing) if entry.existing else None,
            )
            for entry in eligibility.players
        ],
        franchise_count=eligibility.franchise_count,
        regular_count=eligibility.regular_count,
        total_count=eligibility.total_count,
        can_add_franchise=eligibility.can_add_franchise,
        can_add_regular=eligibility.can_add_regular,
        can_add_any=eligibility.can_add_any,
    )


def audit_to_response(record: AuditRecord) -> AuditResponse:
    return AuditResponse(
        audit_id=record.audit_id,
        season=record.season,
        roster_id=record.roster_id,
        player_id=record.player_id,
        action=record.action,
        old_cost=record.old_cost,
        new_cost=record.new_cost,
        message=record.message,
        created_at=record.created_at,
    )


def report_to_response(report: RecalculationReport, *, applied: bool) -> RecalculationResponse:
    return RecalculationResponse(
        league_id=report.league_id,
        season=report.season,
        applied=applied,
        updated=len(report.updated),
        unchanged=len(report.unchanged),
        failed=len(report.failed),
        entries=[
            KeeperDeltaResponse(
                player_id=entry.player_id,
                roster_id=entry.roster_id,
                season=entry.season,
                status=entry.status.value,
                old_cost=entry.old_cost,
                new_cost=entry.new_cost,
                years_held=entry.years_held,
                base_cost=entry.base_cost,
                error=entry.error,
            )
            for entry in report.entries
        ],
        warnings=_warnings_to_response(report.warnings),
    )


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, KeeperLockedError):
        return HTTPException(status_code=409, detail={"code": exc.code, "message": exc.message})
    if isinstance(exc, UnresolvableCascadeError):
        return HTTPException(status_code=422, detail={"code": exc.code, "message": exc.message})
    if isinstance(exc, KeeperValidationError):
        return HTTPException(status_code=400, detail={"code": exc.code, "message": exc.message})
    if isinstance(exc, KeyError):
        message = exc.args[0] if exc.args else "Not found"
        return HTTPException(status_code=404, detail=str(message))
    if isinstance(exc, KeeperError):
        return HTTPException(status_code=400, detail={"code": exc.code, "message": exc.message})
    raise TypeError(f"Unsupported error type {type(exc).__name__}")


def create_app(store: KeeperStore | None = None) -> FastAPI:
    app = FastAPI(title="pykeeper")
    store = store or KeeperStore(Path(__file__).resolve().parent.parent / "pykeeper.sqlite")
    service = KeeperService(store)
    app.state.keeper_store = store
    app.state.keeper_service = service

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.put("/leagues/{league_id}/snapshot")
    def put_snapshot(league_id: str, snapshot: LeagueSnapshot) -> dict[str, Any]:
        if snapshot.league_id != league_id:
            raise HTTPException(status_code=400, detail="league_id in body does not match path")
        record = service.store_snapshot(with_process_defaults(snapshot))
        return {
            "league_id": record.league_id,
            "season": record.season,
            "rosters": len(snapshot.rosters),
            "events": len(snapshot.events),
            "keepers": len(store.list_keepers(league_id, record.season)),
            "updated_at": record.updated_at.isoformat(),
        }

    @app.get("/leagues/{league_id}/players/{player_id}/quote", response_model=QuoteResponse)
    def get_quote(
        league_id: str,
        player_id: str,
        roster_id: str = Query(..., min_length=1),
        years: int = Query(0, ge=0, le=10),
    ):
        try:
            quote = service.quote(league_id, player_id, roster_id, years=years)
        except (KeeperError, KeyError) as exc:
            raise _http_error(exc) from exc
        return quote_to_response(quote)

    @app.post("/leagues/{league_id}/simulate", response_model=SimulationResponse)
    def simulate(league_id: str, payload: SimulationRequest):
        selections = [keeper.to_selection() for keeper in payload.keepers]
        try:
            result = service.simulate(league_id, payload.roster_id, selections)
        except (KeeperError, KeyError) as exc:
            raise _http_error(exc) from exc
        return resolution_to_response(result)

    @app.get("/leagues/{league_id}/rosters/{roster_id}/keepers", response_model=list[KeeperResponse])
    def list_keepers(league_id: str, roster_id: str):
        try:
            intents = service.list_keepers(league_id, roster_id)
        except KeyError as exc:
            raise _http_error(exc) from exc
        return [intent_to_response(intent) for intent in intents]

    @app.post("/leagues/{league_id}/rosters/{roster_id}/keepers", response_model=SimulationResponse)
    def commit_keeper(league_id: str, roster_id: str, payload: KeeperCommitRequest):
        try:
            resolution = service.add_keeper(league_id, roster_id, payload.to_selection())
        except (KeeperError, KeyError) as exc:
            raise _http_error(exc) from exc
        return resolution_to_response(resolution)

    @app.delete("/leagues/{league_id}/rosters/{roster_id}/keepers/{player_id}", response_model=SimulationResponse)
    def remove_keeper(league_id: str, roster_id: str, player_id: str):
        try:
            resolution = service.remove_keeper(league_id, roster_id, player_id)
        except (KeeperError, KeyError) as exc:
            raise _http_error(exc) from exc
        return resolution_to_response(resolution)

    @app.post("/leagues/{league_id}/rosters/{roster_id}/keepers/{player_id}/lock", response_model=KeeperResponse)
    def lock_keeper(league_id: str, roster_id: str, player_id: str):
        try:
            intent = service.set_locked(league_id, roster_id, player_id, True)
        except KeyError as exc:
            raise _http_error(exc) from exc
        return intent_to_response(intent)

    @app.post("/leagues/{league_id}/rosters/{roster_id}/keepers/{player_id}/unlock", response_model=KeeperResponse)
    def unlock_keeper(league_id: str, roster_id: str, player_id: str):
        try:
            intent = service.set_locked(league_id, roster_id, player_id, False)
        except KeyError as exc:
            raise _http_error(exc) from exc
        return intent_to_response(intent)

    @app.get("/leagues/{league_id}/rosters/{roster_id}/eligible-keepers", response_model=EligibilityResponse)
    def eligible_keepers(league_id: str, roster_id: str):
        try:
            eligibility = service.eligible_keepers(league_id, roster_id)
        except (KeeperError, KeyError) as exc:
            raise _http_error(exc) from exc
        return eligibility_to_response(eligibility)

    @app.post(
        "/leagues/{league_id}/rosters/{roster_id}/keepers/{player_id}/override",
        response_model=OverrideResponse,
    )
    def override_keeper(league_id: str, roster_id: str, player_id: str, payload: OverrideRequest):
        try:
            intent = service.override_keeper(
                league_id,
                roster_id,
                player_id,
                action=payload.action,
                reason=payload.reason,
                keeper_type=payload.keeper_type,
                final_cost=payload.final_cost,
            )
        except (KeeperError, KeyError) as exc:
            raise _http_error(exc) from exc
        return OverrideResponse(
            action=payload.action,
            player_id=player_id,
            roster_id=roster_id,
            keeper=intent_to_response(intent) if intent is not None else None,
        )

    @app.get("/leagues/{league_id}/audit", response_model=list[AuditResponse])
    def list_audit(league_id: str, limit: int = Query(50, ge=1, le=500)):
        if store.get_snapshot_record(league_id) is None:
            raise HTTPException(status_code=404, detail=f"League {league_id} not found")
        return [audit_to_response(record) for record in store.list_audit(league_id, limit=limit)]

    @app.post("/leagues/{league_id}/recalculate", response_model=RecalculationResponse)
    def recalculate(league_id: str, apply: bool = False):
        try:
            report = service.recalculate(league_id, apply=apply)
        except KeyError as exc:
            raise _http_error(exc) from exc
        return report_to_response(report, applied=apply)

    return app

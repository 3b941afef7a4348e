"""Read-only REST endpoints exposing chronos debug state.

The router reads the active context through get_chronos(). Snapshots are only
served while the context is enabled and in debug mode; the health endpoint
always answers.
"""

from fastapi import APIRouter, Depends, HTTPException

from chronos.core.config import settings
from chronos.services.instance import ChronosLike, get_chronos
from chronos.services.models import ChronosHealthModel, DebugSnapshotModel

router = APIRouter(prefix="/chronos", tags=["chronos"])


def get_context() -> ChronosLike:
    """FastAPI dependency for chronos context injection."""
    return get_chronos()


@router.get("/debug", response_model=DebugSnapshotModel)
async def get_debug_snapshot(chronos: ChronosLike = Depends(get_context)):
    """Get the debug snapshot of the active context.

    Raises:
        HTTPException: 503 if chronos is disabled or not in debug mode
    """
    if not chronos.is_enabled():
        raise HTTPException(
            status_code=503,
            detail="Chronos is disabled. Set CHRONOS_ENABLED=true to enable."
        )
    if not chronos.debug_mode:
        raise HTTPException(
            status_code=503,
            detail="Chronos debug mode is off. Set CHRONOS_DEBUG=true to enable."
        )

    return chronos.debug_snapshot()


@router.get("/health", response_model=ChronosHealthModel)
async def get_chronos_health(chronos: ChronosLike = Depends(get_context)):
    """Get chronos health status.

    Lightweight check that always returns 200, even when chronos is disabled.
    """
    snapshot = chronos.debug_snapshot()
    return ChronosHealthModel(
        enabled=chronos.is_enabled(),
        debug_mode=snapshot.debug_mode,
        mode=snapshot.capabilities.mode,
        running_count=len(snapshot.running),
        pending_count=len(snapshot.stored) + len(snapshot.special),
        version=settings.VERSION,
    )

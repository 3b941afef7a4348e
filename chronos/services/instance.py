"""Module-level accessor for the active chronos context.

Hosts that prefer a single shared context install it here at startup; code
that instruments work calls get_chronos(). Until something is installed the
accessor returns a NullChronos, so instrumentation calls are always safe.
"""

from typing import Any, Mapping, Optional, Union

from chronos.core.config import settings
from chronos.core.logging import get_logger
from .context import Chronos, DEFAULT_CLOCK
from .flush import Sink
from .idle import IIdleScheduler
from .null_chronos import NullChronos

logger = get_logger(__name__)

ChronosLike = Union[Chronos, NullChronos]

# Module-level singleton instance - starts as null chronos
_chronos: ChronosLike = NullChronos()


def get_chronos() -> ChronosLike:
    """Get the currently active chronos context.

    Returns:
        The active context (real or null)
    """
    return _chronos


def set_chronos(chronos: ChronosLike) -> None:
    """Replace the active chronos context.

    Args:
        chronos: The context to use from now on
    """
    global _chronos
    _chronos = chronos


def create_chronos(
    sink: Optional[Sink] = None,
    auto_save_on_stop: Optional[bool] = None,
    debug_mode: Optional[bool] = None,
    clock: Any = DEFAULT_CLOCK,
    global_metadata: Optional[Mapping[str, Any]] = None,
    idle_scheduler: Optional[IIdleScheduler] = None,
    enabled: Optional[bool] = None,
) -> ChronosLike:
    """Build a chronos context honoring the CHRONOS_ENABLED setting.

    Returns:
        A Chronos, or a NullChronos when instrumentation is disabled
    """
    enabled = settings.ENABLED if enabled is None else enabled
    if not enabled:
        logger.info("Chronos disabled, using null context")
        return NullChronos()

    return Chronos(
        sink=sink,
        auto_save_on_stop=auto_save_on_stop,
        debug_mode=debug_mode,
        clock=clock,
        global_metadata=global_metadata,
        idle_scheduler=idle_scheduler,
    )

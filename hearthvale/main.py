"""
Hearthvale - Demo Entry Point
=============================

Bootstrap
---------
- Config validation
- Logging setup
- GameContext (config manager, event bus, orchestrator)
- Demo subsystems (economy, farming)
- A short fixed-step loop
- Graceful shutdown
"""

from __future__ import annotations

import itertools
import sys
from typing import Optional

from hearthvale.core.config.config import Config
from hearthvale.core.event.channels import EconomyEvents, FarmingEvents
from hearthvale.core.exceptions import SubsystemInitializationError
from hearthvale.core.infra.application_context import GameContext, GameState
from hearthvale.core.infra.game_loop import GameLoop
from hearthvale.core.logging.logger import get_logger, setup_logging, shutdown_logging
from hearthvale.modules.economy import EconomySubsystem
from hearthvale.modules.farming import FarmingSubsystem

logger = get_logger(__name__)

DEMO_FRAMES = 600


# ============================================================================
# Application Bootstrap
# ============================================================================


def _build_context() -> GameContext:
    """Build the context and register the demo subsystems."""
    logger.info("========== HEARTHVALE INITIALIZATION START ==========")

    context = GameContext()
    logger.info("✓ Game context created")

    context.register_system(EconomySubsystem(context.event_bus, context.config))
    context.register_system(FarmingSubsystem(context.event_bus, context.config))
    logger.info("✓ Subsystems registered", extra={"count": context.orchestrator.subsystem_count})
    return context


def _boot(context: GameContext) -> None:
    context.boot()
    logger.info("\n%s", context.readiness_report())
    logger.info("========== HEARTHVALE INITIALIZED ==========")


def _play(context: GameContext, frames: int) -> None:
    """Plant a few plots, run the loop, harvest whatever grew."""
    farming = context.get_system(FarmingSubsystem)
    economy = context.get_system(EconomySubsystem)
    if farming is None or economy is None:
        logger.error("Demo subsystems missing; skipping play session")
        return

    context.event_bus.register(
        EconomyEvents.GOLD_GAINED,
        lambda amount, total: logger.info(
            "Gold gained", extra={"amount": amount, "new_total": total}
        ),
    )
    context.event_bus.register(
        FarmingEvents.CROP_GROWN,
        lambda plot_id, crop: logger.info("Crop grown", extra={"plot_id": plot_id, "crop": crop}),
    )

    context.change_state(GameState.PLAYING)
    crops = sorted(farming.crops)
    for plot_id, crop in enumerate(crops):
        farming.plant(plot_id, crop)

    # Simulated clock: one fixed step per frame, so the demo finishes instantly.
    step = context.config.get_float("core.loop.fixed_delta_time", 0.02)
    frame_times = (index * step for index in itertools.count())
    loop = GameLoop(context, clock=lambda: next(frame_times))
    loop.run(max_frames=frames)

    for plot_id in range(len(crops)):
        plot = farming.get_plot(plot_id)
        if plot is not None and plot.is_grown:
            farming.harvest(plot_id)

    logger.info("Play session finished", extra={"gold": economy.gold, "frames": loop.frame})


def _shutdown(context: Optional[GameContext]) -> None:
    logger.info("========== HEARTHVALE SHUTDOWN START ==========")
    if context is not None:
        try:
            context.shutdown()
        except Exception as exc:
            logger.error(f"Error while shutting down game context: {exc}", exc_info=True)
    logger.info("========== HEARTHVALE SHUTDOWN COMPLETE ==========")


# ============================================================================
# Main Entry Point
# ============================================================================


def main(frames: int = DEMO_FRAMES) -> int:
    Config.validate()
    setup_logging()

    context: Optional[GameContext] = None
    exit_code = 0
    try:
        context = _build_context()
        _boot(context)
        _play(context, frames)
    except SubsystemInitializationError as exc:
        logger.critical(
            "Subsystem initialization failed",
            extra={"error_code": exc.error_code, "failed": exc.report.failed},
        )
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as exc:
        logger.critical(f"Fatal error: {exc}", exc_info=True)
        exit_code = 1
    finally:
        _shutdown(context)
        shutdown_logging()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())

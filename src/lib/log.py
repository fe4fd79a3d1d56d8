"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState connected to the current
context, so lib modules can report progress without having state passed
through every call. WARN() reports recoverable problems (skipped optional
includes, unresolved attribute references) regardless of verbosity.

Usage:
    from lib.log import LOG, WARN, state_connectToLogger

    state_connectToLogger(state)

    LOG("Loaded 12 documents", level=1)
    LOG("Resolved include chapters/intro.adoc", level=2)
    LOG("Tag stack: ['update_1']", level=3)
    WARN("missing attribute reference {version}")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{module: <10}</cyan>:"
    "<cyan>{function: <20}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this once at the start of the pipeline to make the state's
    verbosity setting available to LOG() calls throughout that context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the connected state, 0 when nothing is connected"""
    state = _program_state.get()
    if state is None or not hasattr(state, 'verbosity'):
        return 0
    return state.verbosity


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Example:
        LOG("Rendered 3 documents", level=1)
        LOG("Including /docs/core.adoc at line 12", level=2)
    """
    if verbosity_get() >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """Log a warning whatever the verbosity"""
    logger.opt(depth=1).warning(message, **kwargs)

"""
LLM call tracing with W&B Weave.

Tracing is optional: it is enabled only when WANDB_API_KEY is set, and any
failure to initialize or wrap leaves the traced functions running untraced.
"""

import functools
import logging
from typing import Any, Callable, Optional

import weave

from config import settings

logger = logging.getLogger(__name__)


class Tracer:
    """
    Process-wide tracing state. Initialization is attempted at most once.
    """

    def __init__(self):
        self.attempted = False
        self.enabled = False
        self.error: Optional[str] = None

    def ensure_initialized(self) -> bool:
        """
        Initialize Weave on first use.

        Returns:
            True if tracing is active
        """
        if self.attempted:
            return self.enabled
        self.attempted = True

        if not settings.WANDB_API_KEY:
            logger.info("📊 Tracing disabled (WANDB_API_KEY not set)")
            return False

        try:
            weave.init(settings.WEAVE_PROJECT)
            self.enabled = True
            logger.info(f"📊 Weave tracing initialized for project '{settings.WEAVE_PROJECT}'")
        except Exception as e:
            self.error = str(e)
            logger.error(f"❌ Weave init failed: {str(e)}")
        return self.enabled

    def wrap(self, fn: Callable, name: str) -> Callable:
        """Wrap fn as a Weave op, returning fn itself if wrapping fails."""
        try:
            return weave.op(fn, name=name)
        except Exception as e:
            logger.warning(f"⚠️ Could not trace {name}: {str(e)}")
            return fn

    def status(self) -> dict:
        return {
            "enabled": self.enabled,
            "project": settings.WEAVE_PROJECT if self.enabled else None,
            "error": self.error,
        }


_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = Tracer()
    return _tracer


def traced(name: str):
    """
    Decorate a coroutine function so its calls are recorded as a Weave op.

    The op is created on first call, after tracing has had a chance to
    initialize; until then (or when disabled) the raw function runs.
    """

    def decorator(fn: Callable) -> Callable:
        op: Optional[Callable] = None

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any):
            nonlocal op
            tracer = get_tracer()
            if not tracer.ensure_initialized():
                return await fn(*args, **kwargs)
            if op is None:
                op = tracer.wrap(fn, name)
            return await op(*args, **kwargs)

        return wrapper

    return decorator

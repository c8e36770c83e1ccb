from typing import Any, Callable

import structlog


logger = structlog.get_logger(__name__)


def best_effort(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run ``fn`` and discard any failure.

    Used for side effects that must never block or fail the caller
    (tap logging on the redirect path, contact-save logging, lead
    notification). Failures are logged and ``None`` is returned.
    """
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        logger.warning("best_effort_failed", task=getattr(fn, "__name__", repr(fn)), error=str(e))
        return None

"""
Ordered fallback over synonymous provider actions.

Integrations expose the same capability under different action names, so a
cascade tries each in turn and the first one that does not raise wins.
"""

from dataclasses import dataclass, field
from typing import Any

from meetsync.infrastructure.observability.logging import get_logger
from meetsync.services.calendar.composio_client import ComposioClient
from meetsync.services.errors import ProviderCapabilityUnavailable, ProviderError

logger = get_logger(__name__)


@dataclass
class CascadeOutcome:
    action: str
    response: dict[str, Any]
    attempted: list[str] = field(default_factory=list)


async def run_cascade(
    provider: ComposioClient,
    entity_id: str,
    actions: tuple[str, ...],
    params: dict[str, Any],
    operation: str,
) -> CascadeOutcome:
    """
    Execute `actions` in order until one succeeds.

    Raises:
        ProviderCapabilityUnavailable: every action failed (carries the last error)
    """
    attempted = []
    last_error: ProviderError | None = None

    for action in actions:
        attempted.append(action)
        try:
            response = await provider.execute_action(entity_id, action, params)
        except ProviderError as e:
            last_error = e
            logger.info(
                "Provider action not available, trying next",
                operation=operation,
                action=action,
                status_code=e.status_code,
                error=str(e),
            )
            continue

        logger.info("Provider action succeeded", operation=operation, action=action)
        return CascadeOutcome(action=action, response=response, attempted=attempted)

    raise ProviderCapabilityUnavailable(
        f"No provider action available for {operation}",
        last_error=last_error,
        status_code=last_error.status_code if last_error else None,
        error_code=last_error.error_code if last_error else None,
    )

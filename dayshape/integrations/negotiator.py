"""Remote schedule negotiation for dayshape.

A remote reasoning service can propose resolution strategies for a schedule
alert. Its proposals are replayed through the local operation applier. Any
failure (timeout, non-success, malformed payload) degrades to the local
strategy engine; the remote call is never retried.
"""

import os
import logging
from typing import List, Optional, Sequence
import requests
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from dayshape.models.block import Block
from dayshape.models.conflict import Conflict
from dayshape.models.operation import Operation
from dayshape.models.strategy import Strategy, StrategySource
from dayshape.engine.operations import apply_operations
from dayshape.engine.strategies import StrategyConfig, generate_strategies
from dayshape.engine.validation import validate_blocks

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0


class StrategyDescriptor(BaseModel):
    """A strategy as proposed by the negotiation service."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    action: Optional[str] = Field(None, description="move / resize / delete")
    impact: Optional[str] = Field(None, description="Impact or severity label")
    operations: List[Operation] = Field(default_factory=list)

    @field_validator("operations", mode="before")
    @classmethod
    def _drop_unknown_operations(cls, v):
        """Keep the operations that parse; the service may propose kinds we can't apply."""
        if not isinstance(v, list):
            return v
        operations = []
        for item in v:
            try:
                operations.append(Operation.model_validate(item))
            except ValidationError:
                kind = item.get("type") if isinstance(item, dict) else None
                logger.debug(f"Dropping unsupported negotiated operation (type={kind!r})")
        return operations


def timeout_from_env() -> float:
    """Read NEGOTIATOR_TIMEOUT_SEC, falling back to the default when unset or invalid."""
    raw = os.getenv("NEGOTIATOR_TIMEOUT_SEC")
    if not raw:
        return DEFAULT_TIMEOUT_SEC
    try:
        timeout = float(raw)
    except ValueError:
        timeout = 0.0
    if timeout <= 0:
        logger.warning(f"Invalid NEGOTIATOR_TIMEOUT_SEC '{raw}'. Using {DEFAULT_TIMEOUT_SEC}s.")
        return DEFAULT_TIMEOUT_SEC
    return timeout


class NegotiationClient:
    """Client for the remote schedule negotiation service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout_sec: Optional[float] = None,
    ):
        """Initialize negotiation client.

        Args:
            base_url: Endpoint URL. If None, reads NEGOTIATOR_URL env var.
            api_token: Bearer token. If None, reads NEGOTIATOR_API_TOKEN env var.
            timeout_sec: Request timeout. If None, reads NEGOTIATOR_TIMEOUT_SEC (default 10s).

        Note:
            Without a URL the client still initializes but every call returns
            None, so callers fall back to local strategies.
        """
        self.base_url = base_url or os.getenv("NEGOTIATOR_URL")
        self.api_token = api_token or os.getenv("NEGOTIATOR_API_TOKEN")
        self.timeout_sec = timeout_sec or timeout_from_env()

        self.headers = {"Content-Type": "application/json"}
        if self.api_token:
            self.headers["Authorization"] = f"Bearer {self.api_token}"

        if not self.base_url:
            logger.warning("NEGOTIATOR_URL not found in environment. Remote negotiation will not be available.")

    @property
    def available(self) -> bool:
        return bool(self.base_url)

    def fetch_strategies(self, alert_id: str, user_id: str, timezone: str) -> Optional[List[StrategyDescriptor]]:
        """Ask the negotiation service for strategies resolving an alert.

        Args:
            alert_id: Schedule alert identifier
            user_id: User identifier
            timezone: IANA timezone name of the user

        Returns:
            Proposed strategy descriptors (possibly empty), or None if the
            call failed or the response was unusable
        """
        if not self.available:
            logger.debug("Negotiation client not configured. Skipping remote call.")
            return None

        payload = {"alert_id": alert_id, "user_id": user_id, "timezone": timezone}
        try:
            response = requests.post(self.base_url, json=payload, headers=self.headers, timeout=self.timeout_sec)
            response.raise_for_status()
            body = response.json()
        except requests.Timeout:
            logger.warning(f"Negotiation service timed out after {self.timeout_sec}s")
            return None
        except requests.RequestException as e:
            # Don't log full error message as it might contain the token
            logger.error(f"Negotiation service request failed: {type(e).__name__}")
            return None
        except ValueError:
            logger.warning("Negotiation service returned invalid JSON")
            return None

        return parse_negotiation_response(body)


def parse_negotiation_response(body) -> Optional[List[StrategyDescriptor]]:
    """Extract strategy descriptors from a negotiation response body.

    Accepts `{"success": true, "strategies": [...]}` and the wrapped form
    `{"success": true, "data": {"strategies": [...]}}`.
    """
    if not isinstance(body, dict) or not body.get("success"):
        logger.warning("Negotiation service reported failure")
        return None

    container = body.get("data") if isinstance(body.get("data"), dict) else body
    raw = container.get("strategies")
    if raw is None:
        raw = []
    if not isinstance(raw, list):
        logger.warning("Negotiation response 'strategies' is not a list")
        return None

    try:
        return [StrategyDescriptor.model_validate(item) for item in raw]
    except ValidationError as e:
        logger.warning(f"Malformed strategy in negotiation response ({e.error_count()} errors)")
        return None


def replay_descriptor(blocks: Sequence[Block], descriptor: StrategyDescriptor) -> Strategy:
    """Apply a negotiated strategy's operations to the current blocks."""
    result = apply_operations(blocks, descriptor.operations, reason="Proposed by schedule negotiator")
    return Strategy(
        id=descriptor.id,
        title=descriptor.title,
        description=descriptor.description,
        action=descriptor.action,
        operations=descriptor.operations,
        changes=result.changes,
        new_blocks=result.blocks,
        tradeoffs=[descriptor.impact] if descriptor.impact else [],
        source=StrategySource.NEGOTIATED,
    )


def resolve_strategies(
    blocks: Sequence[Block],
    conflicts: Sequence[Conflict],
    alert_id: Optional[str] = None,
    user_id: Optional[str] = None,
    timezone: str = "UTC",
    client: Optional[NegotiationClient] = None,
    config: Optional[StrategyConfig] = None,
    preferred: Optional[str] = None,
) -> List[Strategy]:
    """Get strategies from the negotiation service, or locally as a fallback.

    The remote service is only consulted for a known alert. A failed call or
    an empty proposal list falls back to the deterministic local engine.

    Args:
        blocks: Current blocks
        conflicts: Conflicts detected on those blocks
        alert_id: Schedule alert to negotiate (local only if None)
        user_id: User identifier sent to the service
        timezone: User's timezone name sent to the service
        client: Negotiation client (a default one is built if None)
        config: Local strategy settings
        preferred: Strategy id to list first among local strategies

    Returns:
        Strategies for display
    """
    blocks = validate_blocks(blocks)

    if alert_id:
        client = client or NegotiationClient()
        descriptors = client.fetch_strategies(alert_id, user_id or "", timezone)
        if descriptors:
            logger.info(f"Using {len(descriptors)} negotiated strategies for alert {alert_id}")
            return [replay_descriptor(blocks, d) for d in descriptors]
        logger.warning(f"Falling back to local strategies for alert {alert_id}")

    return generate_strategies(blocks, conflicts, config=config, preferred=preferred)

"""
Ledger State Codec

Turns a LedgerState into an opaque text token and back, for saving to
local storage and for embedding in a share link.

Token format: URL-safe base64 of the compact JSON document
    {"people": [{"id", "name"}], "expenses": [{"id", "description",
     "amount", "type", "date", "paidBy", "splitBetween"}]}
with amounts as decimal strings and dates as ISO 'YYYY-MM-DD'.

GUARANTEES:
- serialize is a pure function of the state's content
- deserialize(serialize(state)) == state
- deserialize never raises: anything it cannot decode into a valid
  ledger becomes the empty ledger
"""

import base64
import binascii
from typing import Optional, Union

import structlog

from splitledger.models.ledger import LedgerState

logger = structlog.get_logger(__name__)


def empty_state() -> LedgerState:
    """The canonical empty ledger."""
    return LedgerState()


def serialize(state: LedgerState) -> str:
    """Encode a ledger as a URL-safe text token."""
    payload = state.model_dump_json(by_alias=True)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def deserialize(token: Optional[Union[str, bytes]]) -> LedgerState:
    """
    Decode a token produced by serialize.

    Malformed, truncated or otherwise undecodable input, and input that
    decodes to a ledger breaking store invariants (dangling references,
    duplicate ids or names), all yield the empty ledger.
    """
    if not token:
        return empty_state()

    try:
        payload = base64.b64decode(token, altchars=b"-_", validate=True)
        return LedgerState.model_validate_json(payload)
    except (binascii.Error, ValueError, TypeError, RecursionError) as e:
        # pydantic.ValidationError and UnicodeDecodeError are ValueErrors
        logger.warning(
            "ledger_token_rejected",
            error_type=type(e).__name__,
            error=str(e).splitlines()[0] if str(e) else "",
            token_length=len(token) if isinstance(token, (str, bytes)) else None,
        )
        return empty_state()

"""State serialization package."""

from splitledger.codec.state_codec import deserialize, empty_state, serialize

__all__ = ["deserialize", "empty_state", "serialize"]

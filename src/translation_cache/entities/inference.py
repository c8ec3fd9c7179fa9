"""Inference request/result domain entities."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class InferenceRequest:
    """One logical translation call.

    Attributes:
        input: The source text
        source_variant: Source language code, or None to let the provider detect it
        target_variant: Target language code
    """

    input: str
    source_variant: str | None
    target_variant: str


@dataclass(frozen=True)
class InferenceResult:
    """Provider output for one request.

    Attributes:
        output: The translated text
        provider_metadata: Model id, token usage and similar provider details
        elapsed_ms: Wall time of the provider call in milliseconds
    """

    output: str
    provider_metadata: dict[str, Any] = field(default_factory=dict)
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the durable store."""
        return {
            "output": self.output,
            "providerMetadata": self.provider_metadata,
            "elapsedMs": self.elapsed_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InferenceResult":
        """Rebuild a result written by ``to_dict``."""
        return cls(
            output=data["output"],
            provider_metadata=dict(data.get("providerMetadata") or {}),
            elapsed_ms=float(data.get("elapsedMs", 0.0)),
        )

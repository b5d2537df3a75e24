"""
ModelDescriptor DTO for backend model listings.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class ModelDescriptor:
    """A single model listing entry.

    Attributes:
        id: Stable model identifier.
        name: Human-friendly display name.
        provider: Backend key owning this model.
        owned_by: Optional owner/organization reported by the backend.
        created: Optional unix timestamp reported by the backend.
    """

    id: str
    name: str
    provider: str
    owned_by: Optional[str] = None
    created: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ModelDescriptor"]

"""
Identity
========

The caller's identity as handed to the engine. Authentication and
authorization happen in the collaborator that invokes the engine.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Actor:
    """Who is performing a mutating call."""
    id: str
    name: str
    role: Optional[str] = None


from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    user_id: str
    full_name: Optional[str]
    email: str
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Unknown"

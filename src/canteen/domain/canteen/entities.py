from __future__ import annotations

from dataclasses import dataclass

from canteen.domain.common.ids import CanteenId


@dataclass(frozen=True)
class Canteen:
    canteen_id: CanteenId
    name: str
    location: str | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")

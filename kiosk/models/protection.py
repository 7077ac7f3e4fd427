from typing import List, Optional

from pydantic import Field

from kiosk.models.base import UpstreamModel
from kiosk.models.pricing import Money, Price


class ProtectionCoverage(UpstreamModel):
    id: str = ""
    title: str = ""
    description: str = ""
    tags: List[str] = []


class ProtectionPackage(UpstreamModel):
    id: str = Field(min_length=1)
    name: str = ""
    description: Optional[str] = None
    rating_stars: float = Field(default=0, ge=0, le=5)
    deductible_amount: Optional[Money] = None
    is_deductible_available: bool = False
    includes: List[ProtectionCoverage] = []
    excludes: List[ProtectionCoverage] = []
    price: Price
    is_previously_selected: bool = False
    is_selected: bool = False
    is_nudge: bool = False

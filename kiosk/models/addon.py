from typing import List, Optional

from pydantic import Field, NonNegativeInt, field_validator, model_validator

from kiosk.models.base import UpstreamModel
from kiosk.models.pricing import Price


class ChargeDetail(UpstreamModel):
    id: str = ""
    title: str = ""
    description: str = ""
    tags: List[str] = []
    icon_url: Optional[str] = None


class SelectionStrategy(UpstreamModel):
    current_selection: NonNegativeInt = 0
    max_selection_limit: NonNegativeInt = 1
    is_multi_selection_allowed: bool = False

    @model_validator(mode="after")
    def check_limits(self):
        if not self.is_multi_selection_allowed:
            self.max_selection_limit = 1
        if self.current_selection > self.max_selection_limit:
            raise ValueError(
                f"current selection {self.current_selection} exceeds limit {self.max_selection_limit}"
            )
        return self


class AdditionalInfo(UpstreamModel):
    is_enabled: bool = True
    is_selected: bool = False
    is_previously_selected: bool = False
    is_nudge: bool = False
    price: Price
    selection_strategy: SelectionStrategy = Field(default_factory=SelectionStrategy)


class AddonOption(UpstreamModel):
    charge_detail: ChargeDetail
    additional_info: AdditionalInfo


class AddonGroup(UpstreamModel):
    id: str = Field(min_length=1)
    name: str = ""
    options: List[AddonOption] = []

    @field_validator("id", mode="before")
    @classmethod
    def numeric_id(cls, value):
        # the reservation service uses numeric group ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

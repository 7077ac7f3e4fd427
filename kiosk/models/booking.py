from enum import Enum

from pydantic import ConfigDict, Field

from kiosk.models.base import UpstreamModel


class BookingStatus(str, Enum):
    BOOKING = "booking"
    VEHICLE_SELECTED = "vehicleSelected"
    RENT = "rent"
    COMPLETED = "completed"


class Booking(UpstreamModel):
    """
    Ephemeral copy of an upstream reservation.

    ``status`` keeps the raw token so unrecognized values survive; everything
    else the reservation service sends is kept untouched in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    status: str = Field(min_length=1)

    @property
    def extra_fields(self) -> dict:
        return dict(self.model_extra or {})

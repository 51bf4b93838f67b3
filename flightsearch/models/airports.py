from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Airport(BaseModel):
    """A canonical airport as offered to the airport picker."""

    model_config = ConfigDict(frozen=True)

    iata_code: str = Field(pattern=r"^[A-Z]{3}$", description="IATA code (e.g., 'LHR')")
    display_name: str = Field(min_length=1, description="Airport display name")
    city: str = Field("", description="City name")
    country: str = Field("", description="Country name or code")
    provider_airport_id: Optional[str] = Field(
        None, description="Provider sky id used in flight searches"
    )
    provider_entity_id: Optional[str] = Field(
        None, description="Provider entity id refining the sky id"
    )

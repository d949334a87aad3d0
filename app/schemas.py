"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from models.records import Event, Reading


class ReadingPayload(BaseModel):
    """One EdgeX reading.

    Missing keys decode to empty values like the EdgeX Go models; a reading without
    a device inherits the device of its event.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    device: str = ""
    name: str = ""
    value: str = Field(default="", description="Reading value, always sent as text.")
    origin: int = Field(default=0, description="Capture time in epoch milliseconds.")

    def to_reading(self, event_device: str = "") -> Reading:
        return Reading(
            device=self.device or event_device,
            name=self.name,
            id=self.id,
            value=self.value,
            origin=self.origin,
        )


class EventPayload(BaseModel):
    """An EdgeX event as exported over REST."""

    model_config = ConfigDict(extra="ignore")

    device: str = ""
    origin: int = 0
    readings: List[ReadingPayload] = Field(default_factory=list)

    def to_event(self) -> Event:
        return Event(
            device=self.device,
            readings=tuple(reading.to_reading(self.device) for reading in self.readings),
        )


class IngestResponse(BaseModel):
    """Acknowledgement sent once the event is queued, before it is written."""

    event_id: str = Field(..., description="Identifier used in the ingest logs for this event.")
    readings: int = Field(..., ge=0)

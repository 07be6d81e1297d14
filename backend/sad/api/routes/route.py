"""Route planning: travel time between a worker's consecutive stops (Google Distance Matrix)."""
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from sad.services.travel_time import TRAVEL_MODES, AddressInfo, calculate_route_travel_time

router = APIRouter()


class Stop(BaseModel):
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None

    def to_address(self) -> AddressInfo:
        return AddressInfo(address=self.address, postal_code=self.postal_code, city=self.city)


class TravelTimeRequest(BaseModel):
    stops: list[Stop] = Field(..., max_length=50, description="Service addresses in visiting order")
    worker_start: Stop | None = Field(None, description="Worker's home; the first leg is shown but not totalled")
    mode: str = Field("DRIVING", description="DRIVING | WALKING | TRANSIT")


@router.post("/route/travel-time")
def route_travel_time(body: TravelTimeRequest) -> dict[str, Any]:
    mode = body.mode.upper()
    if mode not in TRAVEL_MODES:
        raise HTTPException(status_code=400, detail=f"Modo de transporte no válido: {body.mode}")
    if len(body.stops) + (1 if body.worker_start else 0) < 2:
        raise HTTPException(status_code=400, detail="Se necesitan al menos dos direcciones")
    route = calculate_route_travel_time(
        [s.to_address() for s in body.stops],
        body.worker_start.to_address() if body.worker_start else None,
        mode,
    )
    return route.to_dict()

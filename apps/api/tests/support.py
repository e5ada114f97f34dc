"""Shared helpers for the async service tests."""
from __future__ import annotations

import json
from typing import Callable, Optional
from urllib.parse import parse_qs

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401  registers every table on Base.metadata
from app.database import Base
from app.models.hospital import Hospital, HospitalSource

MUMBAI = (19.076, 72.8777)


async def open_db(url: str):
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, factory


async def add_hospital(factory, **overrides) -> Hospital:
    fields = dict(
        name="Apex Multispeciality Hospital",
        address="Borivali West, Mumbai",
        lat=MUMBAI[0] + 0.01,
        lng=MUMBAI[1],
        type="Pvt",
        phone="022 2890 1234",
        bed_total_icu=10,
        bed_av_icu=4,
        bed_total_oxygen=20,
        bed_av_oxygen=8,
        bed_total_general=50,
        bed_av_general=15,
        verified=True,
        source=HospitalSource.Staff.value,
    )
    fields.update(overrides)
    async with factory() as db:
        hospital = Hospital(**fields)
        db.add(hospital)
        await db.commit()
        await db.refresh(hospital)
        return hospital


def overpass_node(el_id: int, lat: float, lon: float, **tags) -> dict:
    return {"type": "node", "id": el_id, "lat": lat, "lon": lon, "tags": tags}


def overpass_way(el_id: int, lat: float, lon: float, **tags) -> dict:
    return {"type": "way", "id": el_id, "center": {"lat": lat, "lon": lon}, "tags": tags}


class OverpassStub:
    """httpx transport handler that records queries and replays a canned response."""

    def __init__(
        self,
        elements: Optional[list[dict]] = None,
        status_code: int = 200,
        respond: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ):
        self.elements = elements or []
        self.status_code = status_code
        self.respond = respond
        self.queries: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        form = parse_qs(request.content.decode())
        self.queries.append(form.get("data", [""])[0])
        if self.respond is not None:
            return self.respond(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="Service Unavailable")
        return httpx.Response(
            200,
            content=json.dumps({"elements": self.elements}),
            headers={"content-type": "application/json; charset=utf-8"},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

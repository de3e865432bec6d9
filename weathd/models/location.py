"""Location descriptors: the ways a query can say "where".

Each variant renders to the single token the provider accepts as its
``q`` parameter.
"""

from abc import abstractmethod
from typing import Annotated, Literal

from pydantic import BaseModel, Field

AUTO_TOKEN = "auto:ip"


class _LocationBase(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    @abstractmethod
    def token(self) -> str:
        """The provider query token for this location."""

    def __str__(self) -> str:
        return self.token()


class Coordinate(_LocationBase):
    kind: Literal["coordinate"] = "coordinate"
    lat: float
    lon: float

    def token(self) -> str:
        return f"{self.lat},{self.lon}"


class City(_LocationBase):
    kind: Literal["city"] = "city"
    name: str

    def token(self) -> str:
        return self.name


class USZip(_LocationBase):
    kind: Literal["us_zip"] = "us_zip"
    code: int = Field(ge=0)

    def token(self) -> str:
        return f"{self.code:05d}"


class PostalCode(_LocationBase):
    kind: Literal["postal_code"] = "postal_code"
    code: str

    def token(self) -> str:
        return self.code


class MetarStation(_LocationBase):
    kind: Literal["metar"] = "metar"
    code: str

    def token(self) -> str:
        return f"metar:{self.code}"


class IataAirport(_LocationBase):
    kind: Literal["iata"] = "iata"
    code: str

    def token(self) -> str:
        return f"iata:{self.code}"


class Auto(_LocationBase):
    """Resolve from the caller's network origin."""

    kind: Literal["auto"] = "auto"

    def token(self) -> str:
        return AUTO_TOKEN


class IPAddress(_LocationBase):
    kind: Literal["ip"] = "ip"
    value: str

    def token(self) -> str:
        return self.value


class SavedSearchId(_LocationBase):
    kind: Literal["id"] = "id"
    id: int = Field(ge=0)

    def token(self) -> str:
        return f"id:{self.id}"


Location = Annotated[
    Coordinate
    | City
    | USZip
    | PostalCode
    | MetarStation
    | IataAirport
    | Auto
    | IPAddress
    | SavedSearchId,
    Field(discriminator="kind"),
]

LOCATION_KINDS = (
    "coordinate", "city", "us_zip", "postal_code",
    "metar", "iata", "auto", "ip", "id",
)


def render_location(location: Location) -> str:
    """Render a location to its query token."""
    return location.token()


def location_from(kind: str, value: str = "") -> Location:
    """Build a location from a kind name and raw text.

    Only the variant's shape is checked. Malformed numeric fields raise
    ValueError.
    """
    kind = kind.lower().strip()
    value = value.strip()
    if kind == "coordinate":
        lat, sep, lon = value.partition(",")
        if not sep:
            raise ValueError(f"Coordinate must be 'lat,lon', got {value!r}")
        return Coordinate(lat=float(lat), lon=float(lon))
    if kind == "city":
        return City(name=value)
    if kind == "us_zip":
        return USZip(code=int(value))
    if kind == "postal_code":
        return PostalCode(code=value)
    if kind == "metar":
        return MetarStation(code=value)
    if kind == "iata":
        return IataAirport(code=value)
    if kind == "auto":
        return Auto()
    if kind == "ip":
        return IPAddress(value=value)
    if kind == "id":
        return SavedSearchId(id=int(value))
    raise ValueError(f"Unknown location kind {kind!r}")

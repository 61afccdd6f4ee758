from __future__ import annotations
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def scaled(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)


@dataclass(frozen=True)
class SymbolLocation:
    """
    Four corners of a decoded symbol, in the pixel space of whichever
    buffer they were measured in.
    """
    top_left: Point
    top_right: Point
    bottom_left: Point
    bottom_right: Point

    def corners(self) -> tuple[Point, Point, Point, Point]:
        return self.top_left, self.top_right, self.bottom_left, self.bottom_right

    def translated(self, dx: float, dy: float) -> SymbolLocation:
        return SymbolLocation(*(p.translated(dx, dy) for p in self.corners()))

    def scaled(self, factor: float) -> SymbolLocation:
        return SymbolLocation(*(p.scaled(factor) for p in self.corners()))

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            "top_left": {"x": self.top_left.x, "y": self.top_left.y},
            "top_right": {"x": self.top_right.x, "y": self.top_right.y},
            "bottom_left": {"x": self.bottom_left.x, "y": self.bottom_left.y},
            "bottom_right": {"x": self.bottom_right.x, "y": self.bottom_right.y},
        }


@dataclass(frozen=True)
class DecodedSymbol:
    """
    Result of a successful decode plus provenance.

    Coordinates are only meaningful relative to the buffer they were decoded
    from; `translated` and `scaled` return new records for remapping.
    """
    text: str
    format: str | None = "QR Code"
    location: SymbolLocation | None = None
    region_name: str | None = None  # which crop found it
    recipe: str | None = None       # which enhancement recipe worked
    scale: float | None = None      # resample factor, phase C only

    def translated(self, dx: float, dy: float) -> DecodedSymbol:
        if self.location is None:
            return self
        return replace(self, location=self.location.translated(dx, dy))

    def scaled(self, factor: float) -> DecodedSymbol:
        if self.location is None:
            return self
        return replace(self, location=self.location.scaled(factor))

    def with_provenance(self, **fields) -> DecodedSymbol:
        return replace(self, **fields)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "format": self.format,
            "location": self.location.to_dict() if self.location else None,
            "region_name": self.region_name,
            "recipe": self.recipe,
            "scale": self.scale,
        }

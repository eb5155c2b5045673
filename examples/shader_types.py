"""Schemas of the complex data types used by the shader examples."""

from pydantic import BaseModel, Field


class Color(BaseModel):
    """Linear RGBA color."""

    r: float = Field(ge=0.0, le=1.0)
    g: float = Field(ge=0.0, le=1.0)
    b: float = Field(ge=0.0, le=1.0)
    a: float = Field(default=1.0, ge=0.0, le=1.0)


class ColorRamp(BaseModel):
    """Interpolation stops of a color ramp."""

    positions: list[float] = Field(min_length=2)
    interpolation: str = "linear"

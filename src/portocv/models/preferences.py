"""User-selected style knobs for portfolio synthesis."""

from __future__ import annotations

from typing import Literal

from portocv.models.base import WireModel

ThemeStyle = Literal["auto", "cyber", "minimal", "professional", "creative"]
BackgroundType = Literal["auto", "particles", "grid", "bokeh"]
AnimationType = Literal["auto", "fade", "slide", "scale"]
ColorModePref = Literal["auto", "dark", "light"]
PrimaryHue = Literal["auto", "blue", "green", "purple", "red", "orange", "monochrome"]


class UserPreferences(WireModel):
    theme_style: ThemeStyle = "auto"
    background_type: BackgroundType = "auto"
    animation_type: AnimationType = "auto"
    color_mode: ColorModePref = "auto"
    primary_hue: PrimaryHue = "auto"

    @property
    def all_auto(self) -> bool:
        return all(v == "auto" for v in self.model_dump().values())

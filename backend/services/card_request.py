"""
Boundary request models.

Inbound payloads use the camelCase field names of the card editor; these
models reject unknown enum tags and out-of-range frame overrides before
anything reaches the compositor.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from domain.models import (
    BlurIntensity,
    BorderPreset,
    CropAnchor,
    FramePresetId,
    GlowIntensity,
    GradientLightConfig,
    LayoutMode,
    LayoutVariantId,
    PanelColorId,
    ScalePreset,
    TextPanelContent,
    TextureType,
)
from services.card_composer import ComposeCardOptions
from services.frame_presets import INSET_MAX, INSET_MIN, THICKNESS_MAX, THICKNESS_MIN


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TextPanelPayload(_CamelModel):
    id: str
    text: str = ""


class GradientLightPayload(_CamelModel):
    top_brightness: float = Field(0.10, alias="topBrightness", ge=0, le=1)
    bottom_darkness: float = Field(0.06, alias="bottomDarkness", ge=0, le=1)
    stop_count: int = Field(3, alias="stopCount", ge=3, le=16)


class FrameRequest(_CamelModel):
    preset: FramePresetId = FramePresetId.NONE
    inset_offset: Optional[int] = Field(None, alias="insetOffset", ge=INSET_MIN, le=INSET_MAX)
    border_thickness: Optional[int] = Field(None, alias="borderThickness", ge=THICKNESS_MIN, le=THICKNESS_MAX)


class ComposeCardRequest(_CamelModel):
    prompt: Optional[str] = None
    text_panels: List[TextPanelPayload] = Field(default_factory=list, alias="textPanels")
    color_id: PanelColorId = Field(PanelColorId.OBSIDIAN, alias="colorId")
    layout_variant: Optional[LayoutVariantId] = Field(None, alias="layoutVariant")
    layout_mode: Optional[LayoutMode] = Field(None, alias="layoutMode")
    border_preset: Optional[BorderPreset] = Field(None, alias="borderPreset")
    texture: Optional[TextureType] = None
    blur: Optional[BlurIntensity] = None
    glow: Optional[GlowIntensity] = None
    scale: Optional[ScalePreset] = None
    crop_anchor: Optional[CropAnchor] = Field(None, alias="cropAnchor")
    gradient_light: Optional[GradientLightPayload] = Field(None, alias="gradientLight")
    frame: Optional[FrameRequest] = None

    @model_validator(mode="after")
    def _panel_ids_unique(self) -> "ComposeCardRequest":
        ids = [p.id for p in self.text_panels]
        if len(ids) != len(set(ids)):
            raise ValueError("textPanels ids must be unique")
        return self

    def to_options(self, background: bytes, illustration: bytes) -> ComposeCardOptions:
        light = None
        if self.gradient_light is not None:
            light = GradientLightConfig(
                top_brightness=self.gradient_light.top_brightness,
                bottom_darkness=self.gradient_light.bottom_darkness,
                stop_count=self.gradient_light.stop_count,
            )
        return ComposeCardOptions(
            background=background,
            illustration=illustration,
            text_panels=[TextPanelContent(panel_id=p.id, text=p.text) for p in self.text_panels],
            color_id=self.color_id,
            layout_variant=self.layout_variant,
            layout_mode=self.layout_mode,
            border_preset=self.border_preset,
            texture=self.texture,
            blur=self.blur,
            glow=self.glow,
            scale=self.scale,
            crop_anchor=self.crop_anchor,
            light=light,
        )

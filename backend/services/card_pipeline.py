"""
End-to-end card generation: background, compose, frame, store.
"""
import io
import logging
import uuid
from typing import Optional

from domain.errors import InvalidImageData
from domain.models import FramePresetId, StoredCard
from services.asset_cache import AssetCache
from services.card_composer import compose_card_detailed
from services.card_request import ComposeCardRequest
from services.frame_assembler import render_frame
from services.image_generation import NEGATIVE_PROMPT, ImageGenerator, build_background_prompt
from services.layout_catalogue import canvas_size_for, resolve_variant_id
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)


def generate_card(
    request: ComposeCardRequest,
    illustration: bytes,
    generator: Optional[ImageGenerator] = None,
    storage: Optional[FileStorage] = None,
    cache: Optional[AssetCache] = None,
    background: Optional[bytes] = None,
    card_id: Optional[str] = None,
) -> StoredCard:
    """
    Produce and store one finished card.

    A background is generated from ``request.prompt`` unless one is supplied.

    Raises:
        InvalidImageData: If neither a background nor a prompt and generator are available
        ImageGenerationError: If the generator fails
        CardError: Any compositor or frame failure, unwrapped
    """
    card_id = card_id or str(uuid.uuid4())
    storage = storage or FileStorage()
    variant = resolve_variant_id(request.layout_variant, request.layout_mode)

    generated = False
    if not background:
        if generator is None or not (request.prompt or "").strip():
            raise InvalidImageData("background image is empty and no prompt was given", stage="decode-background")
        width, height = canvas_size_for(variant)
        background = generator.generate(build_background_prompt(request.prompt), width, height, NEGATIVE_PROMPT)
        generated = True

    options = request.to_options(background=background, illustration=illustration)
    options.layout_variant = variant
    composed = compose_card_detailed(options)
    image = composed.image

    frame_preset = None
    if request.frame is not None and request.frame.preset != FramePresetId.NONE:
        frame_preset = request.frame.preset
        image = render_frame(
            image,
            frame_preset,
            orientation=variant,
            inset_offset=request.frame.inset_offset,
            edge_thickness=request.frame.border_thickness,
            cache=cache,
        )

    buf = io.BytesIO()
    image.save(buf, format="PNG")
    relative_path = storage.save_card(buf.getvalue(), card_id=card_id)
    logger.info("[compose] stored card %s at %s (generated background=%s)", card_id, relative_path, generated)
    return StoredCard(
        card_id=card_id,
        relative_path=relative_path,
        width=image.width,
        height=image.height,
        background_generated=generated,
        frame_preset=frame_preset,
    )

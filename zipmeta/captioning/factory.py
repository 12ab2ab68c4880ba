"""Factory: instantiate the caption generator from configuration."""

from zipmeta.utils.config import CaptioningConfig

from .base import BaseCaptionBackend
from .caption_generator import CaptionGenerator


def create_caption_backend(config: CaptioningConfig) -> BaseCaptionBackend:
    """Create the captioning backend selected by ``config.backend``.

    Backends are imported lazily so a deployment only pays for the one
    it uses.

    Raises:
        ValueError: If the backend is unknown or misconfigured.
    """
    if config.backend == "bedrock":
        from .bedrock_backend import BedrockCaptionBackend

        return BedrockCaptionBackend(
            model_id=config.bedrock_model_id,
            region=config.bedrock_region,
            prompt_template=config.prompt_template,
            max_tokens=config.max_tokens,
        )

    if config.backend == "http":
        from .http_backend import HttpCaptionBackend

        if not config.http_url:
            raise ValueError("captioning.http_url must be set when captioning.backend is 'http'")
        return HttpCaptionBackend(config.http_url, timeout_s=config.timeout_s)

    if config.backend == "local":
        from .local_backend import LocalCaptionBackend

        return LocalCaptionBackend(
            model_name=config.local_model_name,
            prompt_template=config.prompt_template,
            device=config.device,
        )

    raise ValueError(f"Unsupported caption backend: {config.backend!r}")


def create_caption_generator(config: CaptioningConfig) -> CaptionGenerator:
    """Create a caption generator wrapping the configured backend."""
    return CaptionGenerator(
        create_caption_backend(config),
        max_input_chars=config.max_input_chars,
        max_caption_length=config.max_caption_length,
    )

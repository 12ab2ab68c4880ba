"""Caption backend running a local Hugging Face seq2seq model.

Useful for offline runs; the model is loaded on first use and inference
runs in a worker thread.
"""

import asyncio
import threading

import torch
from transformers import AutoModelForSeq2SeqLM, AutoTokenizer

from zipmeta.utils.config import DEFAULT_PROMPT_TEMPLATE
from zipmeta.utils.logger import get_logger

from .base import BaseCaptionBackend, build_prompt

logger = get_logger(__name__)


class LocalCaptionBackend(BaseCaptionBackend):
    """Generates captions with a local text-to-text transformer.

    Args:
        model_name: Hugging Face model identifier.
        prompt_template: Template containing ``@FILE_CONTENT@``.
        device: Torch device (``"cuda"`` or ``"cpu"``). Auto-detected if ``None``.
        max_new_tokens: Upper bound on generated tokens.
    """

    def __init__(
        self,
        model_name: str = "google/flan-t5-small",
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
        device: str | None = None,
        max_new_tokens: int = 32,
    ) -> None:
        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        self.model_name = model_name
        self.prompt_template = prompt_template
        self.max_new_tokens = max_new_tokens
        self.tokenizer = None
        self.model = None
        self._load_lock = threading.Lock()

    def _ensure_loaded(self) -> None:
        with self._load_lock:
            if self.model is not None:
                return
            logger.info("Loading caption model: %s on %s", self.model_name, self.device)
            self.tokenizer = AutoTokenizer.from_pretrained(self.model_name)
            model = AutoModelForSeq2SeqLM.from_pretrained(self.model_name).to(self.device)
            model.eval()
            self.model = model

    def _generate(self, text: str) -> str:
        self._ensure_loaded()
        prompt = build_prompt(self.prompt_template, text)
        encoding = self.tokenizer(
            prompt, return_tensors="pt", truncation=True, max_length=512
        )
        encoding = {k: v.to(self.device) for k, v in encoding.items()}

        with torch.no_grad():
            output = self.model.generate(**encoding, max_new_tokens=self.max_new_tokens)

        return self.tokenizer.decode(output[0], skip_special_tokens=True).strip()

    async def generate_caption(self, text: str) -> str:
        return await asyncio.to_thread(self._generate, text)

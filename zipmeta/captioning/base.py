"""Abstract captioning backend interface and prompt rendering."""

from abc import ABC, abstractmethod

from zipmeta.utils.config import CONTENT_PLACEHOLDER


def build_prompt(template: str, text: str) -> str:
    """Insert document text into a prompt template.

    The stripped text replaces ``@FILE_CONTENT@``; newlines in the
    resulting prompt are flattened to spaces.
    """
    return template.replace(CONTENT_PLACEHOLDER, text.strip()).replace("\n", " ")


class BaseCaptionBackend(ABC):
    """Produces a short natural-language label for a document's text."""

    @abstractmethod
    async def generate_caption(self, text: str) -> str:
        """Ask the backend for a caption.

        Args:
            text: Cleaned document text, already truncated by the caller.

        Returns:
            The raw caption returned by the backend.

        Raises:
            CaptionBackendError: On transport errors or unusable responses.
        """

    async def aclose(self) -> None:
        """Release held connections. Backends without any keep the default."""

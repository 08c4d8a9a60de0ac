"""
Prompt capability classification.

Sandi Metz Principles:
- Single Responsibility: Infer required capabilities from a prompt
- Open/Closed: Swap the classifier without touching selection
"""

from typing import Dict, List, Protocol, Sequence

BASE_CAPABILITY = "text-generation"

DEFAULT_KEYWORDS: Dict[str, Sequence[str]] = {
    "code-generation": ("code", "function", "class"),
    "translation": ("translate",),
    "summarization": ("summar",),
}


class CapabilityClassifier(Protocol):
    """Infers the capability tags a prompt requires."""

    def required_capabilities(self, prompt: str) -> List[str]:
        """
        Get capabilities required to serve a prompt.

        Args:
            prompt: Prompt text

        Returns:
            Required capability tags
        """
        ...


class KeywordCapabilityClassifier:
    """
    Substring-matching classifier.

    Always requires text-generation, plus every capability whose
    keyword appears in the lowercased prompt.
    """

    def __init__(self, keywords: Dict[str, Sequence[str]] | None = None):
        """
        Initialize classifier.

        Args:
            keywords: Capability to keyword mapping (uses defaults if None)
        """
        self._keywords = keywords or DEFAULT_KEYWORDS

    def required_capabilities(self, prompt: str) -> List[str]:
        """Get capabilities required to serve a prompt."""
        text = prompt.lower()
        required = [BASE_CAPABILITY]

        for capability, keywords in self._keywords.items():
            if any(keyword in text for keyword in keywords):
                required.append(capability)

        return required

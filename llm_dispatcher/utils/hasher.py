"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Hash generation
- Small functions: Each does one thing
- Pure functions: No side effects
"""

import hashlib
import json
from typing import Any, Dict, Mapping

# Options that change what a provider would generate. Everything else
# (priority, timeout, fallback flag, streaming) is excluded from the key.
OUTPUT_AFFECTING_OPTIONS = (
    "model_id",
    "provider_id",
    "request_type",
    "max_tokens",
    "temperature",
    "top_p",
)


def canonicalize_prompt(prompt: str) -> str:
    """
    Canonicalize prompt for comparison.

    Args:
        prompt: Prompt text

    Returns:
        Prompt with surrounding whitespace removed
    """
    return prompt.strip()


def relevant_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Select options that affect generated output.

    Args:
        options: Request options

    Returns:
        Options restricted to output-affecting keys
    """
    return {key: options.get(key) for key in OUTPUT_AFFECTING_OPTIONS}


def generate_cache_key(prompt: str, options: Mapping[str, Any]) -> str:
    """
    Generate cache key for a prompt and its options.

    Args:
        prompt: Prompt text
        options: Request options

    Returns:
        Cache key (response:sha256hash)
    """
    payload = {
        "prompt": canonicalize_prompt(prompt),
        "options": relevant_options(options),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    hash_value = hashlib.sha256(canonical.encode()).hexdigest()
    return f"response:{hash_value}"

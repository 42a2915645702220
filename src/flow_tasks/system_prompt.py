# src/flow_tasks/system_prompt.py

"""
System prompts and generation profiles for the flow specification call.
The fallback model is smaller, so it gets a plainer role and a
bounded instruction body.
"""

from typing import Tuple

from config import GenerationProfile, ollama_config, flow_config


PRIMARY_SYSTEM_PROMPT = (
    "You are an expert voice AI agent designer. "
    "You must respond ONLY with valid JSON, no other text."
)

FALLBACK_SYSTEM_PROMPT = (
    "You are an expert at analyzing conversations. "
    "Respond ONLY with valid JSON."
)

PRIMARY_REMINDER = "\n\nRemember: Respond ONLY with valid JSON."
FALLBACK_REMINDER = "\n\nRespond ONLY with valid JSON."


def get_generation_profiles() -> Tuple[GenerationProfile, GenerationProfile]:
    """Return (primary, fallback) profiles built from the current config."""
    primary = GenerationProfile(
        name="primary",
        model=ollama_config.model,
        system_prompt=PRIMARY_SYSTEM_PROMPT,
        reminder=PRIMARY_REMINDER,
        temperature=flow_config.primary_temperature,
        max_tokens=flow_config.primary_max_tokens,
    )
    fallback = GenerationProfile(
        name="fallback",
        model=ollama_config.fallback_model,
        system_prompt=FALLBACK_SYSTEM_PROMPT,
        reminder=FALLBACK_REMINDER,
        temperature=flow_config.fallback_temperature,
        max_tokens=flow_config.fallback_max_tokens,
        max_instruction_chars=flow_config.fallback_max_instruction_chars,
    )
    return primary, fallback

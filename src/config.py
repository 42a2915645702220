# src/config.py

"""
Configuration settings for the Voice Flow Agent.
All environment variables and constants are managed here.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class OllamaConfig:
    """Ollama LLM configuration. Two models: primary and fallback."""
    host: str = os.getenv("OLLAMA_HOST", "localhost")
    port: int = int(os.getenv("OLLAMA_PORT", "11434"))
    model: str = os.getenv("OLLAMA_MODEL", "qwen2.5:14b")
    fallback_model: str = os.getenv("OLLAMA_FALLBACK_MODEL", "qwen2.5:3b")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


@dataclass
class WhisperConfig:
    """
    Whisper transcription configuration.

    language: None = auto-detect.
    """
    model_name: str = os.getenv("WHISPER_MODEL", "base")
    language: Optional[str] = os.getenv("WHISPER_LANGUAGE") or None


@dataclass
class PathConfig:
    """Default paths configuration."""
    output_dir: str = os.getenv("FLOW_OUTPUT_DIR", "./outputs")


@dataclass
class LLMParams:
    """
    Transport parameters for the Ollama client.
    Sampling settings per call come from a GenerationProfile.
    """
    num_ctx: int = 8192
    top_p: float = 0.85
    repeat_penalty: float = 1.1

    # Timeouts
    connect_timeout: int = 30
    stream_chunk_timeout: int = 600
    total_timeout: int = 900


@dataclass
class GenerationProfile:
    """
    A named model configuration for the flow specification call.

    max_instruction_chars: bound on the instruction body sent to this
    profile. None = send it whole.
    """
    name: str
    model: str
    system_prompt: str
    reminder: str
    temperature: float = 0.3
    max_tokens: int = 4000
    max_instruction_chars: Optional[int] = None


@dataclass
class FlowConfig:
    """What the flow specification request asks the generator for."""
    min_nodes: int = 5
    max_nodes: int = 10
    content_chars: int = 30

    # Profile sampling and sizing
    primary_temperature: float = 0.3
    primary_max_tokens: int = 4000
    fallback_temperature: float = 0.3
    fallback_max_tokens: int = 2000
    fallback_max_instruction_chars: int = 3000


@dataclass
class DiagramLimits:
    """
    Truncation budgets for Mermaid text.
    label/summary/condition are lengths of the emitted text;
    summary_source is how much of fullPrompt is read before sanitizing.
    """
    label: int = 30
    summary_source: int = 60
    summary: int = 50
    condition: int = 20


# Initialize
ollama_config = OllamaConfig()
whisper_config = WhisperConfig()
path_config = PathConfig()
llm_params = LLMParams()
flow_config = FlowConfig()
diagram_limits = DiagramLimits()

# src/flow_tasks/flow_request.py

"""
Flow specification request.
Assembles the instruction that asks the generator for a voice-agent
flow as JSON. Pure data assembly: no calls, no retries.
"""

from dataclasses import dataclass
from typing import Tuple

from config import GenerationProfile, flow_config
from flow_tasks.system_prompt import PRIMARY_SYSTEM_PROMPT


NO_SEPARATION_NOTE = (
    "NOTE: This transcript does not have speaker separation. Please analyze "
    "the content to identify conversation turns between agent and customer "
    "based on context clues like greetings, questions, confirmations, etc."
)


@dataclass
class RequestSpec:
    """System role plus the instruction body for one synthesis run."""
    system_prompt: str
    instruction: str
    has_speaker_separation: bool


def build_flow_request(
    text: str,
    has_speaker_separation: bool,
    min_nodes: int = None,
    max_nodes: int = None,
    content_chars: int = None
) -> RequestSpec:
    """Build the flow specification request around a conversation text."""
    min_nodes = min_nodes or flow_config.min_nodes
    max_nodes = max_nodes or flow_config.max_nodes
    content_chars = content_chars or flow_config.content_chars

    note = '' if has_speaker_separation else NO_SEPARATION_NOTE

    instruction = f"""Analyze this conversation transcript and create a comprehensive voice AI agent blueprint with detailed conversation flow.

{note}

Transcript:
{text}

Create a DETAILED voice AI agent blueprint. For each conversation node:

1. Extract the EXACT agent behavior and speaking patterns
2. Include decision logic and branching based on customer responses
3. Capture tone, pauses, and conversation tactics
4. Include error handling and fallback responses

Provide a JSON structure with:

"nodes": [
  {{
    "id": "node1",
    "type": "greeting"/"question"/"confirmation"/"decision"/"farewell",
    "speaker": "agent"/"customer",
    "content": "Brief description (max {content_chars} chars)",
    "fullPrompt": "Complete voice agent instruction including: What to say, how to say it, what to listen for, and next actions",
    "examples": ["Example phrases the agent should use"],
    "listenFor": ["Keywords or patterns to detect in customer response"],
    "nextActions": {{
      "positive": "nodeX",
      "negative": "nodeY",
      "unclear": "nodeZ"
    }},
    "timeout": seconds to wait for response,
    "retryPrompt": "What to say if no response"
  }}
],
"edges": [
  {{"from": "node1", "to": "node2", "condition": "when customer says yes/agrees"}}
],
"globalInstructions": "Overall agent personality and behavior guidelines",
"errorHandling": "What to do when conversation goes off-script"

IMPORTANT:
- Create comprehensive nodes that capture the FULL conversation logic
- Include at least {min_nodes}-{max_nodes} nodes to represent the complete flow
- Each node's fullPrompt should be self-contained instructions for the voice AI
- Include decision branches and error handling
- Extract actual phrases and patterns from the transcript"""

    return RequestSpec(
        system_prompt=PRIMARY_SYSTEM_PROMPT,
        instruction=instruction,
        has_speaker_separation=has_speaker_separation
    )


def for_profile(spec: RequestSpec, profile: GenerationProfile) -> Tuple[str, str]:
    """
    (system, user) messages for one generation profile.
    Weaker profiles get the instruction cut to their character budget.
    """
    body = spec.instruction
    if profile.max_instruction_chars is not None:
        body = body[:profile.max_instruction_chars]
    return profile.system_prompt or spec.system_prompt, body + profile.reminder

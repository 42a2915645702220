# src/flow_tasks/flow_response.py

"""
Flow response interpretation.

Attempts run as an explicit state machine:
    PRIMARY -> FALLBACK -> DEGRADED
Each generating state makes exactly one call; a failed call advances the
state. The raw text is then parsed directly, or by extracting the
embedded {...} span. Anything unusable yields the default flow.
"""

import json
import re
import time
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from config import GenerationProfile
from flow_models import FlowGraph
from flow_tasks.flow_request import RequestSpec, for_profile
from flow_tasks.utils import _timed, default_flow_data


_OBJECT_SPAN = re.compile(r'\{[\s\S]*\}')


class GenerationState(Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    DEGRADED = "degraded"


_TRANSITIONS = {
    GenerationState.PRIMARY: GenerationState.FALLBACK,
    GenerationState.FALLBACK: GenerationState.DEGRADED,
    GenerationState.DEGRADED: GenerationState.DEGRADED,
}


def next_state(state: GenerationState) -> GenerationState:
    """State entered after a failed attempt in `state`."""
    return _TRANSITIONS[state]


def profile_for(
    state: GenerationState,
    profiles: Sequence[GenerationProfile]
) -> Optional[GenerationProfile]:
    """Profile used by a generating state; None once degraded."""
    if state is GenerationState.PRIMARY and len(profiles) > 0:
        return profiles[0]
    if state is GenerationState.FALLBACK and len(profiles) > 1:
        return profiles[1]
    return None


# ============================================================
# GENERATION
# ============================================================

def request_completion(
    generator,
    spec: RequestSpec,
    profiles: Sequence[GenerationProfile]
) -> Tuple[Optional[str], GenerationState]:
    """
    Walk the attempt states until one yields text.

    `generator` needs the OllamaClient.generate signature. Returns the
    raw text (None when degraded) and the state that produced it.
    """
    state = GenerationState.PRIMARY

    while state is not GenerationState.DEGRADED:
        profile = profile_for(state, profiles)
        if profile is None:
            state = next_state(state)
            continue

        system, user = for_profile(spec, profile)
        print(
            f"    [FlowSpec] {state.value} attempt: {profile.model} "
            f"({len(user)} chars)"
        )
        try:
            text = generator.generate(
                user,
                system_prompt=system,
                model=profile.model,
                temperature=profile.temperature,
                max_tokens=profile.max_tokens,
                call_name=f"FlowSpec:{profile.name}"
            )
        except Exception as e:
            print(f"    [FlowSpec] ✗ {state.value} failed: {type(e).__name__}: {e}")
            text = None

        if isinstance(text, str) and text:
            return text, state

        print(f"    [FlowSpec] ✗ {state.value} attempt produced no output")
        state = next_state(state)

    print("    [FlowSpec] All generators failed, degrading to default flow")
    return None, state


# ============================================================
# PARSING
# ============================================================

def _loads_object(text: str) -> Optional[Dict]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def parse_flow_json(raw: Optional[str]) -> Optional[Dict]:
    """
    Parse generator output into a JSON object.
    Tries the whole text, then the span from the first '{' to the last '}'.
    """
    if not raw:
        return None

    data = _loads_object(raw)
    if data is not None:
        return data

    print(
        f"    [FlowSpec] Output is not bare JSON, first 200 chars: "
        f"{raw[:200]!r}"
    )
    match = _OBJECT_SPAN.search(raw)
    if match:
        data = _loads_object(match.group(0))
        if data is not None:
            print("    [FlowSpec] ✓ Extracted embedded JSON object")
            return data

    print("    [FlowSpec] ✗ No JSON object could be recovered")
    return None


def default_flow() -> FlowGraph:
    """The documented worst-case flow."""
    return FlowGraph.from_dict(default_flow_data())


def interpret(
    generator,
    spec: RequestSpec,
    profiles: Sequence[GenerationProfile]
) -> Tuple[FlowGraph, GenerationState]:
    """Run the generator state machine and turn its output into a FlowGraph."""
    start = time.time()
    raw, state = request_completion(generator, spec, profiles)
    data = parse_flow_json(raw)

    if data is None:
        flow = default_flow()
        print("    [FlowSpec] Using default 3-node flow")
    else:
        flow = FlowGraph.from_dict(data)
        print(
            f"    [FlowSpec] {len(flow.nodes)} nodes, "
            f"{len(flow.edges)} edges"
        )

    _timed("FlowSpec", start)
    return flow, state

# src/flow_tasks/__init__.py

"""
Flow synthesis tasks.
Split into focused modules for maintainability.

Public API — import everything from here:
    from flow_tasks import normalize, build_flow_request, interpret, render_mermaid
"""

# Utilities
from flow_tasks.utils import (
    sanitize_label,
    truncate_label,
    default_flow_data
)

# Transcript normalization + role inference
from flow_tasks.transcript_prep import (
    merge_transcriptions,
    split_sentences,
    classify_fragment,
    infer_roles,
    normalize
)

# Generator profiles
from flow_tasks.system_prompt import get_generation_profiles

# Flow specification request
from flow_tasks.flow_request import (
    RequestSpec,
    build_flow_request,
    for_profile
)

# Generator state machine + parsing
from flow_tasks.flow_response import (
    GenerationState,
    next_state,
    profile_for,
    request_completion,
    parse_flow_json,
    default_flow,
    interpret
)

# Mermaid rendering
from flow_tasks.mermaid_diagram import (
    render_mermaid,
    PLACEHOLDER_DIAGRAM,
    ERROR_DIAGRAM,
    NO_TRANSCRIPT_DIAGRAM
)

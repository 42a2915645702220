# src/flow_tasks/utils.py

"""
Shared utility functions for flow tasks.
Timing, text sanitization for diagram labels, and the default flow.
"""

import re
import time
from typing import Dict


# ============================================================
# Timing
# ============================================================

def _timed(name: str, start: float):
    """Log elapsed time for a task."""
    print(f"    [{name}] done in {time.time() - start:.1f}s")


# ============================================================
# Label Sanitization
# ============================================================

_WHITESPACE_RUN = re.compile(r'[\r\n\t]+')
_QUOTES = re.compile(r'[\'"]')
_PUNCTUATION = re.compile(r'[`~!@#$%^&*()+={}\[\]|\\:;<>?,./]')


def sanitize_label(text) -> str:
    """
    Make text safe inside a quoted Mermaid label.
    Control whitespace becomes a space; quotes and the punctuation
    Mermaid treats as syntax are removed.
    """
    text = text if isinstance(text, str) else str(text)
    text = _WHITESPACE_RUN.sub(' ', text)
    text = _QUOTES.sub('', text)
    text = _PUNCTUATION.sub('', text)
    return text.strip()


def truncate_label(text: str, limit: int) -> str:
    """Cut to `limit` chars, the last three being '...'."""
    if len(text) > limit:
        return text[:limit - 3] + '...'
    return text


# ============================================================
# Default Flow
# ============================================================

def default_flow_data() -> Dict:
    """
    Minimal greeting -> topic -> closing flow.
    Returned whenever no usable generator output exists.
    """
    return {
        "nodes": [
            {
                "id": "node1",
                "type": "greeting",
                "speaker": "agent",
                "content": "Greeting",
                "fullPrompt": "Start the conversation with a greeting",
                "examples": ["Hello", "Good day"],
                "listenFor": ["Hello", "Hi"],
                "nextActions": {"positive": "node2"}
            },
            {
                "id": "node2",
                "type": "question",
                "speaker": "agent",
                "content": "Main Topic",
                "fullPrompt": "Discuss the main topic",
                "examples": [],
                "listenFor": [],
                "nextActions": {"positive": "node3"}
            },
            {
                "id": "node3",
                "type": "farewell",
                "speaker": "agent",
                "content": "Closing",
                "fullPrompt": "End the conversation",
                "examples": ["Goodbye", "Thank you"],
                "listenFor": [],
                "nextActions": {}
            }
        ],
        "edges": [
            {"from": "node1", "to": "node2"},
            {"from": "node2", "to": "node3"}
        ],
        "prompts": {
            "node1": "Start with a greeting",
            "node2": "Discuss main topic",
            "node3": "Close conversation"
        },
        "globalInstructions": "Be helpful and professional",
        "errorHandling": "Ask for clarification if needed"
    }

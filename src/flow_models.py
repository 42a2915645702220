# src/flow_models.py

"""
Data model for transcripts and synthesized voice-agent flows.

Generator output is untrusted, so every from_dict here is tolerant:
missing or wrongly-typed fields fall back to empty values instead of
raising. Node ids stay opaque strings; the diagram renderer never emits
them directly.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


NODE_TYPES = (
    "greeting", "question", "confirmation", "decision",
    "farewell", "response", "other"
)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return _as_text(value)


def _as_text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, list):
        return []
    return [_as_text(v) for v in value if v is not None]


def _as_seconds(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip().rstrip("s"))
    except ValueError:
        return None


# ============================================================
# Transcripts
# ============================================================

@dataclass
class Utterance:
    """One attributed speech turn."""
    speaker: Optional[str]
    text: str

    @classmethod
    def from_dict(cls, data: Dict) -> "Utterance":
        speaker = data.get("speaker")
        return cls(
            speaker=None if speaker is None else _as_text(speaker),
            text=_as_text(data.get("text")),
        )

    def to_dict(self) -> Dict:
        return {"speaker": self.speaker, "text": self.text}


@dataclass
class Transcription:
    """Transcription result for one audio file."""
    filename: str
    text: str
    utterances: List[Utterance] = field(default_factory=list)
    language: str = "en"

    @classmethod
    def from_dict(cls, data: Dict, filename: str = "") -> "Transcription":
        """Accepts our own shape and AssemblyAI-style exports."""
        raw_utterances = data.get("utterances")
        if not isinstance(raw_utterances, list):
            raw_utterances = []
        utterances = [
            Utterance.from_dict(u) for u in raw_utterances
            if isinstance(u, dict) and u.get("text")
        ]
        language = data.get("language") or data.get("language_code") or "en"
        return cls(
            filename=_as_text(data.get("filename")) or filename,
            text=_as_text(data.get("text")),
            utterances=utterances,
            language=_as_text(language),
        )

    def to_dict(self) -> Dict:
        return {
            "filename": self.filename,
            "text": self.text,
            "utterances": [u.to_dict() for u in self.utterances],
            "language": self.language,
        }


# ============================================================
# Flow graph
# ============================================================

@dataclass
class Node:
    """One conversational step. id is None when the generator omitted it."""
    id: Optional[str]
    type: str = ""
    speaker: str = ""
    content: str = ""
    full_prompt: str = ""
    examples: List[str] = field(default_factory=list)
    listen_for: List[str] = field(default_factory=list)
    next_actions: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    retry_prompt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Node":
        if not isinstance(data, dict):
            return cls(id=None)
        next_actions = data.get("nextActions")
        if not isinstance(next_actions, dict):
            next_actions = {}
        return cls(
            id=_as_optional_text(data.get("id")),
            type=_as_text(data.get("type")),
            speaker=_as_text(data.get("speaker")),
            content=_as_text(data.get("content")),
            full_prompt=_as_text(data.get("fullPrompt")),
            examples=_as_text_list(data.get("examples")),
            listen_for=_as_text_list(data.get("listenFor")),
            next_actions={
                _as_text(k): _as_text(v)
                for k, v in next_actions.items() if v is not None
            },
            timeout=_as_seconds(data.get("timeout")),
            retry_prompt=_as_optional_text(data.get("retryPrompt")),
        )

    def to_dict(self) -> Dict:
        result = {
            "id": self.id,
            "type": self.type,
            "speaker": self.speaker,
            "content": self.content,
            "fullPrompt": self.full_prompt,
            "examples": list(self.examples),
            "listenFor": list(self.listen_for),
            "nextActions": dict(self.next_actions),
        }
        if self.timeout is not None:
            result["timeout"] = self.timeout
        if self.retry_prompt is not None:
            result["retryPrompt"] = self.retry_prompt
        return result


@dataclass
class Edge:
    """Directed transition. source/target reference Node ids."""
    source: Optional[str]
    target: Optional[str]
    condition: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "Edge":
        return cls(
            source=_as_optional_text(data.get("from")),
            target=_as_optional_text(data.get("to")),
            condition=_as_optional_text(data.get("condition")),
        )

    def to_dict(self) -> Dict:
        result = {"from": self.source, "to": self.target}
        if self.condition is not None:
            result["condition"] = self.condition
        return result


@dataclass
class FlowGraph:
    """
    Synthesized voice-agent flow.

    Nodes without an id are kept so that list positions match the
    generator's array; the renderer skips them.
    """
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    global_instructions: Optional[str] = None
    error_handling: Optional[str] = None
    prompts: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "FlowGraph":
        if not isinstance(data, dict):
            return cls()
        raw_nodes = data.get("nodes")
        raw_edges = data.get("edges")
        prompts = data.get("prompts")
        return cls(
            nodes=[
                Node.from_dict(n) for n in raw_nodes
            ] if isinstance(raw_nodes, list) else [],
            edges=[
                Edge.from_dict(e) for e in raw_edges if isinstance(e, dict)
            ] if isinstance(raw_edges, list) else [],
            global_instructions=_as_optional_text(
                data.get("globalInstructions")
            ),
            error_handling=_as_optional_text(data.get("errorHandling")),
            prompts={
                _as_text(k): _as_text(v) for k, v in prompts.items()
            } if isinstance(prompts, dict) else {},
        )

    def to_dict(self) -> Dict:
        result = {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
        if self.prompts:
            result["prompts"] = dict(self.prompts)
        if self.global_instructions is not None:
            result["globalInstructions"] = self.global_instructions
        if self.error_handling is not None:
            result["errorHandling"] = self.error_handling
        return result


@dataclass
class FlowResult:
    """What synthesize() hands back: the flow plus its Mermaid text."""
    flow: FlowGraph
    diagram: str
    transcript_text: str = ""
    has_speaker_separation: bool = False
    generation_state: Optional[str] = None

    def to_dict(self) -> Dict:
        result = self.flow.to_dict()
        result["mermaidDiagram"] = self.diagram
        return result

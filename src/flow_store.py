# src/flow_store.py

"""
Local persistence for synthesized flows.

Layout under <output_dir>/flows/<flow_id>/:
    flow.json     flow record (transcriptions, flow data, diagram, metadata)
    prompts.json  one row per node
    diagram.mmd   Mermaid text
    audio/        copies of the source audio files

Failures here are reported and swallowed into None/[]: storing a
result must never change it.
"""

import os
import json
import shutil
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from config import path_config
from flow_models import FlowResult, Transcription


class FlowStore:
    def __init__(self, output_dir: str = None):
        self.root = os.path.join(output_dir or path_config.output_dir, "flows")

    def _flow_dir(self, flow_id: str) -> str:
        return os.path.join(self.root, flow_id)

    def save_flow(
        self,
        result: FlowResult,
        transcriptions: Sequence[Transcription]
    ) -> Optional[str]:
        """Store a flow with its transcriptions. Returns the new flow id."""
        flow_id = uuid.uuid4().hex[:12]
        created_at = datetime.now(timezone.utc).isoformat()
        flow_data = result.to_dict()

        record = {
            "id": flow_id,
            "created_at": created_at,
            "name": f"Flow {created_at}",
            "description": (
                f"Conversation flow with {len(transcriptions)} audio file(s)"
            ),
            "transcriptions": [t.to_dict() for t in transcriptions],
            "flow_data": flow_data,
            "mermaid_diagram": result.diagram,
            "metadata": {
                "node_count": len(result.flow.nodes),
                "edge_count": len(result.flow.edges),
                "languages": sorted({t.language for t in transcriptions}),
                "generation_state": result.generation_state,
            }
        }
        prompts = [
            {
                "node_id": node.id,
                "node_type": node.type,
                "prompt_text": (
                    node.full_prompt or result.flow.prompts.get(node.id or "")
                ),
                "examples": node.examples,
                "listen_for": node.listen_for,
                "next_actions": node.next_actions,
                "metadata": {
                    "speaker": node.speaker,
                    "content": node.content
                }
            }
            for node in result.flow.nodes if node.id
        ]

        flow_dir = self._flow_dir(flow_id)
        try:
            os.makedirs(flow_dir, exist_ok=True)
            with open(os.path.join(flow_dir, "flow.json"), "w", encoding="utf-8") as f:
                json.dump(record, f, ensure_ascii=False, indent=2)
            with open(os.path.join(flow_dir, "prompts.json"), "w", encoding="utf-8") as f:
                json.dump(prompts, f, ensure_ascii=False, indent=2)
            with open(os.path.join(flow_dir, "diagram.mmd"), "w", encoding="utf-8") as f:
                f.write(result.diagram)
        except (OSError, TypeError, ValueError) as e:
            print(f"    [Store] ✗ Error storing conversation flow: {e}")
            return None

        print(f"  📁 Flow: {flow_dir}")
        return flow_id

    def save_audio_files(self, audio_paths: Sequence[str], flow_id: str) -> List[str]:
        """Copy source audio next to the stored flow. Returns stored paths."""
        audio_dir = os.path.join(self._flow_dir(flow_id), "audio")
        stored = []
        for path in audio_paths:
            target = os.path.join(audio_dir, os.path.basename(path))
            try:
                os.makedirs(audio_dir, exist_ok=True)
                shutil.copy2(path, target)
            except OSError as e:
                print(f"    [Store] ✗ Error storing audio file {path}: {e}")
                continue
            stored.append(target)
        return stored

    def _load_record(self, flow_id: str) -> Optional[Dict]:
        path = os.path.join(self._flow_dir(flow_id), "flow.json")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            print(f"    [Store] ✗ Error reading flow {flow_id}: {e}")
            return None

    def list_flows(self, limit: int = 10) -> List[Dict]:
        """Stored flow records, newest first."""
        if not os.path.isdir(self.root):
            return []
        records = []
        for flow_id in os.listdir(self.root):
            record = self._load_record(flow_id)
            if record:
                records.append(record)
        records.sort(key=lambda r: r.get("created_at", ""), reverse=True)
        return records[:limit]

    def get_flow(self, flow_id: str) -> Optional[Dict]:
        """One flow record with its prompts and audio files, or None."""
        if not flow_id or os.sep in flow_id or flow_id in (".", ".."):
            return None
        record = self._load_record(flow_id)
        if record is None:
            return None

        flow_dir = self._flow_dir(flow_id)
        try:
            with open(os.path.join(flow_dir, "prompts.json"), "r", encoding="utf-8") as f:
                record["prompts"] = json.load(f)
        except (OSError, json.JSONDecodeError):
            record["prompts"] = []

        audio_dir = os.path.join(flow_dir, "audio")
        record["audioFiles"] = sorted(
            os.listdir(audio_dir)
        ) if os.path.isdir(audio_dir) else []
        return record

# src/flow_agent.py

"""
Voice Flow Agent - Main Orchestrator.
Transcripts in, voice-agent flow + Mermaid diagram out.

Collaborators (generator, transcriber, store) are passed in so that each
agent owns its own handles and tests can swap in fakes.
"""

import os
import time
from typing import Callable, List, Optional, Sequence

from config import path_config, whisper_config
from flow_models import FlowGraph, FlowResult, Transcription
from flow_store import FlowStore
from llm_client import OllamaClient
from token_tracker import TokenTracker
from transcribe_audio import transcribe_audio, read_transcript
from flow_tasks import (
    normalize,
    build_flow_request,
    get_generation_profiles,
    interpret,
    render_mermaid,
    NO_TRANSCRIPT_DIAGRAM
)


class FlowAgent:
    def __init__(
        self,
        generator=None,
        store: Optional[FlowStore] = None,
        transcriber: Callable[..., Optional[Transcription]] = None,
        profiles=None,
        output_dir: str = None
    ):
        self.output_dir = output_dir or path_config.output_dir
        self.generator = generator or OllamaClient()
        self.store = store
        self.transcriber = transcriber or transcribe_audio
        self.profiles = profiles or get_generation_profiles()
        self._reset_tracker()

    def _reset_tracker(self):
        """Fresh per-run TokenTracker, attached to the generator if it records."""
        self.tracker = TokenTracker()
        if hasattr(self.generator, "set_tracker"):
            self.generator.set_tracker(self.tracker)

    def synthesize(self, transcriptions: Sequence[Transcription]) -> FlowResult:
        """
        Build the flow for a set of transcriptions.
        Never raises for bad input or generator failure: the worst case is
        the placeholder (no transcript) or the default 3-node flow.
        """
        print(f"\n[1/3] Normalizing {len(transcriptions)} transcription(s)...")
        text, has_separation = normalize(transcriptions)

        if not text.strip():
            print("  ✗ No transcript text available")
            return FlowResult(
                flow=FlowGraph(),
                diagram=NO_TRANSCRIPT_DIAGRAM,
                transcript_text=text,
                has_speaker_separation=has_separation
            )
        print(
            f"  Transcript: {len(text):,} chars "
            f"(speaker separation: {'yes' if has_separation else 'inferred'})"
        )

        print("\n[2/3] Generating flow specification...")
        spec = build_flow_request(text, has_separation)
        flow, state = interpret(self.generator, spec, self.profiles)

        print("\n[3/3] Rendering diagram...")
        diagram = render_mermaid(flow)
        print(f"  ✓ {len(flow.nodes)} nodes, {len(diagram.splitlines())} diagram lines")

        return FlowResult(
            flow=flow,
            diagram=diagram,
            transcript_text=text,
            has_speaker_separation=has_separation,
            generation_state=state.value
        )

    def _finish(
        self,
        transcriptions: List[Transcription],
        audio_paths: Sequence[str] = ()
    ) -> FlowResult:
        self._reset_tracker()
        result = self.synthesize(transcriptions)

        if self.store is not None:
            flow_id = self.store.save_flow(result, transcriptions)
            if flow_id and audio_paths:
                self.store.save_audio_files(audio_paths, flow_id)

        self.tracker.print_report()
        if self.store is not None and self.tracker.calls:
            try:
                self.tracker.save_csv(self.output_dir, "flow")
            except OSError as e:
                print(f"  ⚠ Token report not saved: {e}")
        return result

    def process_audio(
        self, audio_paths: Sequence[str], whisper_model: str = None
    ) -> Optional[FlowResult]:
        """Transcribe audio files one after another, then synthesize."""
        t0 = time.time()

        print("=" * 60)
        print("Voice Flow Agent")
        print(f"  Files: {len(audio_paths)}")
        print("=" * 60)

        transcriptions = []
        for path in audio_paths:
            if not os.path.exists(path):
                print(f"Error: {path} not found")
                return None
            print(f"\nTranscribing {os.path.basename(path)}...")
            transcription = self.transcriber(
                path, model_name=whisper_model or whisper_config.model_name
            )
            if transcription is None:
                return None
            transcriptions.append(transcription)

        result = self._finish(transcriptions, audio_paths)
        print(f"\n✓ Done ({(time.time() - t0) / 60:.1f}min)")
        return result

    def process_transcripts(self, transcript_paths: Sequence[str]) -> Optional[FlowResult]:
        """Synthesize from saved transcript files (.json or plain text)."""
        t0 = time.time()

        print("=" * 60)
        print("Voice Flow Agent - Transcript Only")
        print("=" * 60)

        transcriptions = []
        for path in transcript_paths:
            transcriptions.extend(read_transcript(path))
        if not transcriptions:
            return None

        result = self._finish(transcriptions)
        print(f"\n✓ Done ({(time.time() - t0) / 60:.1f}min)")
        return result


def generate_flow_from_audio(audio_paths, output_dir=None, whisper_model=None):
    output_dir = output_dir or path_config.output_dir
    return FlowAgent(
        store=FlowStore(output_dir), output_dir=output_dir
    ).process_audio(audio_paths, whisper_model=whisper_model)


def generate_flow_from_transcript(transcript_paths, output_dir=None):
    output_dir = output_dir or path_config.output_dir
    return FlowAgent(
        store=FlowStore(output_dir), output_dir=output_dir
    ).process_transcripts(transcript_paths)

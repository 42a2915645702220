# src/transcribe_audio.py

"""
Audio transcription using OpenAI's Whisper model, and loading of
previously saved transcripts.

Whisper does not separate speakers: every segment is attributed to a
single speaker "A", which sends the flow pipeline down its
role-inference path.
"""

import os
import json
from typing import List, Optional

from config import whisper_config
from flow_models import Transcription, Utterance


SINGLE_SPEAKER = "A"

_models = {}


def _load_model(model_name: str):
    """Load (and cache) a Whisper model. Imported lazily: it pulls in torch."""
    import whisper

    if model_name not in _models:
        print(f"    [Whisper] Loading model: {model_name}")
        _models[model_name] = whisper.load_model(model_name)
    return _models[model_name]


def transcribe_audio(
    audio_path: str,
    model_name: str = None,
    language: str = None
) -> Optional[Transcription]:
    """
    Transcribe one audio file.

    Args:
        audio_path: Path to the audio file.
        model_name: Whisper model to use (tiny, base, small, medium, large).
        language: Source language code (None = auto-detect).

    Returns:
        Transcription, or None if Whisper failed.
    """
    model_name = model_name or whisper_config.model_name
    language = language or whisper_config.language

    try:
        model = _load_model(model_name)
        print(f"    [Whisper] Transcribing: {audio_path} (lang={language or 'auto'})")
        result = model.transcribe(
            audio_path,
            word_timestamps=False,
            task="transcribe",
            language=language
        )
    except Exception as e:
        print(f"    [Whisper] ✗ Transcription error: {e}")
        return None

    utterances = [
        Utterance(speaker=SINGLE_SPEAKER, text=seg["text"].strip())
        for seg in result.get("segments", [])
        if seg.get("text", "").strip()
    ]
    transcription = Transcription(
        filename=os.path.basename(audio_path),
        text=result.get("text", "").strip(),
        utterances=utterances,
        language=result.get("language") or "en"
    )
    print(
        f"    [Whisper] ✓ {len(transcription.text):,} chars, "
        f"{len(utterances)} segments, language={transcription.language}"
    )
    return transcription


def read_transcript(transcript_path: str) -> List[Transcription]:
    """
    Read a saved transcript file.

    .json files hold one transcription object (AssemblyAI-style export
    or our own format) or a list of them. Anything else is read as
    plain text without utterances.

    Returns:
        Transcriptions found, empty list if the file is unreadable.
    """
    filename = os.path.basename(transcript_path)
    try:
        with open(transcript_path, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        print(f"    [Transcript] ✗ File not found: {transcript_path}")
        return []
    except (OSError, UnicodeDecodeError) as e:
        print(f"    [Transcript] ✗ Error reading {transcript_path}: {e}")
        return []

    if not transcript_path.lower().endswith(".json"):
        return [Transcription(filename=filename, text=content.strip())]

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        print(f"    [Transcript] ✗ Invalid JSON in {transcript_path}: {e}")
        return []

    items = data if isinstance(data, list) else [data]
    return [
        Transcription.from_dict(item, filename=filename)
        for item in items if isinstance(item, dict)
    ]

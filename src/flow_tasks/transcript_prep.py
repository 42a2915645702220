# src/flow_tasks/transcript_prep.py

"""
Transcript normalization.
Merges per-file transcriptions into one conversation text and, when
diarization did not separate speakers, infers Agent/Customer turns
from phrase patterns. Pure code, no LLM involved.
"""

import re
from typing import List, Sequence, Tuple

from flow_models import Transcription


# ============================================================
# ROLE PATTERNS — checked in order, agent before customer
# ============================================================

# Spanish and English phrasing seen in outbound service calls
AGENT_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in (
        r'hablo de parte de',
        r'me comunico con',
        r'le llamo por',
        r'dejar[ée] registro',
        r'necesita ayuda',
        r'puede realizar',
        r'calling from',
        r'this is.*from',
        r'can help you',
    )
]

CUSTOMER_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in (
        r's[íi] se[ñn]orita',
        r's[íi] se[ñn]or',
        r'un gusto',
        r'okay',
        r'yes',
        r'no problem',
    )
]

_SENTENCE_END = re.compile(r'[.?!]+')


# ============================================================
# MERGING
# ============================================================

def merge_transcriptions(
    transcriptions: Sequence[Transcription]
) -> Tuple[str, bool]:
    """
    Build one conversation text from all files.

    Returns (text, has_speaker_separation). Speaker lines are only used
    when the utterances carry more than one distinct label; otherwise
    the full per-file texts are joined with blank lines.
    """
    utterances = [u for t in transcriptions for u in t.utterances]
    full_text = '\n\n'.join(t.text or '' for t in transcriptions)

    if not utterances:
        print("    [Transcript] No utterances found, using full text")
        return full_text, False

    speakers = {u.speaker for u in utterances}
    if len(speakers) > 1:
        print(
            f"    [Transcript] {len(utterances)} utterances, "
            f"{len(speakers)} speakers"
        )
        text = '\n'.join(f"Speaker {u.speaker}: {u.text}" for u in utterances)
        return text, True

    print("    [Transcript] Single speaker detected, inferring turns from content")
    return full_text, False


# ============================================================
# ROLE INFERENCE
# ============================================================

def split_sentences(text: str) -> List[str]:
    """Split on sentence-ending punctuation, dropping empty fragments."""
    return [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]


def classify_fragment(fragment: str, index: int) -> str:
    """Label one fragment 'Agent' or 'Customer'."""
    if any(p.search(fragment) for p in AGENT_PATTERNS):
        return "Agent"
    if any(p.search(fragment) for p in CUSTOMER_PATTERNS):
        return "Customer"
    return "Agent" if index % 2 == 0 else "Customer"


def infer_roles(text: str) -> str:
    """Rewrite undiarized text as 'Agent: ...' / 'Customer: ...' lines."""
    sentences = split_sentences(text)
    if not sentences:
        return text

    lines = [
        f"{classify_fragment(s, i)}: {s}" for i, s in enumerate(sentences)
    ]
    print(f"    [Transcript] Inferred roles for {len(lines)} fragments")
    return '\n'.join(lines)


def normalize(transcriptions: Sequence[Transcription]) -> Tuple[str, bool]:
    """
    Merge transcriptions and infer roles where needed.

    has_speaker_separation stays False after inference: the roles are
    guesses and the request tells the generator so.
    """
    text, has_speaker_separation = merge_transcriptions(transcriptions)
    if not has_speaker_separation and text.strip():
        text = infer_roles(text)
    return text, has_speaker_separation

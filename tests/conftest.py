import pytest

from config import GenerationProfile


class FakeGenerator:
    """Stands in for OllamaClient. Each item in `outcomes` is returned in
    turn; exceptions are raised instead."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate(self, prompt, system_prompt=None, model=None,
                 temperature=None, max_tokens=None, call_name=None):
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "call_name": call_name,
        })
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def make_generator():
    return FakeGenerator


@pytest.fixture
def profiles():
    primary = GenerationProfile(
        name="primary",
        model="big-model",
        system_prompt="primary system",
        reminder="\n\nRemember: JSON.",
        temperature=0.3,
        max_tokens=4000,
    )
    fallback = GenerationProfile(
        name="fallback",
        model="small-model",
        system_prompt="fallback system",
        reminder="\n\nJSON.",
        temperature=0.3,
        max_tokens=2000,
        max_instruction_chars=300,
    )
    return primary, fallback


@pytest.fixture
def flow_json():
    return (
        '{"nodes": ['
        '{"id": "greet", "type": "greeting", "speaker": "agent", '
        '"content": "Greeting", "fullPrompt": "Say hello"},'
        '{"id": "ask", "type": "question", "speaker": "agent", '
        '"content": "Ask reason", "fullPrompt": "Ask why they called"},'
        '{"id": "bye", "type": "farewell", "speaker": "agent", '
        '"content": "Goodbye"}'
        '], "edges": ['
        '{"from": "greet", "to": "ask", "condition": "customer answers"},'
        '{"from": "ask", "to": "bye"}'
        '], "globalInstructions": "Be polite"}'
    )

from flow_tasks.flow_request import (
    NO_SEPARATION_NOTE,
    build_flow_request,
    for_profile,
)


TRANSCRIPT = "Speaker 1: Hello, this is Acme.\nSpeaker 2: Hi."


def test_request_embeds_transcript_and_schema():
    spec = build_flow_request(TRANSCRIPT, True)
    assert TRANSCRIPT in spec.instruction
    for field in ("fullPrompt", "listenFor", "nextActions", "retryPrompt",
                  "timeout", "globalInstructions", "errorHandling"):
        assert field in spec.instruction
    assert '"from": "node1", "to": "node2", "condition"' in spec.instruction
    assert "max 30 chars" in spec.instruction
    assert "at least 5-10 nodes" in spec.instruction
    assert spec.has_speaker_separation is True


def test_caveat_only_without_speaker_separation():
    assert NO_SEPARATION_NOTE not in build_flow_request(TRANSCRIPT, True).instruction
    assert NO_SEPARATION_NOTE in build_flow_request(TRANSCRIPT, False).instruction


def test_node_count_and_content_budget_are_configurable():
    spec = build_flow_request(TRANSCRIPT, True, min_nodes=3, max_nodes=6, content_chars=40)
    assert "at least 3-6 nodes" in spec.instruction
    assert "max 40 chars" in spec.instruction


def test_primary_profile_gets_whole_instruction(profiles):
    primary, _ = profiles
    spec = build_flow_request("x" * 5000, True)
    system, user = for_profile(spec, primary)
    assert system == "primary system"
    assert user == spec.instruction + primary.reminder


def test_fallback_profile_gets_bounded_instruction(profiles):
    _, fallback = profiles
    spec = build_flow_request("x" * 5000, True)
    system, user = for_profile(spec, fallback)
    assert system == "fallback system"
    assert user == spec.instruction[:300] + fallback.reminder
    assert len(user) == 300 + len(fallback.reminder)

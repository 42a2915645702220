import requests

from flow_tasks.flow_request import build_flow_request
from flow_tasks.flow_response import (
    GenerationState,
    next_state,
    profile_for,
    request_completion,
    parse_flow_json,
    default_flow,
    interpret,
)


def _spec():
    return build_flow_request("Agent: Hello\nCustomer: Hi", False)


# ============================================================
# State machine
# ============================================================

def test_transitions():
    assert next_state(GenerationState.PRIMARY) is GenerationState.FALLBACK
    assert next_state(GenerationState.FALLBACK) is GenerationState.DEGRADED
    assert next_state(GenerationState.DEGRADED) is GenerationState.DEGRADED


def test_profile_for_states(profiles):
    primary, fallback = profiles
    assert profile_for(GenerationState.PRIMARY, profiles) is primary
    assert profile_for(GenerationState.FALLBACK, profiles) is fallback
    assert profile_for(GenerationState.DEGRADED, profiles) is None
    assert profile_for(GenerationState.FALLBACK, (primary,)) is None


def test_primary_success_makes_one_call(make_generator, profiles):
    generator = make_generator(['{"nodes": []}'])
    text, state = request_completion(generator, _spec(), profiles)
    assert text == '{"nodes": []}'
    assert state is GenerationState.PRIMARY
    assert len(generator.calls) == 1
    call = generator.calls[0]
    assert call["model"] == "big-model"
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 4000
    assert call["call_name"] == "FlowSpec:primary"


def test_fallback_after_primary_failure(make_generator, profiles):
    spec = _spec()
    generator = make_generator([None, '{"nodes": []}'])
    text, state = request_completion(generator, spec, profiles)
    assert state is GenerationState.FALLBACK
    assert [c["model"] for c in generator.calls] == ["big-model", "small-model"]
    fallback_call = generator.calls[1]
    assert fallback_call["system_prompt"] == "fallback system"
    assert fallback_call["prompt"] == spec.instruction[:300] + "\n\nJSON."
    assert fallback_call["max_tokens"] == 2000


def test_transport_errors_count_as_failures(make_generator, profiles):
    generator = make_generator([
        requests.exceptions.ConnectionError("down"),
        requests.exceptions.Timeout("slow"),
    ])
    text, state = request_completion(generator, _spec(), profiles)
    assert text is None
    assert state is GenerationState.DEGRADED
    assert len(generator.calls) == 2


def test_empty_output_counts_as_failure(make_generator, profiles):
    generator = make_generator(["", None])
    text, state = request_completion(generator, _spec(), profiles)
    assert text is None
    assert state is GenerationState.DEGRADED


# ============================================================
# Parsing
# ============================================================

def test_parse_direct():
    assert parse_flow_json('{"nodes": [], "edges": []}') == {"nodes": [], "edges": []}


def test_parse_extracts_embedded_object():
    raw = (
        'Sure, here is the flow:\n'
        '{"nodes":[{"id":"a","content":"Hi"}],"edges":[]}\n'
        'Hope this helps!'
    )
    assert parse_flow_json(raw) == {"nodes": [{"id": "a", "content": "Hi"}], "edges": []}


def test_parse_extracts_from_code_fence():
    raw = '```json\n{"nodes": [{"id": "n1"}]}\n```'
    assert parse_flow_json(raw) == {"nodes": [{"id": "n1"}]}


def test_parse_rejects_non_objects_and_garbage():
    assert parse_flow_json("[1, 2, 3]") is None
    assert parse_flow_json("no json here") is None
    assert parse_flow_json("{broken: json}") is None
    assert parse_flow_json("") is None
    assert parse_flow_json(None) is None


# ============================================================
# interpret
# ============================================================

def test_default_flow_shape():
    flow = default_flow()
    assert [n.id for n in flow.nodes] == ["node1", "node2", "node3"]
    assert [n.type for n in flow.nodes] == ["greeting", "question", "farewell"]
    assert [(e.source, e.target) for e in flow.edges] == [
        ("node1", "node2"), ("node2", "node3")
    ]
    assert flow.prompts["node2"] == "Discuss main topic"
    assert flow.global_instructions == "Be helpful and professional"


def test_interpret_parses_generator_output(make_generator, profiles, flow_json):
    flow, state = interpret(make_generator([flow_json]), _spec(), profiles)
    assert state is GenerationState.PRIMARY
    assert [n.id for n in flow.nodes] == ["greet", "ask", "bye"]
    assert flow.edges[0].condition == "customer answers"
    assert flow.global_instructions == "Be polite"


def test_interpret_total_failure_gives_default(make_generator, profiles):
    flow, state = interpret(make_generator([None, None]), _spec(), profiles)
    assert state is GenerationState.DEGRADED
    assert len(flow.nodes) == 3
    assert flow.nodes[0].content == "Greeting"


def test_interpret_unparseable_output_gives_default(make_generator, profiles):
    generator = make_generator(["I cannot help with that."])
    flow, state = interpret(generator, _spec(), profiles)
    assert state is GenerationState.PRIMARY
    assert len(generator.calls) == 1
    assert [n.id for n in flow.nodes] == ["node1", "node2", "node3"]


def test_interpret_keeps_nodes_without_id(make_generator, profiles):
    raw = '{"nodes": [{"content": "orphan"}, {"id": "b"}], "edges": []}'
    flow, _ = interpret(make_generator([raw]), _spec(), profiles)
    assert [n.id for n in flow.nodes] == [None, "b"]


def test_any_generator_exception_counts_as_failure(make_generator, profiles):
    generator = make_generator([TypeError("bad chunk"), '{"nodes": []}'])
    text, state = request_completion(generator, _spec(), profiles)
    assert text == '{"nodes": []}'
    assert state is GenerationState.FALLBACK


def test_non_text_output_counts_as_failure(make_generator, profiles):
    generator = make_generator([{"nodes": []}, 42])
    text, state = request_completion(generator, _spec(), profiles)
    assert text is None
    assert state is GenerationState.DEGRADED
    assert len(generator.calls) == 2

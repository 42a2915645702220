from flow_models import Edge, FlowGraph, FlowResult, Node, Transcription


def test_flow_from_non_mapping_is_empty():
    for data in (None, "text", [1, 2], 42):
        flow = FlowGraph.from_dict(data)
        assert flow.nodes == [] and flow.edges == []


def test_flow_from_dict_tolerates_bad_shapes():
    flow = FlowGraph.from_dict({
        "nodes": [{"id": 7, "type": "question", "examples": "one", "listenFor": None,
                   "nextActions": ["not", "a", "map"], "timeout": "15"},
                  "junk",
                  {"content": "no id"}],
        "edges": [{"from": 7, "to": "x", "condition": ""}, "junk"],
        "prompts": "nope",
    })
    first = flow.nodes[0]
    assert first.id == "7"
    assert first.examples == ["one"]
    assert first.listen_for == []
    assert first.next_actions == {}
    assert first.timeout == 15.0
    assert flow.nodes[1].id is None
    assert flow.nodes[2].id is None and flow.nodes[2].content == "no id"
    assert len(flow.edges) == 1
    assert flow.edges[0].source == "7" and flow.edges[0].condition is None
    assert flow.prompts == {}


def test_node_timeout_parsing():
    assert Node.from_dict({"id": "a", "timeout": 10}).timeout == 10
    assert Node.from_dict({"id": "a", "timeout": "5s"}).timeout == 5.0
    assert Node.from_dict({"id": "a", "timeout": "soon"}).timeout is None
    assert Node.from_dict({"id": "a", "timeout": True}).timeout is None


def test_flow_to_dict_uses_external_keys(flow_json):
    import json
    data = json.loads(flow_json)
    out = FlowGraph.from_dict(data).to_dict()
    assert out["nodes"][0]["fullPrompt"] == "Say hello"
    assert out["nodes"][0]["listenFor"] == []
    assert out["edges"][0] == {"from": "greet", "to": "ask", "condition": "customer answers"}
    assert out["edges"][1] == {"from": "ask", "to": "bye"}
    assert out["globalInstructions"] == "Be polite"
    assert "errorHandling" not in out


def test_node_round_trip_keeps_optional_fields():
    node = Node.from_dict({"id": "n", "retryPrompt": "Are you there?", "timeout": 8,
                           "nextActions": {"positive": "m"}})
    assert Node.from_dict(node.to_dict()) == node


def test_edge_from_dict():
    edge = Edge.from_dict({"from": "a", "to": "b", "condition": "yes"})
    assert (edge.source, edge.target, edge.condition) == ("a", "b", "yes")


def test_transcription_from_assemblyai_export():
    t = Transcription.from_dict({
        "text": "Hola. Sí.",
        "language_code": "es",
        "utterances": [
            {"speaker": "A", "text": "Hola", "start": 0, "end": 500},
            {"speaker": "B", "text": "Sí"},
            {"speaker": "B", "text": ""},
        ],
    }, filename="call.wav")
    assert t.filename == "call.wav"
    assert t.language == "es"
    assert [(u.speaker, u.text) for u in t.utterances] == [("A", "Hola"), ("B", "Sí")]


def test_transcription_defaults():
    t = Transcription.from_dict({"text": "hi"})
    assert t.language == "en"
    assert t.utterances == []
    assert Transcription.from_dict(t.to_dict()) == t


def test_flow_result_to_dict_adds_diagram():
    result = FlowResult(flow=FlowGraph(), diagram="graph TD")
    assert result.to_dict() == {"nodes": [], "edges": [], "mermaidDiagram": "graph TD"}


def test_transcription_ignores_non_list_utterances():
    for value in (5, "A: hi", {"speaker": "A"}, None):
        assert Transcription.from_dict({"text": "hi", "utterances": value}).utterances == []

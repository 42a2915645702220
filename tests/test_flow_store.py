import json
import os

from flow_models import FlowResult, Transcription
from flow_store import FlowStore
from flow_tasks import default_flow, render_mermaid


def _result():
    flow = default_flow()
    flow.nodes[1].full_prompt = ""
    return FlowResult(flow=flow, diagram=render_mermaid(flow), generation_state="degraded")


def _transcriptions():
    return [
        Transcription(filename="a.mp3", text="Hola", language="es"),
        Transcription(filename="b.mp3", text="Hello"),
    ]


def test_save_and_get_flow(tmp_path):
    store = FlowStore(str(tmp_path))
    result = _result()
    flow_id = store.save_flow(result, _transcriptions())
    assert flow_id

    flow_dir = tmp_path / "flows" / flow_id
    assert (flow_dir / "diagram.mmd").read_text() == result.diagram

    record = store.get_flow(flow_id)
    assert record["description"] == "Conversation flow with 2 audio file(s)"
    assert record["metadata"]["node_count"] == 3
    assert record["metadata"]["edge_count"] == 2
    assert record["metadata"]["languages"] == ["en", "es"]
    assert record["flow_data"]["mermaidDiagram"] == result.diagram
    assert record["transcriptions"][0]["filename"] == "a.mp3"
    assert record["audioFiles"] == []


def test_prompt_rows_fall_back_to_prompt_map(tmp_path):
    store = FlowStore(str(tmp_path))
    flow_id = store.save_flow(_result(), _transcriptions())
    rows = store.get_flow(flow_id)["prompts"]
    assert [r["node_id"] for r in rows] == ["node1", "node2", "node3"]
    assert rows[0]["prompt_text"] == "Start the conversation with a greeting"
    assert rows[1]["prompt_text"] == "Discuss main topic"
    assert rows[0]["metadata"] == {"speaker": "agent", "content": "Greeting"}
    assert rows[0]["next_actions"] == {"positive": "node2"}


def test_list_flows_newest_first(tmp_path):
    store = FlowStore(str(tmp_path))
    first = store.save_flow(_result(), _transcriptions())
    second = store.save_flow(_result(), _transcriptions())

    # Make ordering independent of clock resolution
    path = tmp_path / "flows" / first / "flow.json"
    record = json.loads(path.read_text())
    record["created_at"] = "2000-01-01T00:00:00+00:00"
    path.write_text(json.dumps(record))

    assert [r["id"] for r in store.list_flows()] == [second, first]
    assert [r["id"] for r in store.list_flows(limit=1)] == [second]


def test_list_flows_empty_store(tmp_path):
    assert FlowStore(str(tmp_path / "nothing")).list_flows() == []


def test_get_unknown_flow(tmp_path):
    store = FlowStore(str(tmp_path))
    assert store.get_flow("does-not-exist") is None
    assert store.get_flow("..") is None
    assert store.get_flow("") is None


def test_save_audio_files(tmp_path):
    store = FlowStore(str(tmp_path))
    flow_id = store.save_flow(_result(), _transcriptions())
    audio = tmp_path / "call.mp3"
    audio.write_bytes(b"ID3")

    stored = store.save_audio_files([str(audio), str(tmp_path / "missing.mp3")], flow_id)
    assert len(stored) == 1
    assert os.path.basename(stored[0]) == "call.mp3"
    assert store.get_flow(flow_id)["audioFiles"] == ["call.mp3"]


def test_save_failure_returns_none(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert FlowStore(str(blocker)).save_flow(_result(), _transcriptions()) is None

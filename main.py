# main.py
"""
Main entry point for the Voice Flow Agent.
CLI interface for audio and transcript processing.
"""

import argparse
import json
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from flow_agent import generate_flow_from_audio, generate_flow_from_transcript
from flow_store import FlowStore
from llm_client import llm_client
from config import path_config


def _write_outputs(result, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    flow_path = os.path.join(output_dir, "flow.json")
    diagram_path = os.path.join(output_dir, "flow.mmd")
    with open(flow_path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
    with open(diagram_path, 'w', encoding='utf-8') as f:
        f.write(result.diagram)
    print(f"  📁 {flow_path}")
    print(f"  📁 {diagram_path}")


def main():
    parser = argparse.ArgumentParser(
        description="Voice Flow Agent - Convert recorded calls to voice-agent flows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py audio call1.mp3 call2.wav
  python main.py transcript call.json
  python main.py flows -n 5
  python main.py show 3f2a9c1b7d4e
  python main.py --check
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Processing mode")

    # Audio mode
    ap = subparsers.add_parser("audio", help="Transcribe audio files and build a flow")
    ap.add_argument("input_files", nargs="+", help="Audio file paths")
    ap.add_argument("-o", "--output", default=path_config.output_dir, help="Output directory")
    ap.add_argument("-w", "--whisper-model", default=None,
                    choices=["tiny", "base", "small", "medium", "large", "large-v2"])

    # Transcript mode
    tp = subparsers.add_parser("transcript", help="Build a flow from saved transcripts")
    tp.add_argument("input_files", nargs="+", help="Transcript files (.json or .txt)")
    tp.add_argument("-o", "--output", default=path_config.output_dir, help="Output directory")

    # Stored flows
    lp = subparsers.add_parser("flows", help="List stored flows")
    lp.add_argument("-n", "--limit", type=int, default=10)
    lp.add_argument("-o", "--output", default=path_config.output_dir, help="Output directory")

    sp = subparsers.add_parser("show", help="Print one stored flow as JSON")
    sp.add_argument("flow_id")
    sp.add_argument("-o", "--output", default=path_config.output_dir, help="Output directory")

    parser.add_argument("--check", action="store_true", help="Check LLM availability")

    args = parser.parse_args()

    if args.check:
        if llm_client.is_available():
            print(f"✓ Ollama connected")
            print(f"  Model: {llm_client.config.model}")
            print(f"  Fallback: {llm_client.config.fallback_model}")
            print(f"  Server: {llm_client.config.base_url}")
            info = llm_client.get_model_info()
            if info:
                details = info.get('details', {})
                print(f"  Family: {details.get('family', '?')}")
                print(f"  Parameters: {details.get('parameter_size', '?')}")
            return 0
        else:
            print(f"✗ Cannot connect to {llm_client.config.base_url}")
            return 1

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "flows":
        flows = FlowStore(args.output).list_flows(args.limit)
        if not flows:
            print("No stored flows")
        for record in flows:
            meta = record.get("metadata", {})
            print(
                f"{record['id']}  {record.get('created_at', '')}  "
                f"nodes={meta.get('node_count', 0)}  "
                f"edges={meta.get('edge_count', 0)}  "
                f"{record.get('description', '')}"
            )
        return 0

    if args.command == "show":
        record = FlowStore(args.output).get_flow(args.flow_id)
        if record is None:
            print(f"Error: Flow not found: {args.flow_id}")
            return 1
        print(json.dumps(record, ensure_ascii=False, indent=2))
        return 0

    missing = [p for p in args.input_files if not os.path.exists(p)]
    if missing:
        print(f"Error: File not found: {', '.join(missing)}")
        return 1

    if not llm_client.is_available():
        print(
            f"Warning: Ollama not available at {llm_client.config.base_url}, "
            f"the default flow will be used"
        )

    if args.command == "audio":
        result = generate_flow_from_audio(
            args.input_files,
            output_dir=args.output,
            whisper_model=args.whisper_model
        )
    elif args.command == "transcript":
        result = generate_flow_from_transcript(
            args.input_files,
            output_dir=args.output
        )
    else:
        parser.print_help()
        return 1

    if result is None:
        return 1

    _write_outputs(result, args.output)
    print("\n" + result.diagram)
    return 0


if __name__ == "__main__":
    sys.exit(main())

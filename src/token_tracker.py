# src/token_tracker.py

"""
Token tracking for generator calls.
Records prompt, system and response sizes plus timing for every call,
including failed ones, so primary/fallback usage is visible per run.

Token estimation uses the ~4 characters per token approximation.
Ollama also returns actual token counts in streaming responses when available.
"""

import os
import csv
import time
from typing import Dict, List
from dataclasses import dataclass

from config import path_config


@dataclass
class CallRecord:
    """Record of a single generator call."""
    call_name: str
    model: str
    prompt_tokens_est: int
    system_tokens_est: int
    response_tokens_est: int
    duration_seconds: float
    succeeded: bool
    prompt_tokens_actual: int = 0
    response_tokens_actual: int = 0

    @property
    def total_tokens_est(self) -> int:
        return (
            self.prompt_tokens_est + self.system_tokens_est
            + self.response_tokens_est
        )

    @property
    def total_tokens_actual(self) -> int:
        return self.prompt_tokens_actual + self.response_tokens_actual


def estimate_tokens(text: str) -> int:
    """Estimate token count. ~4 chars per token."""
    if not text:
        return 0
    return max(1, len(text) // 4)


class TokenTracker:
    """
    Tracks token usage across the generator calls of one agent.

    Usage:
        tracker = TokenTracker()
        client.set_tracker(tracker)
        ...
        tracker.print_report()
        tracker.save_csv(output_dir)
    """

    def __init__(self):
        self.calls: List[CallRecord] = []
        self.start_time: float = time.time()

    def record(
        self,
        call_name: str,
        model: str,
        prompt: str,
        response: str,
        duration: float,
        system_prompt: str = "",
        actual_prompt_tokens: int = 0,
        actual_response_tokens: int = 0
    ):
        """Record a single generator call. Empty response = failed call."""
        self.calls.append(CallRecord(
            call_name=call_name,
            model=model or "",
            prompt_tokens_est=estimate_tokens(prompt),
            system_tokens_est=estimate_tokens(system_prompt),
            response_tokens_est=estimate_tokens(response),
            duration_seconds=duration,
            succeeded=bool(response),
            prompt_tokens_actual=actual_prompt_tokens,
            response_tokens_actual=actual_response_tokens
        ))

    def get_summary(self) -> Dict:
        """Get summary of all calls."""
        return {
            "num_calls": len(self.calls),
            "failed_calls": sum(1 for c in self.calls if not c.succeeded),
            "total_tokens_est": sum(c.total_tokens_est for c in self.calls),
            "total_tokens_actual": sum(
                c.total_tokens_actual for c in self.calls
            ),
            "duration_seconds": round(
                sum(c.duration_seconds for c in self.calls), 1
            ),
            "wall_time": round(time.time() - self.start_time, 1)
        }

    def print_report(self):
        """Print formatted token usage report to console."""
        summary = self.get_summary()

        print("\n" + "=" * 75)
        print("TOKEN USAGE REPORT")
        print("=" * 75)
        print(
            f"{'Call':<22} {'Model':<18} {'Prompt':>8} "
            f"{'Response':>8} {'Total':>8} {'Time':>7}"
        )
        print("-" * 75)

        for c in self.calls:
            status = "" if c.succeeded else " ✗"
            actual_str = ""
            if c.total_tokens_actual > 0:
                actual_str = f" (actual: {c.total_tokens_actual})"
            print(
                f"{c.call_name:<22} {c.model[:18]:<18} "
                f"{c.prompt_tokens_est:>8} {c.response_tokens_est:>8} "
                f"{c.total_tokens_est:>8} {c.duration_seconds:>6.1f}s"
                f"{status}{actual_str}"
            )

        print("-" * 75)
        print(
            f"Calls: {summary['num_calls']} "
            f"(failed: {summary['failed_calls']}) | "
            f"Estimated tokens: {summary['total_tokens_est']:,}"
        )
        if summary["total_tokens_actual"] > 0:
            print(f"Actual tokens: {summary['total_tokens_actual']:,}")
        print("=" * 75)

    def save_csv(self, output_dir: str = None, name: str = "") -> str:
        """Save per-call rows as CSV. Never overwrites an existing report."""
        output_dir = output_dir or path_config.output_dir
        os.makedirs(output_dir, exist_ok=True)

        safe_name = "".join(
            c for c in name if c.isalnum() or c in (' ', '-', '_')
        ).strip()[:50]
        filename = f"{safe_name}_token_usage.csv" if safe_name else "token_usage.csv"
        csv_path = os.path.join(output_dir, filename)

        counter = 1
        base_path = csv_path
        while os.path.exists(csv_path):
            csv_path = f"{base_path.rsplit('.', 1)[0]}_{counter}.csv"
            counter += 1

        with open(csv_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow([
                'Call Name', 'Model', 'Succeeded',
                'Prompt Tokens (Est)', 'System Tokens (Est)',
                'Response Tokens (Est)', 'Total Tokens (Est)',
                'Duration (seconds)', 'Total Tokens (Actual)'
            ])
            for c in self.calls:
                writer.writerow([
                    c.call_name, c.model, c.succeeded,
                    c.prompt_tokens_est, c.system_tokens_est,
                    c.response_tokens_est, c.total_tokens_est,
                    round(c.duration_seconds, 1), c.total_tokens_actual
                ])

        print(f"  📁 Token usage CSV: {csv_path}")
        return csv_path

# src/llm_client.py

"""
LLM Client for Ollama API.
ALL calls use streaming. Failures are reported and returned as None so
callers can move on to a fallback model.
Integrated with TokenTracker for per-call token counting.
"""

import requests
import json
import time
from typing import Optional
from config import ollama_config, llm_params


class OllamaClient:
    """Client for Ollama LLM. Always streams to prevent timeout."""

    def __init__(self, config=None, params=None):
        self.config = config or ollama_config
        self.params = params or llm_params
        self.api_url = f"{self.config.base_url}/api/generate"
        self._tracker = None

    def set_tracker(self, tracker):
        """Attach a TokenTracker to record all calls."""
        self._tracker = tracker

    def generate(
        self,
        prompt: str,
        system_prompt: str = None,
        model: str = None,
        temperature: float = None,
        max_tokens: int = None,
        timeout: int = None,
        call_name: str = None
    ) -> Optional[str]:
        """
        Generate response from LLM using streaming.
        Records token usage if tracker is attached.

        Args:
            prompt: The prompt text.
            system_prompt: Optional system prompt.
            model: Override model (defaults to the primary model).
            temperature: Sampling temperature.
            max_tokens: Cap on generated tokens (num_predict).
            timeout: Override total timeout.
            call_name: Name for token tracking (e.g., "FlowSpec:primary").
        """
        total_timeout = timeout or self.params.total_timeout
        model = model or self.config.model

        options = {
            "num_ctx": self.params.num_ctx,
            "top_p": self.params.top_p,
            "repeat_penalty": self.params.repeat_penalty,
        }
        if temperature is not None:
            options["temperature"] = temperature
        if max_tokens:
            options["num_predict"] = max_tokens

        payload = {
            "model": model,
            "prompt": prompt,
            "stream": True,
            "options": options
        }

        if system_prompt:
            payload["system"] = system_prompt

        prompt_len = len(prompt)
        prompt_preview = prompt[:80].replace('\n', ' ')

        response_parts = []
        actual_prompt_tokens = 0
        actual_response_tokens = 0
        start = time.time()

        try:
            print(
                f"    [LLM] Sending to {model} ({prompt_len} chars): "
                f"\"{prompt_preview}...\""
            )

            response = requests.post(
                self.api_url,
                headers={"Content-Type": "application/json"},
                data=json.dumps(payload),
                stream=True,
                timeout=(
                    self.params.connect_timeout,
                    self.params.stream_chunk_timeout
                )
            )

            if response.status_code != 200:
                elapsed = time.time() - start
                print(
                    f"    [LLM] ✗ HTTP {response.status_code} from {model} "
                    f"({elapsed:.1f}s)"
                )
                if response.status_code == 500:
                    print(
                        f"    [LLM]   Model crashed or ran out of memory. "
                        f"Prompt was {prompt_len} chars."
                    )
                else:
                    print(f"    [LLM]   Response: {response.text[:200]}")
                response.close()
                self._record_call(
                    call_name, model, prompt, system_prompt, None,
                    elapsed, 0, 0
                )
                return None

            # Read streaming response
            last_chunk_time = time.time()

            for line in response.iter_lines():
                now = time.time()

                if line:
                    try:
                        chunk = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if not isinstance(chunk, dict):
                        continue

                    if "error" in chunk:
                        print(
                            f"    [LLM] ✗ Model error: {chunk['error']}"
                        )
                        break

                    if isinstance(chunk.get("response"), str):
                        response_parts.append(chunk["response"])
                        last_chunk_time = now

                    # Actual token counts arrive on the final chunk
                    if chunk.get("done", False):
                        actual_prompt_tokens = chunk.get(
                            "prompt_eval_count", 0
                        )
                        actual_response_tokens = chunk.get(
                            "eval_count", 0
                        )
                        break

                # Stall detection
                if now - last_chunk_time > self.params.stream_chunk_timeout:
                    print(
                        f"    [LLM] ⚠ Stream stalled for "
                        f"{self.params.stream_chunk_timeout}s"
                    )
                    break

                # Total timeout
                if now - start > total_timeout:
                    print(
                        f"    [LLM] ⚠ Total timeout {total_timeout}s "
                        f"— returning partial"
                    )
                    break

            response.close()

            result = "".join(response_parts).strip()
            elapsed = time.time() - start

            if result:
                token_info = ""
                if actual_prompt_tokens > 0:
                    token_info = (
                        f" [tokens: {actual_prompt_tokens}→"
                        f"{actual_response_tokens}]"
                    )
                print(
                    f"    [LLM] ✓ {len(result)} chars in "
                    f"{elapsed:.1f}s{token_info}"
                )
            else:
                print(f"    [LLM] ⚠ Empty response after {elapsed:.1f}s")

            self._record_call(
                call_name, model, prompt, system_prompt, result,
                elapsed, actual_prompt_tokens, actual_response_tokens
            )

            return result if result else None

        except requests.exceptions.ConnectionError:
            print(
                f"    [LLM] ✗ Cannot connect to {self.config.base_url}"
            )
            self._record_call(
                call_name, model, prompt, system_prompt, None,
                time.time() - start, 0, 0
            )
            return None
        except requests.exceptions.Timeout:
            # Partial JSON is useless to the parser, so a timeout is a miss
            print(
                f"    [LLM] ✗ Timeout after {time.time() - start:.1f}s "
                f"({len(response_parts)} chunks received)"
            )
            self._record_call(
                call_name, model, prompt, system_prompt, None,
                time.time() - start, 0, 0
            )
            return None
        except requests.exceptions.RequestException as e:
            print(f"    [LLM] ✗ Error: {type(e).__name__}: {e}")
            self._record_call(
                call_name, model, prompt, system_prompt, None,
                time.time() - start, 0, 0
            )
            return None

    def _record_call(
        self, call_name, model, prompt, system_prompt, response,
        duration, actual_prompt, actual_response
    ):
        """Record call to tracker if attached."""
        if self._tracker and call_name:
            self._tracker.record(
                call_name=call_name,
                model=model,
                prompt=prompt or "",
                response=response or "",
                duration=duration,
                system_prompt=system_prompt or "",
                actual_prompt_tokens=actual_prompt,
                actual_response_tokens=actual_response
            )

    def is_available(self) -> bool:
        """Check if Ollama server is available."""
        try:
            response = requests.get(
                f"{self.config.base_url}/api/tags",
                timeout=10
            )
            return response.status_code == 200
        except requests.exceptions.RequestException:
            return False

    def get_model_info(self, model: str = None) -> Optional[dict]:
        """Get model information."""
        try:
            response = requests.post(
                f"{self.config.base_url}/api/show",
                json={"name": model or self.config.model},
                timeout=10
            )
            return response.json() if response.status_code == 200 else None
        except (requests.exceptions.RequestException, ValueError):
            return None


# Default client
llm_client = OllamaClient()

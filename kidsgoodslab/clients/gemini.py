"""Gemini text generation client."""

import time

from google import genai
from google.genai import types


class GeminiError(Exception):
    """Gemini returned no usable text."""
    pass


class GeminiClient:
    """Client for text generation via the Gemini API."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash"):
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.total_input_tokens = 0
        self.total_output_tokens = 0

    def _call_with_retry(self, func, max_retries=5, retry_codes=(503, 429)):
        """Retry API calls on transient errors with exponential backoff."""
        for attempt in range(max_retries):
            try:
                return func()
            except Exception as e:
                error_str = str(e)
                is_retryable = any(str(code) in error_str for code in retry_codes)

                if not is_retryable or attempt == max_retries - 1:
                    raise

                wait_time = 2 ** attempt  # 1s, 2s, 4s
                print(f"Gemini API error (attempt {attempt + 1}/{max_retries}), retrying in {wait_time}s: {e}", flush=True)
                time.sleep(wait_time)

    def call(
        self,
        prompt: str,
        system_prompt: str | None = None,
        label: str = "",
        temperature: float = 0.85,
        max_output_tokens: int = 16000,
    ) -> str:
        """Generate text and return it.

        Args:
            prompt: User prompt.
            system_prompt: Optional system instruction.
            label: Optional label for logging token usage.
            temperature: Sampling temperature.
            max_output_tokens: Output token cap.

        Returns:
            Response text.
        """
        response = self._call_with_retry(
            lambda: self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
        )

        # Track tokens
        usage = response.usage_metadata
        if usage is not None:
            input_tokens = usage.prompt_token_count or 0
            output_tokens = usage.candidates_token_count or 0
            self.total_input_tokens += input_tokens
            self.total_output_tokens += output_tokens
            if label:
                print(f"  {label}: input={input_tokens}, output={output_tokens}", flush=True)

        text = response.text
        if not text:
            raise GeminiError("No text generated by Gemini")
        return text

    def ask_yes_no(self, prompt: str) -> bool:
        """Ask a yes/no question; True when the answer contains はい or yes."""
        answer = self.call(prompt, temperature=0.1, max_output_tokens=10)
        answer = answer.strip().lower()
        return "はい" in answer or "yes" in answer

    def get_token_totals(self) -> tuple[int, int]:
        """Return accumulated (input, output) tokens."""
        return self.total_input_tokens, self.total_output_tokens

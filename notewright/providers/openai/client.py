import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from openai import OpenAI, OpenAIError

from ...core.models import OpenAIConfig
from ...core.storage import Storage
from ...errors import ConfigurationError, FilesystemError, RemoteCallError

logger = logging.getLogger("Notewright.Provider.OpenAI")

API_KEY_ENV_VAR = "OPENAI_API_KEY"

class OpenAIClient:
    """Sends chat completions and audio transcriptions to OpenAI.

    The SDK client is created lazily on the first call so that a missing
    credential surfaces as a ConfigurationError from that call.
    """

    def __init__(self, config: Optional[OpenAIConfig] = None, storage: Optional[Storage] = None):
        self.config = config or OpenAIConfig()
        self.storage = storage or Storage()
        self._client: Optional[OpenAI] = None

    def _resolve_api_key(self) -> str:
        api_key = os.environ.get(API_KEY_ENV_VAR)
        if not api_key and self.config.api_key:
            api_key = self.config.api_key.get_secret_value()
        if not api_key:
            raise ConfigurationError(f"{API_KEY_ENV_VAR} environment variable is not set")
        return api_key

    def _get_client(self) -> OpenAI:
        api_key = self._resolve_api_key()
        if self._client is None:
            self._client = OpenAI(
                api_key=api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
            )
        return self._client

    def _write_debug_file(self, debug_file: Union[str, Path], response: Any) -> None:
        payload = response.model_dump() if hasattr(response, "model_dump") else response
        self.storage.write_file(debug_file, json.dumps(payload, indent=2, ensure_ascii=False, default=str), "utf-8")
        logger.debug("Wrote debug file to %s", debug_file)

    def create_completion(
        self,
        messages: List[Dict[str, Any]],
        model: str = "gpt-4o",
        debug: bool = False,
        debug_file: Optional[Union[str, Path]] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> Union[str, Dict[str, Any]]:
        """
        Send a chat completion request.

        Returns:
            The completion text, or the parsed JSON object when response_format is given.

        Raises:
            ConfigurationError: If no API key is available
            RemoteCallError: If the request fails or the response is empty or not valid JSON
        """
        client = self._get_client()
        logger.debug("Sending prompt to OpenAI: %s", messages)

        request: Dict[str, Any] = {"model": model, "messages": messages}
        if response_format:
            request["response_format"] = response_format

        try:
            completion = client.chat.completions.create(**request)
        except OpenAIError as e:
            raise RemoteCallError(f"OpenAI completion request failed: {e}") from e

        if debug and debug_file:
            self._write_debug_file(debug_file, completion)

        content = completion.choices[0].message.content if completion.choices else None
        content = (content or "").strip()
        if not content:
            raise RemoteCallError("No response received from OpenAI")

        logger.debug("Received response from OpenAI: %s", content)

        if response_format:
            try:
                return json.loads(content)
            except json.JSONDecodeError as e:
                raise RemoteCallError(f"OpenAI returned malformed JSON: {e}") from e

        return content

    def transcribe_audio(
        self,
        file_path: Union[str, Path],
        model: str = "whisper-1",
        debug: bool = False,
        debug_file: Optional[Union[str, Path]] = None,
    ) -> Dict[str, str]:
        """
        Transcribe an audio file.

        Returns:
            Dict with a single "text" key.
        """
        client = self._get_client()
        logger.debug("Transcribing audio file: %s", file_path)

        try:
            with open(file_path, "rb") as audio_file:
                transcription = client.audio.transcriptions.create(model=model, file=audio_file)
        except OSError as e:
            raise FilesystemError(f"Failed to read audio file {file_path}: {e}") from e
        except OpenAIError as e:
            raise RemoteCallError(f"OpenAI transcription request failed: {e}") from e

        if transcription is None:
            raise RemoteCallError("No transcription received from OpenAI")

        if debug and debug_file:
            self._write_debug_file(debug_file, transcription)

        text = (getattr(transcription, "text", None) or "").strip()
        if not text:
            raise RemoteCallError("No transcription received from OpenAI")

        logger.debug("Received transcription from OpenAI: %s", text)
        return {"text": text}

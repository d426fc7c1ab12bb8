"""
LLM Debug Logger for tracking calls to the generation service.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis

Base64 image payloads are always replaced by a short summary, both on the
console and in files.
"""

import asyncio
import json
import os
import re
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

_DATA_URI = re.compile(r"data:image/([\w.+-]+);base64,([A-Za-z0-9+/=]+)")


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def message_text(content: Any) -> str:
    """Flatten chat message content (string or list of blocks) into text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        chunks = []
        for item in content:
            if isinstance(item, str):
                chunks.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                chunks.append(str(item.get("text", "")))
        return "".join(chunks)
    if content is None:
        return ""
    return str(content)


class LLMLogger:
    """Centralized logger for generation calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()
        self.configure()
        self._initialized = True

    def configure(
        self,
        level: Optional[str] = None,
        log_to_file: Optional[bool] = None,
        log_dir: Optional[Path] = None,
    ):
        """(Re)read configuration; explicit arguments override the environment."""
        level_str = (level or os.getenv("LLM_DEBUG_LEVEL", "NONE")).upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        if log_to_file is None:
            log_to_file = os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true"
        self.log_to_file = log_to_file
        self.log_dir = Path(log_dir or os.getenv("LLM_LOG_DIR", "outputs"))

    def _should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        """Get ISO8601 formatted timestamp."""
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def summarize_images(self, content: str) -> str:
        """Replace every base64 image data URI with a size summary."""

        def _summary(match: "re.Match") -> str:
            return f"[IMAGE_DATA: {match.group(1)}, base64 encoded, {len(match.group(2)):,} bytes]"

        return _DATA_URI.sub(_summary, content)

    def _serialize_message(self, msg: Any) -> Dict[str, Any]:
        """Serialize a chat message or request part to a loggable dict."""
        if hasattr(msg, "content"):
            return {
                "type": msg.__class__.__name__,
                "content": self.summarize_images(message_text(msg.content)),
            }
        if isinstance(msg, dict):
            return {key: self.summarize_images(value) if isinstance(value, str) else value
                    for key, value in msg.items()}
        return {"type": type(msg).__name__, "content": self.summarize_images(str(msg))}

    def _format_console_info(
        self,
        component: str,
        provider: str,
        model: str,
        latency_ms: float,
        token_count: Optional[int] = None,
    ) -> str:
        """Format basic info line for console."""
        parts = [
            f"[{component}]",
            f"{provider}/{model}",
            f"{latency_ms:.1f}ms",
        ]
        if token_count is not None:
            parts.append(f"{token_count} tokens")
        return " | ".join(parts)

    def _format_console_debug(
        self,
        request_messages: List[Dict[str, Any]],
        response_content: Optional[str] = None,
    ) -> str:
        """Format debug info for console."""
        lines = [f"  Messages: {len(request_messages)}"]
        for i, msg in enumerate(request_messages[:3]):
            preview = self._truncate_content(str(msg.get("content", msg)), 150)
            lines.append(f"    {i+1}. [{msg.get('type', 'part')}] {preview}")
        if len(request_messages) > 3:
            lines.append(f"    ... and {len(request_messages) - 3} more")

        if response_content:
            lines.append(f"  Response: {self._truncate_content(response_content, 200)}")

        return "\n".join(lines)

    def _format_console_trace(
        self,
        request_messages: List[Dict[str, Any]],
        response_content: str,
        token_usage: Optional[Dict] = None,
    ) -> str:
        """Format full trace info for console."""
        lines = ["  REQUEST MESSAGES:"]
        for i, msg in enumerate(request_messages):
            lines.append(f"    [{i+1}] {msg.get('type', 'part')}:")
            for line in str(msg.get("content", "")).split("\n"):
                lines.append(f"      {line}")

        lines.append("\n  RESPONSE:")
        if len(response_content) > 1000:
            lines.append(f"    {response_content[:1000]}...")
            lines.append(f"    ... [{len(response_content) - 1000} more chars]")
        else:
            for line in response_content.split("\n"):
                lines.append(f"    {line}")

        if token_usage:
            lines.append("\n  TOKEN USAGE:")
            for key, value in token_usage.items():
                lines.append(f"    {key}: {value}")

        return "\n".join(lines)

    def _write_to_file(self, session_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not session_id:
            return

        log_file = self.log_dir / session_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

    def log_invocation(
        self,
        component: str,
        provider: str,
        model: str,
        session_id: Optional[str] = None,
    ) -> str:
        """
        Log the start of a generation call.

        Returns:
            Invocation ID (UUID string) for tracking this call, or an empty
            string when logging is disabled.
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] LLM Call: [{component}] {provider}/{model}"
        if session_id:
            console_msg += f" | session: {session_id}"
        print(console_msg)

        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        messages: List[Any],
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log request details."""
        if not self._should_log(LogLevel.DEBUG):
            return

        serialized = [self._serialize_message(msg) for msg in messages]
        print(self._format_console_debug(serialized))

        self._write_to_file(session_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "request",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "session_id": session_id,
            "request": {
                "messages": serialized if self.level == LogLevel.TRACE else [],
                "message_count": len(messages),
            },
            "metadata": metadata or {},
        })

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        request_messages: List[Any],
        response_content: str,
        start_time: float,
        end_time: float,
        token_usage: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log a completed call with timing and (summarized) content."""
        if not self._should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        content = self.summarize_images(response_content or "")
        total_tokens = (token_usage or {}).get("total_tokens")

        print(
            f"[{self._format_timestamp()}] LLM Response: "
            + self._format_console_info(component, provider, model, latency_ms, total_tokens)
        )

        serialized = [self._serialize_message(msg) for msg in request_messages]
        if self.level == LogLevel.DEBUG:
            print(self._format_console_debug(serialized, content))
        elif self.level == LogLevel.TRACE:
            print(self._format_console_trace(serialized, content, token_usage))

        self._write_to_file(session_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "response",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "session_id": session_id,
            "response": {
                "content": content if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(content, 200)
                    if self._should_log(LogLevel.DEBUG)
                    else None
                ),
                "content_length": len(content),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": token_usage or None,
            "metadata": metadata or {},
        })

    def log_error(
        self,
        invocation_id: str,
        component: str,
        error: BaseException,
        session_id: Optional[str] = None,
    ):
        """Log a failed call."""
        if not self._should_log(LogLevel.INFO):
            return

        print(f"[{self._format_timestamp()}] LLM Error: [{component}] {type(error).__name__}: {error}")
        self._write_to_file(session_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "error",
            "component": component,
            "invocation_id": invocation_id,
            "session_id": session_id,
            "error": {"type": type(error).__name__, "message": str(error)},
        })


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


def _usage_from_response(response: Any) -> Dict[str, Any]:
    usage = getattr(response, "usage_metadata", None)
    if isinstance(usage, dict):
        return {
            "prompt_tokens": usage.get("input_tokens"),
            "completion_tokens": usage.get("output_tokens"),
            "total_tokens": usage.get("total_tokens"),
        }
    return {}


class LoggedLLM:
    """
    Wrapper around LangChain chat models to add debug logging.

    Intercepts ainvoke() calls and logs requests, responses, timing and
    metadata. Log output (console and file) is written from a worker thread
    so the event loop never blocks on it.
    """

    def __init__(
        self,
        llm_instance: Any,
        component: str,
        provider: str,
        model: str,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LoggedLLM wrapper.

        Args:
            llm_instance: The actual chat model (e.g. ChatGoogleGenerativeAI)
            component: Component name (e.g. "page_generator")
            provider: Provider name
            model: Model name
            session_id: Optional session ID used to group log files
            metadata: Optional additional metadata to include in logs
        """
        self.llm = llm_instance
        self.component = component
        self.provider = provider
        self.model = model
        self.session_id = session_id
        self.metadata = metadata or {}
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped LLM instance."""
        return getattr(self.llm, name)

    def _start(self, messages: List[Any]) -> str:
        invocation_id = self.logger.log_invocation(
            component=self.component,
            provider=self.provider,
            model=self.model,
            session_id=self.session_id,
        )
        if invocation_id:
            self.logger.log_request(
                invocation_id=invocation_id,
                component=self.component,
                provider=self.provider,
                model=self.model,
                messages=messages,
                session_id=self.session_id,
                metadata=self.metadata,
            )
        return invocation_id

    def _finish(self, invocation_id: str, messages: List[Any], response: Any, start_time: float):
        self.logger.log_response(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_messages=messages,
            response_content=message_text(getattr(response, "content", response)),
            start_time=start_time,
            end_time=time.time(),
            token_usage=_usage_from_response(response),
            session_id=self.session_id,
            metadata=self.metadata,
        )

    async def ainvoke(self, messages: List[Any], **kwargs) -> Any:
        """Invoke the chat model asynchronously with logging."""
        invocation_id = await asyncio.to_thread(self._start, messages)
        if not invocation_id:
            return await self.llm.ainvoke(messages, **kwargs)

        start_time = time.time()
        try:
            response = await self.llm.ainvoke(messages, **kwargs)
        except Exception as e:
            await asyncio.to_thread(self.logger.log_error, invocation_id, self.component, e, self.session_id)
            raise

        await asyncio.to_thread(self._finish, invocation_id, messages, response, start_time)
        return response

"""Real-time logging for agent model and tool calls."""

import os
from datetime import datetime
from agents.tracing import TracingProcessor, Span


class ConsoleTracer(TracingProcessor):
    """Logs agent activity to console in real-time."""

    def __init__(self):
        self._sessions: dict[str, str] = {}  # trace_id -> session label

    def _log(self, icon: str, message: str, dim: bool = False, session: str | None = None):
        timestamp = datetime.now().strftime("%H:%M:%S")
        # Skip ANSI codes in production (Docker/cloud) for cleaner logs
        use_ansi = os.getenv("TERM") is not None
        style = "\033[2m" if dim and use_ansi else ""
        reset = "\033[0m" if dim and use_ansi else ""

        label = f"[{session}] " if session else ""
        print(f"{style}[{timestamp}] {label}{icon} {message}{reset}", flush=True)

    def on_trace_start(self, trace) -> None:
        group_id = getattr(trace, "group_id", None) or ""
        self._sessions[trace.trace_id] = group_id[:8]
        self._log("🤖", f"Starting {trace.name}", session=self._sessions[trace.trace_id])

    def on_trace_end(self, trace) -> None:
        session = self._sessions.pop(trace.trace_id, None)
        self._log("✅", f"Done: {trace.name}", session=session)

    def on_span_start(self, span: Span) -> None:
        if type(span.span_data).__name__ == "GenerationSpanData":
            self._log("💭", "Thinking...", dim=True, session=self._sessions.get(span.trace_id))

    def on_span_end(self, span: Span) -> None:
        span_data = span.span_data
        span_type = type(span_data).__name__
        session = self._sessions.get(span.trace_id)

        if span_type == "GenerationSpanData":
            output = getattr(span_data, "output", None) or []
            text = output[-1].get("content", "") if output else ""
            self._log("📝", self._format_model_output(text), dim=True, session=session)

        elif span_type == "FunctionSpanData":
            name = getattr(span_data, "name", "unknown")
            input_val = getattr(span_data, "input", None) or ""
            self._log("🔧", f"{name}({input_val})", session=session)

            output = getattr(span_data, "output", None)
            if output:
                self._log("📄", f"→ {self._truncate(str(output))}", dim=True, session=session)

        if span.error:
            self._log("❌", span.error.get("message", "error"), session=session)

    def _format_model_output(self, text: str) -> str:
        """First line of the model output, truncated."""
        first_line = text.strip().splitlines()[0] if text.strip() else "(empty)"
        return self._truncate(first_line)

    def _truncate(self, text: str, limit: int = 80) -> str:
        return text if len(text) <= limit else text[:limit] + "..."

    def shutdown(self) -> None:
        pass

    def force_flush(self) -> None:
        pass

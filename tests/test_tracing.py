"""Tests for the console tracer."""

from types import SimpleNamespace

from agents.tracing.span_data import FunctionSpanData, GenerationSpanData

from weatherbot.tracing import ConsoleTracer


def _trace(trace_id="trace-1", group_id="session-abcdef123", name="Weatherbot agent"):
    return SimpleNamespace(trace_id=trace_id, group_id=group_id, name=name)


def _span(span_data, trace_id="trace-1", error=None):
    return SimpleNamespace(span_data=span_data, trace_id=trace_id, error=error)


class TestConsoleTracer:
    """Tests for ConsoleTracer output."""

    def test_trace_lines_are_labelled_with_session(self, capsys):
        tracer = ConsoleTracer()

        tracer.on_trace_start(_trace())
        tracer.on_trace_end(_trace())

        out = capsys.readouterr().out
        assert "[session-] 🤖 Starting Weatherbot agent" in out
        assert "[session-] ✅ Done: Weatherbot agent" in out

    def test_generation_span_logs_first_line(self, capsys):
        tracer = ConsoleTracer()
        tracer.on_trace_start(_trace())
        span_data = GenerationSpanData(output=[{"role": "assistant", "content": "ACTION: getTime(1, 2)\nmore"}])

        tracer.on_span_start(_span(span_data))
        tracer.on_span_end(_span(span_data))

        out = capsys.readouterr().out
        assert "💭 Thinking..." in out
        assert "📝 ACTION: getTime(1, 2)" in out
        assert "more" not in out

    def test_function_span_logs_call_and_truncated_output(self, capsys):
        tracer = ConsoleTracer()
        span_data = FunctionSpanData(name="getWeather", input="40.0, -74.0", output="x" * 200)

        tracer.on_span_end(_span(span_data))

        out = capsys.readouterr().out
        assert "🔧 getWeather(40.0, -74.0)" in out
        assert "→ " + "x" * 80 + "..." in out

    def test_span_error_is_logged(self, capsys):
        tracer = ConsoleTracer()
        span_data = FunctionSpanData(name="getWeather", input="abc", output=None)

        tracer.on_span_end(_span(span_data, error={"message": "Invalid parameter for getWeather action"}))

        assert "❌ Invalid parameter for getWeather action" in capsys.readouterr().out

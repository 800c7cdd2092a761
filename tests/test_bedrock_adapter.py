import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

from langchain_core.messages import HumanMessage

from src.domain.ports.observability_port import IObservabilityHandler
from src.infrastructure.llm.bedrock_adapter import BedrockVisionAdapter, _text_of, build_message


class TestBuildMessage:
    def test_prompt_and_inline_image(self):
        message = build_message("Analyse this", b"png-bytes", "image/png")
        assert isinstance(message, HumanMessage)
        text, image = message.content
        assert text == {"type": "text", "text": "Analyse this"}
        encoded = base64.b64encode(b"png-bytes").decode("ascii")
        assert image["image_url"]["url"] == f"data:image/png;base64,{encoded}"


class TestTextOf:
    def test_plain_string(self):
        assert _text_of('{"a": 1}') == '{"a": 1}'

    def test_content_blocks(self):
        blocks = [{"type": "text", "text": '{"a": '}, {"type": "image"}, {"type": "text", "text": "1}"}]
        assert _text_of(blocks) == '{"a": 1}'

    def test_empty(self):
        assert _text_of(None) == ""


class TestBedrockVisionAdapter:
    def test_single_invocation_returns_text(self):
        runnable = MagicMock()
        runnable.invoke.return_value = SimpleNamespace(content="{}")
        adapter = BedrockVisionAdapter(_runnable=runnable)

        assert adapter.analyze_image("prompt", b"img", "image/jpeg") == "{}"
        runnable.invoke.assert_called_once()
        messages = runnable.invoke.call_args.args[0]
        assert len(messages) == 1
        assert runnable.invoke.call_args.kwargs["config"] is None

    def test_model_id(self):
        assert BedrockVisionAdapter(_runnable=MagicMock()).model_id == "us.amazon.nova-pro-v1:0"

    def test_observability_config_is_passed(self):
        runnable = MagicMock()
        runnable.invoke.return_value = SimpleNamespace(content="{}")
        observability = MagicMock(spec=IObservabilityHandler)
        observability.run_config.return_value = {"callbacks": ["handler"]}

        BedrockVisionAdapter(observability=observability, _runnable=runnable).analyze_image(
            "prompt", b"img", "image/png"
        )
        observability.run_config.assert_called_once_with(
            tags=["chart-analysis"], metadata={"mime_type": "image/png", "image_bytes": 3}
        )
        assert runnable.invoke.call_args.kwargs["config"] == {"callbacks": ["handler"]}

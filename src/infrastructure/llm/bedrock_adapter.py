"""
Infrastructure adapter: Amazon Bedrock (ChatBedrock) -> IVisionModel.

All ChatBedrock / langchain_aws details are confined here. The chart is sent
inline as a base64 data URL next to the prompt in a single human message;
one call per analysis, no retries and no streaming.
"""

import base64
import os
from typing import Any, Optional

from langchain_aws import ChatBedrock
from langchain_core.messages import HumanMessage

from src.domain.ports.llm_port import IVisionModel
from src.domain.ports.observability_port import IObservabilityHandler


def _text_of(content: Any) -> str:
    """Flatten a message content (str or list of blocks) into plain text."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def build_message(prompt: str, image: bytes, mime_type: str) -> HumanMessage:
    encoded = base64.b64encode(image).decode("ascii")
    return HumanMessage(
        content=[
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
        ]
    )


class BedrockVisionAdapter(IVisionModel):
    """Wraps ChatBedrock and exposes the IVisionModel interface."""

    MODEL_ID = "us.amazon.nova-pro-v1:0"

    def __init__(
        self,
        region: Optional[str] = None,
        observability: Optional[IObservabilityHandler] = None,
        _runnable: Any = None,
    ) -> None:
        """
        Args:
            region:        AWS region; falls back to AWS_DEFAULT_REGION.
            observability: Optional tracing handler whose callbacks wrap each call.
            _runnable:     Optional pre-built chat model (used by tests to avoid
                           constructing ChatBedrock). Pass nothing normally.
        """
        self._observability = observability
        if _runnable is not None:
            self._llm = _runnable
        else:
            self._llm = ChatBedrock(
                model=self.MODEL_ID,
                model_kwargs={"temperature": 0.0},
                region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
            )

    @property
    def model_id(self) -> str:
        return self.MODEL_ID

    def analyze_image(self, prompt: str, image: bytes, mime_type: str) -> str:
        config = None
        if self._observability is not None:
            config = self._observability.run_config(
                tags=["chart-analysis"],
                metadata={"mime_type": mime_type, "image_bytes": len(image)},
            )
        response = self._llm.invoke([build_message(prompt, image, mime_type)], config=config)
        return _text_of(response.content)

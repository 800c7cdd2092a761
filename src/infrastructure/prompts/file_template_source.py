"""
Infrastructure adapter: prompt template file -> IPromptTemplateSource.
The file is re-read on every load() so prompt edits apply without a restart.
"""

from pathlib import Path

from src.domain.errors import PromptTemplateError
from src.domain.ports.prompt_template_port import IPromptTemplateSource


class FilePromptTemplateSource(IPromptTemplateSource):
    def __init__(self, path: str) -> None:
        self._path = Path(path)

    def load(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PromptTemplateError(str(self._path), exc.strerror or str(exc)) from exc

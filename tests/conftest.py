import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import observability.logger as obs_logger
from llm_gateway import LlmResult
from services.sessions import InMemorySessionStore


Responder = Callable[[str, List[Dict[str, str]]], Union[str, LlmResult]]


class FakeLlm:
    """Scripted chat model; records every system prompt and message list."""

    def __init__(self, responder: Optional[Responder] = None, replies: Optional[Sequence[str]] = None) -> None:
        self._responder = responder
        self._replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, system_prompt=None, *, cancel=None) -> LlmResult:
        normalized = [dict(m) for m in messages]
        self.calls.append({"system": system_prompt or "", "messages": normalized})
        if self._responder is not None:
            out = self._responder(system_prompt or "", normalized)
        elif self._replies:
            out = self._replies.pop(0)
        else:
            out = "NON"
        if isinstance(out, LlmResult):
            return out
        return LlmResult.success(out)


@pytest.fixture(autouse=True)
def tmp_logs(tmp_path, monkeypatch):
    log_dir = tmp_path / "logs"
    monkeypatch.setattr(obs_logger, "LOG_DIR", str(log_dir))
    return log_dir


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def store():
    return InMemorySessionStore()

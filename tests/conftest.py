import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from artifact_bot.models import ChatChoice, ChatCompletion, ChatMessage, ProjectContext
from artifact_bot.utils.file_store import ProjectFileStore


BUTTON_SOURCE = """import React from 'react';

export const Button = ({ label }: { label: string }) => <button>{label}</button>;
"""


def make_completion(content: str | None) -> ChatCompletion:
    """Single-choice ChatCompletion carrying ``content``."""
    return ChatCompletion(choices=[ChatChoice(message=ChatMessage(content=content))])


def request_files_turn(*files: str) -> ChatCompletion:
    return make_completion(json.dumps({"action": "request_files", "files": list(files)}))


def result_turn(code: str, action: str = "generate") -> ChatCompletion:
    return make_completion(json.dumps({"action": action, "code": code}))


@pytest.fixture
def project_root(tmp_path) -> Path:
    """Minimal React/TypeScript project with a few components."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "package.json").write_text(
        json.dumps({
            "name": "demo",
            "scripts": {"test": "vitest"},
            "dependencies": {"react": "^18.0.0"},
            "devDependencies": {"typescript": "^5.0.0", "vitest": "^1.0.0"},
        }),
        encoding="utf-8",
    )
    (root / "src" / "Button.tsx").write_text(BUTTON_SOURCE, encoding="utf-8")
    (root / "src" / "Card.tsx").write_text("export const Card = () => null;\n", encoding="utf-8")
    (root / "src" / "Modal.tsx").write_text("export const Modal = () => null;\n", encoding="utf-8")
    return root


@pytest.fixture
def file_store(project_root) -> ProjectFileStore:
    return ProjectFileStore(str(project_root))


@pytest.fixture
def project_context(project_root) -> ProjectContext:
    return ProjectContext(
        project_root=str(project_root),
        framework="react",
        language="typescript",
        test_runner="vitest",
    )


@pytest.fixture
def mock_oracle():
    oracle = MagicMock()
    oracle.provider = "anthropic"
    return oracle

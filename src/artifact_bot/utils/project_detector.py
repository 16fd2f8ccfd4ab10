"""Detect framework, language and test runner from a project's package.json."""

import json
from pathlib import Path

from artifact_bot.models.project_models import ProjectContext

FRAMEWORK_DEPENDENCIES = (
    ("next", "nextjs"),
    ("react", "react"),
    ("@angular/core", "angular"),
    ("vue", "vue"),
    ("svelte", "svelte"),
)


def _load_package_json(package_json_path: Path) -> dict:
    try:
        with open(package_json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def detect_test_runner(package_data: dict) -> str | None:
    """Return "vitest", "jest" or "npm_test" from scripts.test, else None."""
    scripts = package_data.get("scripts") or {}
    test_script = scripts.get("test", "") if isinstance(scripts, dict) else ""
    if not test_script:
        return None
    if "vitest" in test_script:
        return "vitest"
    if "jest" in test_script:
        return "jest"
    return "npm_test"


def detect_project_context(project_root: str) -> ProjectContext:
    """Build a ProjectContext for ``project_root``.

    A missing or unreadable package.json yields a context with no framework
    and no test runner rather than an error.
    """
    root = Path(project_root).resolve()
    package_json_path = root / "package.json"
    if not package_json_path.exists():
        return ProjectContext(project_root=str(root))

    package_data = _load_package_json(package_json_path)
    dependencies = {
        **(package_data.get("dependencies") or {}),
        **(package_data.get("devDependencies") or {}),
    }

    framework = None
    for dependency, name in FRAMEWORK_DEPENDENCIES:
        if dependency in dependencies:
            framework = name
            break

    is_typescript = "typescript" in dependencies or (root / "tsconfig.json").exists()

    return ProjectContext(
        project_root=str(root),
        framework=framework,
        language="typescript" if is_typescript else "javascript",
        test_runner=detect_test_runner(package_data),
        package_json_path=str(package_json_path),
    )

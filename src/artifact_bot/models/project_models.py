"""Project-level context handed to artifact handlers."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProjectContext(BaseModel):
    """Facts about the target JS/TS project detected from package.json."""

    model_config = ConfigDict(frozen=False)

    project_root: str
    framework: Optional[str] = None   # "react", "nextjs", "vue", "angular" or None
    language: str = "javascript"      # "typescript" when a tsconfig/typescript dep exists
    test_runner: Optional[str] = None # "vitest", "jest", "npm_test" or None
    package_json_path: Optional[str] = None

"""Secret detection and redaction applied to every file read for the oracle."""

import hashlib
import logging
import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

REDACTION_DIGEST_LENGTH = 6


@dataclass(frozen=True)
class SecretPattern:
    secret_type: str
    pattern: re.Pattern[str]
    description: str
    context_required: bool = False


SECRET_PATTERNS: tuple[SecretPattern, ...] = (
    SecretPattern("AWS_KEY", re.compile(r"AKIA[0-9A-Z]{16}"), "AWS Access Key ID"),
    SecretPattern(
        "AWS_KEY",
        re.compile(
            r"(?:aws_secret_access_key|aws_session_token)\s*[:=]\s*[\"']([A-Za-z0-9/+=]{40,})[\"']",
            re.IGNORECASE,
        ),
        "AWS Secret Access Key",
    ),
    SecretPattern("GITHUB_TOKEN", re.compile(r"gh[pos]_[a-zA-Z0-9]{36}"), "GitHub Token"),
    SecretPattern(
        "STRIPE_KEY", re.compile(r"[sp]k_(?:live|test)_[a-zA-Z0-9]{24,}"), "Stripe Key"
    ),
    SecretPattern("API_KEY", re.compile(r"sk-[a-zA-Z0-9_-]{20,}"), "OpenAI/Anthropic API Key"),
    SecretPattern("SENDGRID_KEY", re.compile(r"SG\.[a-zA-Z0-9_-]{22,}"), "SendGrid API Key"),
    SecretPattern("MAILGUN_KEY", re.compile(r"key-[a-z0-9]{32}"), "Mailgun API Key"),
    SecretPattern(
        "PRIVATE_KEY",
        re.compile(
            r"-----BEGIN (?:RSA|DSA|EC|OPENSSH|PGP) PRIVATE KEY-----[\s\S]*?"
            r"-----END (?:RSA|DSA|EC|OPENSSH|PGP) PRIVATE KEY-----"
        ),
        "Private Key",
    ),
    SecretPattern(
        "API_KEY",
        re.compile(
            r"(?:api[_-]?key|apikey|api[_-]?secret|secret[_-]?key)\s*[:=]\s*[\"']([A-Za-z0-9_-]{32,})[\"']",
            re.IGNORECASE,
        ),
        "Generic API Key",
    ),
    SecretPattern(
        "JWT_TOKEN",
        re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}"),
        "JWT Token",
    ),
    SecretPattern(
        "OAUTH_TOKEN",
        re.compile(
            r"(?:oauth[_-]?token|access[_-]?token|bearer[_-]?token)\s*[:=]\s*[\"']([A-Za-z0-9_.]{20,})[\"']",
            re.IGNORECASE,
        ),
        "OAuth/Access Token",
    ),
    SecretPattern(
        "DATABASE_URL",
        re.compile(
            r"(?:postgres|postgresql|mysql|mongodb|redis)://[^\s:]+:[^\s@]+@[^\s/]+(?::\d+)?/[^\s\"']*",
            re.IGNORECASE,
        ),
        "Database Connection String",
    ),
    SecretPattern(
        "PASSWORD",
        re.compile(
            r"(?:password|passwd|pwd)\s*[:=]\s*[\"']([A-Za-z0-9!@#$%^&*()_+\-=\[\]{};:,.<>?]{8,128})[\"']",
            re.IGNORECASE,
        ),
        "Password",
        context_required=True,
    ),
    SecretPattern(
        "ENV_VAR",
        re.compile(r"process\.env\.[A-Z_]+\s*=\s*[\"']([^\"'\s]{10,})[\"']"),
        "Environment Variable Assignment",
    ),
)

FALSE_POSITIVE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"example",
        r"placeholder",
        r"your[_-]?(?:key|token|password)",
        r"test[_-]?key",
        r"dummy",
        r"fake",
        r"sample",
        r"xxx+",
        r"\*\*\*",
        r"\[REDACTED_",
    )
)

SCANNABLE_EXTENSIONS = (
    ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".vue", ".py", ".go", ".java",
    ".rb", ".php", ".env", ".config", ".json", ".yaml", ".yml", ".pem", ".key",
    ".cert", ".md", ".mdx",
)

EXCLUDED_PATH_RE = re.compile(r"(?:^|/)(?:node_modules|dist|build|coverage|\.git)/")


class DetectedSecret(BaseModel):
    model_config = ConfigDict(frozen=True)

    secret_type: str
    start: int
    end: int
    line: int
    description: str
    redacted_value: str
    # The raw value is kept only in memory for replacement and never serialized.
    value: str = Field(exclude=True, repr=False)


class SanitizationResult(BaseModel):
    model_config = ConfigDict(frozen=False)

    sanitized_code: str
    secrets_detected: int = 0
    secrets: list[DetectedSecret] = Field(default_factory=list)
    original_length: int = 0
    sanitized_length: int = 0


def redacted_placeholder(secret_type: str, value: str) -> str:
    """Stable, content-derived placeholder for a secret value."""
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:REDACTION_DIGEST_LENGTH]
    return f"[REDACTED_{secret_type}_{digest}]"


class SecretScanner:
    """Detects credentials in source text and replaces them with placeholders.

    Stateless; a single instance can be shared between threads.
    """

    def should_scan_file(self, file_path: str) -> bool:
        normalized = file_path.replace("\\", "/")
        if EXCLUDED_PATH_RE.search(normalized):
            return False
        name = normalized.rsplit("/", 1)[-1]
        if name.startswith(".env"):
            return True
        return normalized.endswith(SCANNABLE_EXTENSIONS)

    def _is_false_positive(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in FALSE_POSITIVE_PATTERNS)

    def scan(self, code: str, file_path: str | None = None) -> list[DetectedSecret]:
        """Return detected secrets sorted by start offset, descending.

        Overlapping matches from later patterns are dropped so each span is
        redacted exactly once.
        """
        if file_path and not self.should_scan_file(file_path):
            return []

        detected: list[DetectedSecret] = []
        for secret_pattern in SECRET_PATTERNS:
            for match in secret_pattern.pattern.finditer(code):
                value = match.group(1) if match.groups() and match.group(1) else match.group(0)
                if self._is_false_positive(value):
                    continue
                if secret_pattern.context_required:
                    context = code[max(0, match.start() - 50): match.end() + 50]
                    if self._is_false_positive(context):
                        continue
                value_start = match.start() + match.group(0).find(value)
                value_end = value_start + len(value)
                if any(value_start < d.end and d.start < value_end for d in detected):
                    continue
                detected.append(
                    DetectedSecret(
                        secret_type=secret_pattern.secret_type,
                        start=value_start,
                        end=value_end,
                        line=code.count("\n", 0, value_start) + 1,
                        description=secret_pattern.description,
                        redacted_value=redacted_placeholder(secret_pattern.secret_type, value),
                        value=value,
                    )
                )
        return sorted(detected, key=lambda secret: secret.start, reverse=True)

    def sanitize(self, code: str, file_path: str | None = None) -> SanitizationResult:
        """Replace every detected secret with its redacted placeholder.

        Running sanitize on its own output returns the text unchanged.
        """
        secrets = self.scan(code, file_path)
        sanitized = code
        # Replace from the end so earlier offsets stay valid
        for secret in secrets:
            sanitized = sanitized[: secret.start] + secret.redacted_value + sanitized[secret.end:]

        if secrets:
            types = sorted({secret.secret_type for secret in secrets})
            logger.warning(
                "Redacted %d secret(s) from %s: %s",
                len(secrets),
                file_path or "<inline>",
                ", ".join(types),
            )

        return SanitizationResult(
            sanitized_code=sanitized,
            secrets_detected=len(secrets),
            secrets=secrets,
            original_length=len(code),
            sanitized_length=len(sanitized),
        )


default_scanner = SecretScanner()

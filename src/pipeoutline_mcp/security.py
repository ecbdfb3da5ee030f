"""Security checks for pipeline files: sensitive names, secret content, path containment."""

import fnmatch
import logging
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Files that are never read, even if they look like pipelines
SKIP_FILES = {
    'secrets.yaml',
    'secrets.yml',
    'credentials.yaml',
    'credentials.yml',
    'kubeconfig',
    'kubeconfig.yaml',
    '.env',
    '.env.local',
    '.env.production',
}

SENSITIVE_PATTERNS = [
    '*.secrets.yml',
    '*.secrets.yaml',
    '*.pem',
    '*.key',
    '*.pfx',
    'id_rsa*',
    'id_ed25519*',
]

SECRET_CONTENT_PATTERNS = [
    (re.compile(r'-----BEGIN.*PRIVATE KEY-----'), 'private key'),
    (re.compile(r'AKIA[0-9A-Z]{16}'), 'AWS access key'),
    (re.compile(r'ghp_[a-zA-Z0-9]{36}'), 'GitHub personal access token'),
    (re.compile(r'glpat-[a-zA-Z0-9\-_]{20,}'), 'GitLab personal access token'),
    (re.compile(r'AccountKey=[A-Za-z0-9+/=]{40,}'), 'Azure storage account key'),
    (re.compile(r'xox[boaprs]-[a-zA-Z0-9\-]+'), 'Slack token'),
]


def is_sensitive_filename(filename: str) -> bool:
    """Check if a filename matches known sensitive file patterns."""
    basename = Path(filename).name.lower()
    if basename in SKIP_FILES:
        return True
    return any(fnmatch.fnmatch(basename, pattern) for pattern in SENSITIVE_PATTERNS)


def scan_content_for_secrets(content: str) -> list[str]:
    """Return descriptions of the secret patterns found in content."""
    return [description for pattern, description in SECRET_CONTENT_PATTERNS if pattern.search(content)]


def validate_path_traversal(resolved_path: Path, base_path: Path) -> bool:
    """Check that a resolved path is within the base directory (no traversal/symlink escape)."""
    try:
        resolved_path.relative_to(base_path)
        return True
    except ValueError:
        return False


def resolve_pipeline_path(path: str, workspace: Optional[str] = None) -> tuple[Optional[Path], Optional[str]]:
    """
    Resolve a pipeline file path and run the safety checks.

    Returns (resolved_path, None) on success or (None, error_message).
    """
    if workspace:
        base = Path(workspace).resolve()
        candidate = Path(path)
        resolved = (candidate if candidate.is_absolute() else base / candidate).resolve()
        if not validate_path_traversal(resolved, base):
            logger.warning("Path escapes workspace, refusing: %s", path)
            return None, f"Path is outside the workspace: {path}"
    else:
        resolved = Path(path).resolve()

    if not resolved.exists():
        return None, f"File does not exist: {path}"
    if not resolved.is_file():
        return None, f"Path is not a file: {path}"
    if is_sensitive_filename(resolved.name):
        logger.info("Refusing sensitive file: %s", resolved)
        return None, f"Refusing to read sensitive file: {resolved.name}"
    return resolved, None

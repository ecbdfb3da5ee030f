"""Tool to discover pipeline YAML files in a local directory."""

import logging
from pathlib import Path
from typing import Optional

import pathspec

from ..parser.hierarchy import build_outline, flatten_tree
from ..security import is_sensitive_filename, scan_content_for_secrets, validate_path_traversal
from ..storage.document_cache import DocumentCache, FileTooLargeError, get_default_cache

logger = logging.getLogger(__name__)

SKIP_DIRS = {
    '.git',
    'node_modules',
    '__pycache__',
    '.venv',
    'venv',
    'dist',
    'build',
    'target',
    '.idea',
    '.vscode',
    '.pytest_cache',
    '.mypy_cache',
    '.tox',
    'vendor',
    'bin',
    'obj',
}

PIPELINE_EXTENSIONS = ('.yml', '.yaml')


def is_hidden_path(path: Path) -> bool:
    """Check if any component of the path is hidden (starts with .)."""
    return any(part.startswith('.') for part in path.parts)


def _load_gitignore_spec(base_path: Path) -> Optional[pathspec.PathSpec]:
    gitignore_path = base_path / '.gitignore'
    if not gitignore_path.exists():
        return None
    try:
        with open(gitignore_path, 'r', encoding='utf-8') as f:
            return pathspec.PathSpec.from_lines('gitwildmatch', f)
    except OSError:
        return None


def discover_yaml_files(
    base_path: str,
    max_depth: int = 5,
    include_hidden: bool = False,
    follow_symlinks: bool = False,
    extra_ignore_patterns: Optional[list[str]] = None,
) -> list[str]:
    """
    Discover YAML files under a local directory.

    Args:
        base_path: Root directory to start crawling from
        max_depth: Maximum directory depth to crawl
        include_hidden: Whether to include hidden directories (starting with .)
        follow_symlinks: Whether to follow symbolic links (default False for safety)
        extra_ignore_patterns: Additional gitignore-style patterns to exclude

    Returns:
        Sorted list of paths relative to base_path
    """
    base = Path(base_path).resolve()
    if not base.exists():
        raise ValueError(f"Path does not exist: {base_path}")
    if not base.is_dir():
        raise ValueError(f"Path is not a directory: {base_path}")

    gitignore_spec = _load_gitignore_spec(base)
    extra_spec = None
    if extra_ignore_patterns:
        extra_spec = pathspec.PathSpec.from_lines('gitwildmatch', extra_ignore_patterns)

    def is_ignored(rel_path: str) -> bool:
        if gitignore_spec and gitignore_spec.match_file(rel_path):
            return True
        return bool(extra_spec and extra_spec.match_file(rel_path))

    found: list[str] = []

    def crawl(current: Path, depth: int) -> None:
        if depth > max_depth:
            return
        try:
            items = list(current.iterdir())
        except OSError:
            return

        for item in items:
            try:
                resolved = item.resolve()
                if item.is_symlink():
                    if not follow_symlinks:
                        logger.debug("Skipping symlink: %s", item)
                        continue
                    if not validate_path_traversal(resolved, base):
                        logger.warning("Symlink escapes base directory, skipping: %s -> %s", item, resolved)
                        continue
                elif not validate_path_traversal(resolved, base):
                    logger.warning("Path traversal detected, skipping: %s", item)
                    continue

                rel_path = item.relative_to(base).as_posix()
                if item.is_file():
                    if item.suffix.lower() not in PIPELINE_EXTENSIONS:
                        continue
                    if is_sensitive_filename(rel_path):
                        logger.info("Skipping sensitive file: %s", rel_path)
                        continue
                    if is_ignored(rel_path):
                        logger.debug("Skipping gitignored file: %s", rel_path)
                        continue
                    found.append(rel_path)
                elif item.is_dir():
                    if item.name in SKIP_DIRS:
                        continue
                    if not include_hidden and is_hidden_path(Path(rel_path)):
                        continue
                    if is_ignored(rel_path + '/'):
                        continue
                    crawl(item, depth + 1)
            except OSError:
                continue

    crawl(base, 0)
    found.sort()
    return found


def list_pipeline_files(
    path: str,
    max_depth: int = 5,
    include_hidden: bool = False,
    follow_symlinks: bool = False,
    extra_ignore_patterns: Optional[list[str]] = None,
    pipelines_only: bool = True,
    cache: Optional[DocumentCache] = None,
) -> dict:
    """
    List the pipeline files in a local directory.

    Respects .gitignore, skips sensitive files and files whose content looks
    like it holds secrets. With pipelines_only, YAML files that produce an
    empty outline are left out.

    Returns:
        Dict with the discovered files and the outline node count of each
    """
    base = Path(path).resolve()
    try:
        candidates = discover_yaml_files(
            path,
            max_depth=max_depth,
            include_hidden=include_hidden,
            follow_symlinks=follow_symlinks,
            extra_ignore_patterns=extra_ignore_patterns,
        )
    except ValueError as e:
        return {"success": False, "error": str(e), "path": str(base)}

    cache = cache if cache is not None else get_default_cache()
    files: list[dict] = []
    skipped_secrets: list[str] = []

    for rel_path in candidates:
        full_path = base / rel_path
        try:
            cached = cache.get_file(full_path)
        except (OSError, UnicodeDecodeError, FileTooLargeError) as e:
            logger.info("Skipping unreadable file %s: %s", rel_path, e)
            continue

        detected = scan_content_for_secrets(cached.text_document.text)
        if detected:
            logger.warning("Secret detected in %s: %s, skipping file", rel_path, ', '.join(detected))
            cache.invalidate(cached.uri)
            skipped_secrets.append(rel_path)
            continue

        root = build_outline(cached.text_document, cached.yaml_document)
        node_count = len(flatten_tree(root.children))
        if pipelines_only and node_count == 0:
            continue
        files.append({
            "path": rel_path,
            "node_count": node_count,
            "parse_errors": len(cached.yaml_document.errors),
        })

    result = {
        "success": True,
        "path": str(base),
        "file_count": len(files),
        "files": files,
    }
    if skipped_secrets:
        result["skipped_secrets"] = skipped_secrets
    return result

"""Tool to outline a pipeline file hosted on GitHub."""

import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx

from .. import config
from ..security import is_sensitive_filename, scan_content_for_secrets
from ..storage.document_cache import DocumentCache, get_default_cache
from .get_outline import outline_payload

logger = logging.getLogger(__name__)


def parse_github_url(url: str) -> tuple[str, str]:
    """Extract owner and repo name from a GitHub URL or owner/repo string."""
    patterns = [
        r"github\.com/([^/]+)/([^/]+)",  # https://github.com/owner/repo
        r"^([^/]+)/([^/]+)$",  # owner/repo
    ]

    for pattern in patterns:
        match = re.search(pattern, url.strip().rstrip('/'))
        if match:
            owner = match.group(1)
            repo = match.group(2)
            if repo.endswith('.git'):
                repo = repo[:-4]
            return owner, repo

    raise ValueError(f"Could not parse GitHub URL: {url}")


async def fetch_file_content(
    owner: str,
    repo: str,
    path: str,
    ref: Optional[str] = None,
    token: Optional[str] = None,
) -> str:
    """Fetch raw content of a file from GitHub."""
    headers = {
        "Accept": "application/vnd.github.v3.raw",
        "User-Agent": "pipeoutline-mcp",
    }
    if token:
        headers["Authorization"] = f"token {token}"

    url = f"https://api.github.com/repos/{owner}/{repo}/contents/{quote(path.lstrip('/'))}"
    params = {"ref": ref} if ref else None

    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.get(url, headers=headers, params=params)
        response.raise_for_status()
        return response.text


async def get_remote_outline(
    repo: str,
    path: str,
    ref: Optional[str] = None,
    flat: bool = False,
    github_token: Optional[str] = None,
    cache: Optional[DocumentCache] = None,
) -> dict:
    """
    Fetch a pipeline file from GitHub and return its outline.

    Args:
        repo: GitHub repository URL or owner/repo string
        path: Path of the pipeline file within the repository
        ref: Branch, tag or commit (defaults to the repository's default branch)
        flat: Return a pre-order list with depths instead of a nested tree
        github_token: GitHub personal access token (for private repos)
        cache: Document cache (defaults to the process-wide cache)

    Returns:
        Dict with the outline and parse metadata
    """
    if config.is_local_only():
        return {
            "success": False,
            "error": "Remote fetching disabled in local-only mode. Set PIPEOUTLINE_LOCAL_ONLY=false or unset to enable.",
        }

    owner, name = parse_github_url(repo)
    if is_sensitive_filename(path):
        return {"success": False, "error": f"Refusing to read sensitive file: {path}"}

    token = github_token or config.github_token()
    try:
        content = await fetch_file_content(owner, name, path, ref, token)
    except httpx.HTTPStatusError as e:
        return {
            "success": False,
            "error": f"GitHub returned {e.response.status_code} for {owner}/{name}:{path}",
        }
    except httpx.HTTPError as e:
        logger.warning("Fetching %s/%s:%s failed: %s", owner, name, path, e)
        return {"success": False, "error": f"Could not fetch {owner}/{name}:{path}: {e}"}

    detected = scan_content_for_secrets(content)
    if detected:
        logger.warning("Secret detected in %s/%s:%s: %s", owner, name, path, ', '.join(detected))
        return {"success": False, "error": f"File appears to contain secrets: {', '.join(detected)}"}

    cache = cache if cache is not None else get_default_cache()
    uri = f"github://{owner}/{name}/{path.lstrip('/')}" + (f"@{ref}" if ref else "")
    cached = cache.get_text(uri, content)

    result = {
        "success": True,
        "repo": f"{owner}/{name}",
        "file": path,
        "ref": ref,
    }
    result.update(outline_payload(cached, flat))
    return result

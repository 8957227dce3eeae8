"""
GitHub REST client used by the sync command.

Only the two calls the directory needs: repository metadata (with ETag
revalidation) and the latest release. Requests go through a shared
`requests.Session` that carries the token.
"""

import logging
import time
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests

logger = logging.getLogger("main")

GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 10

# Sleep until the window resets once fewer requests than this remain
RATE_LIMIT_FLOOR = 10

MULTIPLAYER_KEYWORDS = [
    "multiplayer",
    "multi-player",
    "online",
    "mmo",
    "mmorpg",
    "co-op",
    "coop",
    "pvp",
    "server",
    "netcode",
    "networking",
    "lan",
]

PLATFORM_TOPICS = {
    "windows": "Windows",
    "linux": "Linux",
    "macos": "macOS",
    "mac": "macOS",
    "osx": "macOS",
    "android": "Android",
    "ios": "iOS",
    "web": "Web",
    "browser": "Web",
    "html5": "Web",
    "wasm": "Web",
    "webgl": "Web",
    "steam": "Steam",
    "itch-io": "itch.io",
}

CROSS_PLATFORM_LANGUAGES = ["Rust", "C++", "C", "Python", "Java", "Go", "JavaScript", "TypeScript"]


class GitHubError(Exception):
    """Unexpected status from the GitHub API"""

    def __init__(self, path, status_code):
        self.path = path
        self.status_code = status_code
        super().__init__(f"GET {path} returned {status_code}")


def create_session(token=None) -> requests.Session:
    session = requests.Session()
    session.headers.update({
        "Accept": "application/vnd.github+json",
        "User-Agent": "opengames-sync",
    })
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    else:
        logger.warning("GITHUB_TOKEN not set. API rate limits will be restricted.")
    return session


def parse_repo_url(repo_url) -> Optional[Tuple[str, str]]:
    """'https://github.com/owner/repo' -> ('owner', 'repo'); None for anything else"""
    parsed = urlparse(repo_url or "")
    if parsed.netloc.lower() not in ("github.com", "www.github.com"):
        return None
    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 2:
        return None
    repo = parts[1][:-4] if parts[1].endswith(".git") else parts[1]
    return parts[0], repo


def wait_for_rate_limit(response, sleep=time.sleep):
    try:
        remaining = int(response.headers["X-RateLimit-Remaining"])
        reset = int(response.headers["X-RateLimit-Reset"])
    except (KeyError, TypeError, ValueError):
        return

    if remaining >= RATE_LIMIT_FLOOR:
        return
    wait = reset - time.time() + 1
    if wait > 0:
        logger.info(f"GitHub rate limit low ({remaining} remaining). Waiting {wait:.0f}s until reset...")
        sleep(wait)


def _get(session, path, headers=None):
    response = session.get(f"{GITHUB_API_URL}{path}", headers=headers, timeout=REQUEST_TIMEOUT)
    wait_for_rate_limit(response)
    return response


def fetch_repo_data(session, owner, repo, etag=None):
    """
    Repository metadata.

    Returns:
        (data, etag, not_modified). `data` is None when the repository is gone
        or when GitHub answered 304 to the `etag` sent.
    """
    path = f"/repos/{owner}/{repo}"
    response = _get(session, path, {"If-None-Match": etag} if etag else None)

    if response.status_code == 304:
        return None, etag, True
    if response.status_code == 404:
        logger.warning(f"Repository not found: {owner}/{repo}")
        return None, None, False
    if response.status_code != 200:
        raise GitHubError(path, response.status_code)
    return response.json(), response.headers.get("ETag"), False


def fetch_latest_release(session, owner, repo) -> Optional[Dict]:
    """Latest release with its summed asset downloads, or None when there is none"""
    path = f"/repos/{owner}/{repo}/releases/latest"
    response = _get(session, path)

    if response.status_code == 404:
        return None
    if response.status_code != 200:
        raise GitHubError(path, response.status_code)

    data = response.json()
    return {
        "tag_name": data["tag_name"],
        "name": data.get("name") or data["tag_name"],
        "published_at": data.get("published_at"),
        "html_url": data.get("html_url"),
        "download_count": sum(asset.get("download_count") or 0 for asset in data.get("assets") or []),
    }


def is_multiplayer_game(topics) -> bool:
    """A topic is a multiplayer keyword, or one of its dash-separated words is ('online-game')"""
    for topic in topics or []:
        lowered = topic.lower()
        if lowered in MULTIPLAYER_KEYWORDS or any(word in MULTIPLAYER_KEYWORDS for word in lowered.split("-")):
            return True
    return False


def infer_platforms(topics, language) -> List[str]:
    """Platforms named by topics; otherwise desktop for languages that build everywhere"""
    platforms = []
    for topic in topics or []:
        platform = PLATFORM_TOPICS.get(topic.lower())
        if platform and platform not in platforms:
            platforms.append(platform)

    if not platforms and language in CROSS_PLATFORM_LANGUAGES:
        platforms = ["Windows", "Linux", "macOS"]
    return platforms

"""Remote URL helpers"""

import re
from urllib.parse import urlparse

SSH_URL = re.compile(r"^[\w.-]+@[\w.-]+:[^/\s]+(/[^/\s]+)+(\.git)?/?$")
HTTPS_URL = re.compile(r"^https://[\w.-]+(:\d+)?(/[^/\s]+){2,}(\.git)?/?$")
FILE_URL = re.compile(r"^file://\S+$")


def is_valid_remote_url(url: str) -> bool:
    """
    Check that url has one of the accepted remote forms.

    Accepted:
        git@github.com:owner/repo.git
        https://gitlab.com/group/subgroup/project.git
        file:///srv/git/project.git
    """
    url = url.strip()
    return bool(SSH_URL.match(url) or HTTPS_URL.match(url) or FILE_URL.match(url))


def parse_repo_url(url: str) -> str:
    """
    Parse a git repository URL into a host/path string.

    Examples:
        https://github.com/user/repo.git -> github.com/user/repo
        git@github.com:user/repo.git -> github.com/user/repo
        https://gitlab.com/group/subgroup/project -> gitlab.com/group/subgroup/project
    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]

    ssh_match = re.match(r"^[\w.-]+@([^:]+):(.+)$", url)
    if ssh_match:
        host, path = ssh_match.groups()
        return f"{host}/{path}"

    parsed = urlparse(url)
    if parsed.netloc and parsed.path:
        return f"{parsed.netloc}/{parsed.path.lstrip('/')}"
    if parsed.scheme == "file":
        return parsed.path.lstrip("/")

    return url.replace(":", "/")


def repo_name_from_url(url: str) -> str:
    """
    Derive a folder name for a repository from its URL.

    Examples:
        git@github.com:owner/repo.git -> repo
        file:///srv/git/project.git -> project
    """
    return parse_repo_url(url).rstrip("/").split("/")[-1]

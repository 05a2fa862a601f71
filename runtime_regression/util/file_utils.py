import shutil
from pathlib import Path


def resolve_cmd(cmd: str) -> str:
    p = Path(cmd)
    if p.is_file() or ("/" in cmd or "\\" in cmd):
        return str(p.resolve())
    found = shutil.which(cmd)
    if found:
        return found
    raise FileNotFoundError(
        f"Executable '{cmd}' not found. "
        f"Either provide a path (e.g. './java') or ensure it's in PATH."
    )


def project_root(start: Path | None = None) -> Path:
    """
    Find the nearest ancestor directory (including the start directory) that
    contains a '.git' folder. This strictly identifies the Git repository root.

    Args:
        start: Optional starting path to search from. If a file path is provided,
               its parent directory is used. Defaults to the current directory.

    Returns:
        Path to the detected Git repository root.

    Raises:
        FileNotFoundError: If no directory containing a '.git' folder is found
                           from the start path up to the filesystem root.
    """
    start_path = (start or Path.cwd()).resolve()
    start_dir = start_path if start_path.is_dir() else start_path.parent

    for candidate in [start_dir] + list(start_dir.parents):
        try:
            if (candidate / ".git").is_dir():
                return candidate
        except OSError:
            # Ignore permission or transient errors and continue searching
            continue

    raise FileNotFoundError(
        f"No Git repository root found starting from '{start_dir}'. Ensure you're "
        f"running inside a cloned repository with a '.git' directory."
    )


def project_relative_path(path: str | Path, root: Path | None = None) -> Path:
    """Absolute paths are returned as is, relative ones are resolved against the project root."""
    p = Path(path)
    if p.is_absolute():
        return p
    return (root or project_root()) / p

"""Shared utilities for dependency sources."""

import subprocess
import threading
import time
from typing import Iterator

from ..exceptions import ToolUnavailableError
from ..logging_config import logger
from .protocol import DEFAULT_TOOL_TIMEOUT

NODE_MODULES = "node_modules"

# Progress indicator interval in seconds
PROGRESS_INTERVAL = 60


def log_command_stderr(command_name: str, stderr: str) -> None:
    """Log stderr of a command at debug level.

    Package managers print warnings on stderr even on success, so stderr
    alone never signals failure.
    """
    if stderr and stderr.strip():
        logger.debug(f"[{command_name}] stderr: {stderr.strip()}")


def run_command(
    cmd: list[str],
    command_name: str,
    timeout: int = DEFAULT_TOOL_TIMEOUT,
    cwd: str | None = None,
) -> subprocess.CompletedProcess:
    """
    Run a command, capturing its output, and map failures to ToolUnavailableError.

    For long-running commands, logs progress every PROGRESS_INTERVAL seconds.

    Args:
        cmd: Command to run as a list
        command_name: Name of the command for error reporting
        timeout: Command timeout in seconds
        cwd: Working directory for the command (optional)

    Returns:
        CompletedProcess result with text stdout/stderr

    Raises:
        ToolUnavailableError: If the command is missing, fails or times out
    """
    cwd_info = f" (cwd: {cwd})" if cwd else ""
    logger.debug(f"Running command: {' '.join(cmd)}{cwd_info}")

    start_time = time.time()
    stop_progress = threading.Event()

    def log_progress():
        """Log progress periodically while command is running."""
        while not stop_progress.wait(PROGRESS_INTERVAL):
            elapsed = int(time.time() - start_time)
            logger.info(f"{command_name} still running... ({elapsed}s elapsed, timeout: {timeout}s)")

    progress_thread = threading.Thread(target=log_progress, daemon=True)
    progress_thread.start()

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            check=True,
            text=True,
            shell=False,
            timeout=timeout,
            cwd=cwd,
        )
        log_command_stderr(command_name, result.stderr)
        return result
    except subprocess.CalledProcessError as e:
        log_command_stderr(command_name, e.stderr or "")
        raise ToolUnavailableError(f"{command_name} command failed with return code {e.returncode}") from e
    except subprocess.TimeoutExpired as e:
        elapsed = int(time.time() - start_time)
        raise ToolUnavailableError(f"{command_name} command timed out after {elapsed}s (limit: {timeout}s)") from e
    except FileNotFoundError as e:
        raise ToolUnavailableError(f"{command_name} command not found - is it installed?") from e
    except PermissionError as e:
        raise ToolUnavailableError(f"{command_name} command is not executable: {e}") from e
    finally:
        stop_progress.set()
        progress_thread.join(timeout=1)


def lookup_scopes(package_path: str) -> Iterator[str]:
    """Yield node_modules scopes to search for a requirement of a package.

    Follows Node's resolution order: the package's own nested
    ``node_modules`` first, then each ancestor ``node_modules`` up to the
    project root. Paths are POSIX-style and relative to the project root;
    the root package is ``""``.

    Example:
        >>> list(lookup_scopes("node_modules/a/node_modules/b"))
        ['node_modules/a/node_modules/b/node_modules', 'node_modules/a/node_modules', 'node_modules']
    """
    current = package_path
    while True:
        yield f"{current}/{NODE_MODULES}" if current else NODE_MODULES
        if not current:
            return
        # Workspace packages outside node_modules resolve from the root store
        marker = current.rfind(f"{NODE_MODULES}/")
        current = current[:marker].rstrip("/") if marker != -1 else ""


def split_package_key(key: str) -> tuple[str | None, str | None]:
    """Split a ``name@version`` (or ``name@range``) key, handling scoped names.

    A leading slash and a pnpm peer suffix such as ``(react@18.2.0)`` are
    ignored.

    Examples:
        >>> split_package_key("@babel/core@7.0.0")
        ('@babel/core', '7.0.0')
        >>> split_package_key("/left-pad@1.3.0")
        ('left-pad', '1.3.0')
    """
    if key.startswith("/"):
        key = key[1:]
    if "(" in key:
        key = key.split("(")[0]

    if key.startswith("@"):
        at_pos = key.find("@", 1)
    else:
        at_pos = key.find("@")

    if at_pos <= 0:
        return None, None

    return key[:at_pos], key[at_pos + 1 :]

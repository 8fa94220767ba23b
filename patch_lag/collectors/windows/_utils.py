"""Windows-specific utility functions."""

import subprocess
import sys


def _decode(raw: bytes) -> str:
    """Decode subprocess bytes with UTF-8; fall back to cp1252 then replace."""
    for enc in ("utf-8-sig", "utf-8", "cp1252"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace")


def run_powershell(cmd: str, timeout: int = 30) -> str:
    """Run a PowerShell command and return stdout as a string.

    Raises RuntimeError on non-zero exit code.
    """
    # Force UTF-8 output encoding so JSON is readable regardless of system locale
    full_cmd = (
        "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
        + cmd
    )

    kwargs: dict = {
        "args": [
            "powershell",
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy", "Bypass",
            "-Command", full_cmd,
        ],
        "capture_output": True,
        "timeout": timeout,
    }
    if sys.platform == "win32":
        kwargs["creationflags"] = 0x08000000  # CREATE_NO_WINDOW

    result = subprocess.run(**kwargs)
    stdout = _decode(result.stdout).strip()
    stderr = _decode(result.stderr).strip()

    if result.returncode != 0:
        raise RuntimeError(stderr or f"PowerShell exited with code {result.returncode}")
    return stdout

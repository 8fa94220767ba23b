"""Write the days-behind result as JSON."""

import json
import sys
from pathlib import Path
from typing import Optional, TextIO

from ..models.schema import LagResult


def render_json(result: LagResult, pretty: bool = False) -> str:
    indent = 2 if pretty else None
    return json.dumps(result.model_dump(by_alias=True), indent=indent)


def write_json(
    result: LagResult,
    output_path: Optional[Path] = None,
    pretty: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """Print the result to *stream* (stdout) and optionally save a copy.

    The file is written first so a write failure never leaves a JSON payload
    on stdout.

    Raises:
        OSError: If *output_path* cannot be written.
    """
    text = render_json(result, pretty=pretty)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
    print(text, file=stream or sys.stdout, flush=True)

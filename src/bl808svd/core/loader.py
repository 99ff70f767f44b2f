from __future__ import annotations

from pathlib import Path

from bl808svd.errors import PathLike, SourceUnavailable


def load_text(path: PathLike) -> str:
    p = Path(path)
    try:
        # vendor files carry the odd stray byte; keep going rather than fail the file
        return p.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise SourceUnavailable(f"cannot read source: {e.strerror or e}", p) from e

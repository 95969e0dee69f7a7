from __future__ import annotations

import sys
from pathlib import Path


def read_log_text(path: str) -> str:
    """
    Lê o relatório exportado do coletor. "-" lê do stdin.
    Exportações antigas vêm em latin-1; tenta utf-8 primeiro.
    """
    if path == "-":
        return sys.stdin.read()

    data = Path(path).read_bytes()
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")

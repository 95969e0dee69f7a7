from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional

from domain.events import RawEvent
from domain.settings import DateOrder

LOGGER = logging.getLogger(__name__)

# cabeçalho exportado pelo coletor ("Data e Hora | Evento")
HEADER_PREFIX = "Data e Hora"

# aceita "mm/dd/yyyy, HH:MM:SS msg" e "mm/dd/yyyy HH:MM | msg"
LINE_RE = re.compile(
    r"""
    ^
    (?P<a>\d{2})/(?P<b>\d{2})/(?P<year>\d{4}),?
    \s+
    (?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?
    \s*
    (?:\|\s*)?
    (?P<msg>.*)
    $
    """,
    re.VERBOSE,
)


def parse_line(line: str, line_number: int, date_order: DateOrder = "MDY") -> Optional[RawEvent]:
    """
    Devolve None para linha fora da gramática ou com data/hora inexistente.
    Nunca lança.
    """
    m = LINE_RE.match(line.strip())
    if not m:
        return None

    a, b = int(m.group("a")), int(m.group("b"))
    month, day = (a, b) if date_order == "MDY" else (b, a)

    try:
        ts = datetime(
            int(m.group("year")),
            month,
            day,
            int(m.group("hour")),
            int(m.group("minute")),
            int(m.group("second") or 0),
        )
    except ValueError:
        return None

    return RawEvent(timestamp=ts, text=m.group("msg").strip(), line_number=line_number)


def tokenize(text: str, date_order: DateOrder = "MDY") -> List[RawEvent]:
    events: List[RawEvent] = []
    dropped = 0

    for i, line in enumerate((text or "").splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(HEADER_PREFIX):
            continue

        ev = parse_line(stripped, i, date_order)
        if ev is None:
            dropped += 1
            LOGGER.warning("Linha %d ignorada (formato/data inválidos): %r", i, stripped)
            continue
        events.append(ev)

    if dropped:
        LOGGER.info("Tokenizer: %d evento(s) lido(s), %d linha(s) descartada(s)", len(events), dropped)

    # sort estável: empates preservam a ordem original das linhas
    events.sort(key=lambda e: e.timestamp)
    return events

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from domain.models import AnalysisResult
from domain.ports import NonConformitySink, ResultSink
from domain.settings import AuditSettings

from .aggregator import aggregate
from .classifier import classify
from .round_monitor import RoundMonitor
from .tokenizer import tokenize

LOGGER = logging.getLogger(__name__)

SettingsLike = Union[AuditSettings, Mapping[str, Any]]


def _as_settings(settings: SettingsLike) -> AuditSettings:
    if isinstance(settings, AuditSettings):
        return settings
    return AuditSettings.from_mapping(settings)


class AuditPipeline:
    """
    Pipeline de auditoria de rondas.

    texto -> tokenizer -> classificador -> monitor de rondas -> agregador -> resultado

    - Uma passada, síncrona, sem estado entre chamadas.
    - Resultado vai (opcionalmente) para um ResultSink e cada apontamento
      para um NonConformitySink (ex.: CSV).
    """

    def __init__(
        self,
        settings: SettingsLike,
        *,
        sink: Optional[ResultSink] = None,
        export_sink: Optional[NonConformitySink] = None,
    ):
        self.settings = _as_settings(settings)
        self.sink = sink
        self.export_sink = export_sink

    def run(self, log_text: str) -> AnalysisResult:
        raw = tokenize(log_text, self.settings.date_order)
        events = classify(raw, self.settings.guards)
        found = RoundMonitor(self.settings).scan(events)
        result = aggregate(found, events)

        LOGGER.info(
            "Auditoria: %d evento(s), %d não conformidade(s), rondas=%s",
            len(events),
            result.total,
            result.has_rounds,
        )

        if self.export_sink is not None:
            for nc in result.non_conformities:
                self.export_sink.publish(nc)

        if self.sink is not None:
            self.sink.handle(result)

        return result


def analyze(log_text: str, settings: SettingsLike) -> AnalysisResult:
    """
    Ponto de entrada do núcleo. Nunca lança por conteúdo do relatório;
    lança SettingsError se a configuração for inválida.
    """
    return AuditPipeline(settings).run(log_text)

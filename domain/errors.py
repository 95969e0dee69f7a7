from __future__ import annotations


class SettingsError(ValueError):
    """
    Configuração inválida (intervalo máximo, total de locais, janelas de janta...).
    Quem chama deve corrigir a configuração, não repetir a análise.
    """


class PreconditionError(RuntimeError):
    """
    Contrato interno quebrado (ex.: eventos fora de ordem cronológica).
    """

"""
Módulo de métricas
Contadores Prometheus para decisões de interceptação e deserialização de bodies
"""
import time
from typing import Optional

from prometheus_client import Counter, Histogram

# Métricas de interceptação
INTERCEPTION_DECISIONS = Counter(
    'observer_interception_decisions_total',
    'Interception gate decisions',
    ['verdict']
)
EXCHANGES_REPORTED = Counter('observer_exchanges_reported_total', 'Exchanges reported to the output sink')

# Métricas de deserialização
BODIES_DESERIALIZED = Counter(
    'observer_bodies_deserialized_total',
    'Body deserialization outcomes',
    ['outcome']
)
DESERIALIZATION_TIME = Histogram('observer_deserialization_seconds', 'Time spent deserializing bodies')


class MetricsRecorder:
    """Registra métricas do observer, podendo ser desabilitado via configuração"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def record_interception(self, intercepted: bool):
        if self.enabled:
            INTERCEPTION_DECISIONS.labels(verdict='intercepted' if intercepted else 'ignored').inc()

    def record_deserialization(self, rendered: Optional[str], duration: float):
        if not self.enabled:
            return
        BODIES_DESERIALIZED.labels(outcome='rendered' if rendered is not None else 'empty').inc()
        DESERIALIZATION_TIME.observe(duration)

    def record_report(self):
        if self.enabled:
            EXCHANGES_REPORTED.inc()


class PerformanceTimer:
    """Context manager para medir tempo de execução"""

    def __init__(self):
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()

    @property
    def duration(self) -> float:
        """Retorna a duração em segundos"""
        if self.start_time is not None and self.end_time is not None:
            return self.end_time - self.start_time
        return 0.0

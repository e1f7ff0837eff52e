"""
Configuração de observação de tráfego
Fachada que concentra saída, gate de interceptação e registro de deserializadores
"""
from typing import Callable, Optional, Sequence, Union

import structlog

from .deserializers import BodyDeserializer, CallableBodyDeserializer
from .gate import (
    CallablePredicate,
    HostPredicate,
    InterceptionGate,
    MethodPredicate,
    PathPredicate,
    RequestPredicate,
    evaluate_predicates,
)
from .locking import ReadWriteLock
from .metrics import MetricsRecorder, PerformanceTimer
from .models import RequestDescriptor, ResponseDescriptor, media_type
from .output import ConsoleOutputSink, OutputSink
from .registry import DeserializerRegistry, run_deserializer
from .settings import ObserverSettings
from .transport import HttpxClient, install_hooks

logger = structlog.get_logger(__name__)

PredicateLike = Union[RequestPredicate, Callable[[RequestDescriptor], bool]]
DeserializerLike = Union[BodyDeserializer, Callable[[bytes], Optional[str]]]


class ObservationConfig:
    """Configuração de observação compartilhada pelo processo.

    Único ponto de mutação do estado de observação: saída ativa,
    predicados de exclusão e deserializadores customizados. Todo o
    estado é protegido por um único lock de leitura/escrita, então
    verificações e deserializações podem rodar em paralelo a partir de
    várias requests em andamento. Predicados, deserializadores e a
    saída rodam fora do lock, sobre um snapshot do estado.
    """

    def __init__(
        self,
        output_sink: Optional[OutputSink] = None,
        settings: Optional[ObserverSettings] = None
    ):
        self.settings = settings or ObserverSettings()
        self.metrics = MetricsRecorder(enabled=self.settings.enable_metrics)

        self._lock = ReadWriteLock()
        self._gate = InterceptionGate()
        self._registry = DeserializerRegistry()
        self._output_sink: OutputSink = output_sink or ConsoleOutputSink()

    @classmethod
    def from_settings(
        cls,
        settings: ObserverSettings,
        output_sink: Optional[OutputSink] = None
    ) -> "ObservationConfig":
        """Cria a configuração registrando os filtros definidos nas settings"""
        config = cls(output_sink=output_sink, settings=settings)

        if settings.ignored_hosts:
            config.ignore_requests_matching(HostPredicate(settings.ignored_hosts))
        if settings.ignored_paths:
            config.ignore_requests_matching(PathPredicate(settings.ignored_paths))
        if settings.ignored_methods:
            config.ignore_requests_matching(MethodPredicate(settings.ignored_methods))

        return config

    @property
    def output_sink(self) -> OutputSink:
        with self._lock.read():
            return self._output_sink

    @output_sink.setter
    def output_sink(self, sink: OutputSink):
        with self._lock.write():
            self._output_sink = sink

    @property
    def predicates(self):
        with self._lock.read():
            return self._gate.predicates

    def reset(self):
        """Restaura a saída padrão e remove predicados e deserializadores customizados"""
        with self._lock.write():
            self._output_sink = ConsoleOutputSink()
            self._gate.clear()
            self._registry.clear_custom()

        logger.debug("Configuração de observação resetada")

    def enable(self, client: HttpxClient) -> bool:
        """Habilita a observação num cliente httpx (síncrono ou assíncrono)"""
        installed = install_hooks(client, self)
        if installed:
            logger.info("Observação habilitada no cliente", client=type(client).__name__)
        return installed

    def ignore_requests_matching(self, predicate: PredicateLike):
        """Ignora requests para as quais o predicado retorna True"""
        if not isinstance(predicate, RequestPredicate):
            predicate = CallablePredicate(predicate)

        with self._lock.write():
            self._gate.add_predicate(predicate)

    def can_intercept(self, request: RequestDescriptor) -> bool:
        """Verifica se a request pode ser interceptada"""
        # Predicados rodam fora do lock: podem chamar de volta esta configuração
        with self._lock.read():
            predicates = self._gate.predicates

        intercept = evaluate_predicates(predicates, request)

        self.metrics.record_interception(intercept)
        return intercept

    def register_deserializer(
        self,
        deserializer: DeserializerLike,
        content_types: Union[str, Sequence[str]]
    ):
        """Registra um deserializador para um ou mais padrões de content type"""
        if not isinstance(deserializer, BodyDeserializer):
            deserializer = CallableBodyDeserializer(deserializer)

        with self._lock.write():
            self._registry.register(deserializer, content_types)

    def resolve_deserializer(self, content_type: str) -> Optional[BodyDeserializer]:
        with self._lock.read():
            return self._registry.resolve(content_type)

    def deserialize_body(self, body: bytes, content_type: str) -> Optional[str]:
        """Deserializa um body ou retorna None se nenhum deserializador for capaz"""
        with PerformanceTimer() as timer:
            with self._lock.read():
                deserializer = self._registry.resolve(content_type)

            # Deserializadores rodam fora do lock pelo mesmo motivo
            rendered = run_deserializer(deserializer, body, content_type)

        self.metrics.record_deserialization(rendered, timer.duration)
        return rendered

    def report(self, request: RequestDescriptor, response: ResponseDescriptor):
        """Renderiza o body da response e entrega a troca para a saída ativa"""
        rendered_body = None
        content_type = media_type(response.content_type)
        if response.truncated:
            rendered_body = f"<body exceeds {self.settings.body_size_limit} bytes, not deserialized>"
        elif response.body and content_type:
            rendered_body = self.deserialize_body(response.body, content_type)

        self.output_sink.report(request, response, rendered_body)
        self.metrics.record_report()

        logger.debug(
            "Troca observada reportada",
            method=request.method,
            url=request.url,
            status=response.status_code,
            content_type=content_type,
            rendered=rendered_body is not None
        )

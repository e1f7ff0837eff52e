"""
Saídas de observação
Destinos plugáveis para os pares request/response observados
"""
import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .models import RequestDescriptor, ResponseDescriptor


class OutputSink(ABC):
    """Destino de um par request/response observado"""

    @abstractmethod
    def report(
        self,
        request: RequestDescriptor,
        response: ResponseDescriptor,
        rendered_body: Optional[str]
    ):
        """Reporta uma troca observada com o body já renderizado"""


class ConsoleOutputSink(OutputSink):
    """Escreve as trocas observadas em formato legível num stream de texto"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self._lock = threading.Lock()

    def report(self, request, response, rendered_body):
        block = self.format_exchange(request, response, rendered_body)

        # Streams compartilhados entre threads não podem intercalar blocos
        with self._lock:
            stream = self.stream or sys.stdout
            stream.write(block)
            stream.flush()

    def format_exchange(
        self,
        request: RequestDescriptor,
        response: ResponseDescriptor,
        rendered_body: Optional[str]
    ) -> str:
        lines = [f"> {request.method} {request.url}"]
        lines.extend(f"  {name}: {value}" for name, value in request.headers.items())
        lines.append(f"< {response.status_code}")
        lines.extend(f"  {name}: {value}" for name, value in response.headers.items())
        lines.append("")
        lines.append(rendered_body if rendered_body is not None else "<none>")
        lines.append("")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class ObservedExchange:
    """Registro de uma troca observada guardado pelo BufferOutputSink"""
    request: RequestDescriptor
    response: ResponseDescriptor
    rendered_body: Optional[str]


class BufferOutputSink(OutputSink):
    """Guarda as trocas observadas em memória"""

    def __init__(self):
        self._exchanges: List[ObservedExchange] = []
        self._lock = threading.Lock()

    @property
    def exchanges(self) -> List[ObservedExchange]:
        with self._lock:
            return list(self._exchanges)

    def report(self, request, response, rendered_body):
        with self._lock:
            self._exchanges.append(ObservedExchange(request, response, rendered_body))

    def clear(self):
        with self._lock:
            self._exchanges.clear()

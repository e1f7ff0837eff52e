"""
Gate de interceptação
Decide se uma request deve ser observada a partir de predicados de exclusão
"""
import fnmatch
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Tuple

import structlog

from .models import RequestDescriptor

logger = structlog.get_logger(__name__)


class RequestPredicate(ABC):
    """Predicado que identifica requests a serem ignoradas"""

    @abstractmethod
    def matches(self, request: RequestDescriptor) -> bool:
        """Retorna True se a request deve ser excluída da observação"""


class HostPredicate(RequestPredicate):
    """Casa o host da request com padrões glob (ex: "*.internal")"""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = [p.lower() for p in patterns]

    def matches(self, request: RequestDescriptor) -> bool:
        host = request.host.lower()
        return any(fnmatch.fnmatch(host, pattern) for pattern in self.patterns)

    def __repr__(self) -> str:
        return f"HostPredicate({self.patterns!r})"


class PathPredicate(RequestPredicate):
    """Casa o path da request com padrões glob (ex: "/.well-known/*")"""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = list(patterns)

    def matches(self, request: RequestDescriptor) -> bool:
        return any(fnmatch.fnmatchcase(request.path, pattern) for pattern in self.patterns)

    def __repr__(self) -> str:
        return f"PathPredicate({self.patterns!r})"


class MethodPredicate(RequestPredicate):
    """Casa o método HTTP da request"""

    def __init__(self, methods: Iterable[str]):
        self.methods = frozenset(m.upper() for m in methods)

    def matches(self, request: RequestDescriptor) -> bool:
        return request.method.upper() in self.methods

    def __repr__(self) -> str:
        return f"MethodPredicate({sorted(self.methods)!r})"


class CallablePredicate(RequestPredicate):
    """Adapta uma função `RequestDescriptor -> bool` para a interface de predicado"""

    def __init__(self, function: Callable[[RequestDescriptor], bool]):
        self.function = function

    def matches(self, request: RequestDescriptor) -> bool:
        return bool(self.function(request))

    def __repr__(self) -> str:
        return f"CallablePredicate({self.function!r})"


class InterceptionGate:
    """Lista ordenada de predicados de exclusão.

    Uma request é interceptada apenas se nenhum predicado casar com ela.
    Sem predicados, toda request é interceptada. A ordem de inserção é
    mantida, mas não altera o resultado.
    """

    def __init__(self):
        self._predicates: List[RequestPredicate] = []

    @property
    def predicates(self) -> Tuple[RequestPredicate, ...]:
        return tuple(self._predicates)

    def add_predicate(self, predicate: RequestPredicate):
        self._predicates.append(predicate)
        logger.debug("Predicado de exclusão adicionado", predicate=repr(predicate))

    def clear(self):
        self._predicates.clear()

    def can_intercept(self, request: RequestDescriptor) -> bool:
        return evaluate_predicates(self._predicates, request)


def evaluate_predicates(predicates: Iterable[RequestPredicate], request: RequestDescriptor) -> bool:
    """Retorna True se nenhum dos predicados de exclusão casar com a request"""
    intercept = True
    for predicate in predicates:
        intercept = intercept and not predicate.matches(request)
    return intercept

"""
Integração com httpx
Event hooks que observam as responses de clientes httpx
"""
from typing import TYPE_CHECKING, Union

import httpx
import structlog

from .models import RequestDescriptor, ResponseDescriptor

if TYPE_CHECKING:
    from .observer import ObservationConfig

logger = structlog.get_logger(__name__)

HttpxClient = Union[httpx.Client, httpx.AsyncClient]


class ObserverHook:
    """Event hook de response para httpx.Client.

    Consulta o gate antes de capturar, lê o body e entrega a troca ao
    ObservationConfig. Erros são logados e nunca interrompem a request
    do cliente.

    Bodies com Content-Length acima de `body_size_limit` não são lidos.
    Sem Content-Length o body é lido inteiro antes de ser cortado no
    limite. Em ambos os casos a troca é reportada como truncada e o
    body não é deserializado.
    """

    def __init__(self, observation_config: "ObservationConfig"):
        self.observation_config = observation_config

    def __call__(self, response: httpx.Response):
        try:
            request = RequestDescriptor.from_httpx(response.request)
            if not self.observation_config.can_intercept(request):
                return

            if self._exceeds_limit(response):
                self.observation_config.report(request, ResponseDescriptor.unread(response))
                return

            response.read()
            self._report(request, response)

        except Exception as e:
            logger.error("Erro ao observar response", error=str(e), url=str(response.request.url))

    def _exceeds_limit(self, response: httpx.Response) -> bool:
        declared = ResponseDescriptor.unread(response).declared_length
        return declared is not None and declared > self.observation_config.settings.body_size_limit

    def _report(self, request: RequestDescriptor, response: httpx.Response):
        limit = self.observation_config.settings.body_size_limit
        self.observation_config.report(request, ResponseDescriptor.from_httpx(response, limit))


class AsyncObserverHook(ObserverHook):
    """Event hook de response para httpx.AsyncClient"""

    async def __call__(self, response: httpx.Response):
        try:
            request = RequestDescriptor.from_httpx(response.request)
            if not self.observation_config.can_intercept(request):
                return

            if self._exceeds_limit(response):
                self.observation_config.report(request, ResponseDescriptor.unread(response))
                return

            await response.aread()
            self._report(request, response)

        except Exception as e:
            logger.error("Erro ao observar response", error=str(e), url=str(response.request.url))


def install_hooks(client: HttpxClient, observation_config: "ObservationConfig") -> bool:
    """Instala o hook de observação no cliente.

    Retorna False se o cliente já estava habilitado para este observer.
    """
    event_hooks = client.event_hooks
    response_hooks = list(event_hooks.get("response", []))

    for hook in response_hooks:
        if isinstance(hook, ObserverHook) and hook.observation_config is observation_config:
            return False

    hook_class = AsyncObserverHook if isinstance(client, httpx.AsyncClient) else ObserverHook
    response_hooks.insert(0, hook_class(observation_config))

    client.event_hooks = {**event_hooks, "response": response_hooks}
    return True

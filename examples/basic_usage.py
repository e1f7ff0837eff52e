#!/usr/bin/env python3
"""
Exemplo básico de uso do Traffic Observer.

Este exemplo demonstra como:
1. Montar a configuração de observação
2. Ignorar requests que não interessam
3. Registrar um deserializador customizado
4. Habilitar a observação num cliente httpx
"""

import httpx

from traffic_observer import (
    HostPredicate,
    MethodPredicate,
    ObservationConfig,
    ObserverSettings,
    configure_logging,
)


def csv_preview(body: bytes):
    """Mostra apenas as primeiras linhas de um CSV."""
    lines = body.decode("utf-8", errors="replace").splitlines()
    return "\n".join(lines[:5])


def handler(request: httpx.Request) -> httpx.Response:
    """Servidor fake para o exemplo rodar sem rede."""
    if request.url.path == "/report.csv":
        return httpx.Response(200, text="id,name\n1,João\n2,Maria\n", headers={"content-type": "text/csv"})
    return httpx.Response(200, json={"status": "ok", "path": request.url.path})


def main():
    settings = ObserverSettings(log_format="console", ignored_paths=["/health"])
    configure_logging(settings.log_level, settings.log_format)

    config = ObservationConfig.from_settings(settings)
    config.ignore_requests_matching(HostPredicate(["*.internal"]))
    config.ignore_requests_matching(MethodPredicate(["OPTIONS"]))
    config.register_deserializer(csv_preview, ["text/csv", "application/csv"])

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        config.enable(client)

        client.get("https://api.example.com/users")
        client.get("https://api.example.com/report.csv")
        client.get("https://api.example.com/health")      # ignorada pelo path
        client.get("http://metrics.internal/status")      # ignorada pelo host


if __name__ == "__main__":
    main()

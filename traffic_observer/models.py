"""
Modelos de request e response observados
Descritores independentes do cliente HTTP usados por predicados e saídas
"""
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlsplit

import httpx


@dataclass(frozen=True)
class RequestDescriptor:
    """Descrição de uma request de saída"""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"

    @property
    def content_type(self) -> Optional[str]:
        return header_value(self.headers, "content-type")

    @classmethod
    def from_httpx(cls, request: httpx.Request) -> "RequestDescriptor":
        return cls(
            method=request.method,
            url=str(request.url),
            headers=dict(request.headers),
            body=_read_request_body(request)
        )


@dataclass(frozen=True)
class ResponseDescriptor:
    """Descrição da response recebida para uma request observada"""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    truncated: bool = False

    @property
    def content_type(self) -> Optional[str]:
        return header_value(self.headers, "content-type")

    @classmethod
    def from_httpx(cls, response: httpx.Response, body_size_limit: Optional[int] = None) -> "ResponseDescriptor":
        """Cria o descritor a partir de uma response já lida"""
        body = response.content
        truncated = body_size_limit is not None and len(body) > body_size_limit
        if truncated:
            body = body[:body_size_limit]

        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=body,
            truncated=truncated
        )

    @classmethod
    def unread(cls, response: httpx.Response) -> "ResponseDescriptor":
        """Cria o descritor sem ler o body (body grande demais para capturar)"""
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            truncated=True
        )

    @property
    def declared_length(self) -> Optional[int]:
        value = header_value(self.headers, "content-length")
        if value is None or not value.isdigit():
            return None
        return int(value)


def header_value(headers: Dict[str, str], name: str) -> Optional[str]:
    """Busca um header ignorando maiúsculas/minúsculas"""
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def media_type(content_type: Optional[str]) -> Optional[str]:
    """Remove parâmetros do content type ("application/json; charset=utf-8" -> "application/json")"""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip()


def _read_request_body(request: httpx.Request) -> Optional[bytes]:
    # Requests com stream ainda não consumido não expõem o conteúdo
    try:
        return request.content or None
    except httpx.RequestNotRead:
        return None

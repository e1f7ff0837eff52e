#!/usr/bin/env python3
"""
Testes unitários para a integração com httpx.
"""

import asyncio

import httpx
from traffic_observer.gate import HostPredicate
from traffic_observer.observer import ObservationConfig
from traffic_observer.output import BufferOutputSink
from traffic_observer.settings import ObserverSettings
from traffic_observer.transport import AsyncObserverHook, ObserverHook


def handler(request):
    """Handler do MockTransport que responde conforme o path."""
    if request.url.path == "/json":
        return httpx.Response(200, json={"id": 1, "name": "Maria"})
    if request.url.path == "/text":
        return httpx.Response(200, text="x" * 4096, headers={"content-type": "text/plain"})
    if request.url.path == "/chunked":
        stream = httpx.ByteStream(b"y" * 4096)
        return httpx.Response(200, stream=stream, headers={"content-type": "text/plain"})
    return httpx.Response(200, content=b"\x00\x01", headers={"content-type": "application/octet-stream"})


class TestObserverHook:
    """Testes para o hook síncrono."""

    def setup_method(self):
        """Configuração para cada teste."""
        self.sink = BufferOutputSink()
        self.config = ObservationConfig(output_sink=self.sink)
        self.client = httpx.Client(transport=httpx.MockTransport(handler))

    def teardown_method(self):
        self.client.close()

    def test_enable_reports_exchanges(self):
        """Testa que responses de um cliente habilitado são reportadas."""
        assert self.config.enable(self.client)

        response = self.client.get("https://api.example.com/json")

        assert response.json() == {"id": 1, "name": "Maria"}
        exchange = self.sink.exchanges[0]
        assert exchange.request.method == "GET"
        assert exchange.request.url == "https://api.example.com/json"
        assert exchange.response.status_code == 200
        assert '"name": "Maria"' in exchange.rendered_body

    def test_enable_twice_is_noop(self):
        """Testa que habilitar o mesmo cliente duas vezes não duplica o hook."""
        assert self.config.enable(self.client)
        assert not self.config.enable(self.client)

        self.client.get("https://api.example.com/json")

        assert len(self.sink.exchanges) == 1
        assert sum(isinstance(h, ObserverHook) for h in self.client.event_hooks["response"]) == 1

    def test_existing_hooks_are_kept(self):
        """Testa que hooks já instalados no cliente continuam ativos."""
        seen = []
        self.client.event_hooks = {"response": [lambda response: seen.append(response.status_code)]}

        self.config.enable(self.client)
        self.client.get("https://api.example.com/json")

        assert seen == [200]
        assert len(self.sink.exchanges) == 1

    def test_ignored_requests_are_not_reported(self):
        """Testa que requests excluídas pelo gate não são reportadas."""
        self.config.ignore_requests_matching(HostPredicate(["api.example.com"]))
        self.config.enable(self.client)

        self.client.get("https://api.example.com/json")
        self.client.get("https://other.example.com/json")

        assert [e.request.host for e in self.sink.exchanges] == ["other.example.com"]

    def test_undecodable_body_reports_none(self):
        """Testa que bodies sem deserializador são reportados sem renderização."""
        self.config.enable(self.client)
        self.client.get("https://api.example.com/binary")

        assert self.sink.exchanges[0].rendered_body is None

    def test_body_over_declared_length_is_not_read(self):
        """Testa que bodies com Content-Length acima do limite não são lidos nem deserializados."""
        config = ObservationConfig(output_sink=self.sink, settings=ObserverSettings(body_size_limit=1024))
        config.enable(self.client)

        with self.client.stream("GET", "https://api.example.com/text") as response:
            assert len(response.read()) == 4096

        exchange = self.sink.exchanges[0]
        assert exchange.response.truncated
        assert exchange.response.body is None
        assert exchange.rendered_body == "<body exceeds 1024 bytes, not deserialized>"

    def test_body_without_length_is_truncated(self):
        """Testa que bodies sem Content-Length acima do limite são cortados e não deserializados."""
        config = ObservationConfig(output_sink=self.sink, settings=ObserverSettings(body_size_limit=1024))
        config.enable(self.client)

        response = self.client.get("https://api.example.com/chunked")

        assert len(response.content) == 4096
        exchange = self.sink.exchanges[0]
        assert exchange.response.truncated
        assert exchange.response.body == b"y" * 1024
        assert exchange.rendered_body == "<body exceeds 1024 bytes, not deserialized>"

    def test_body_within_limit_is_deserialized(self):
        """Testa que bodies dentro do limite são deserializados normalmente."""
        config = ObservationConfig(output_sink=self.sink, settings=ObserverSettings(body_size_limit=8192))
        config.enable(self.client)

        self.client.get("https://api.example.com/text")

        assert not self.sink.exchanges[0].response.truncated
        assert self.sink.exchanges[0].rendered_body == "x" * 4096

    def test_sink_errors_do_not_break_requests(self):
        """Testa que erros na saída não interrompem a request do cliente."""
        class BrokenSink(BufferOutputSink):
            def report(self, request, response, rendered_body):
                raise RuntimeError("sink down")

        self.config.output_sink = BrokenSink()
        self.config.enable(self.client)

        assert self.client.get("https://api.example.com/json").status_code == 200


class TestAsyncObserverHook:
    """Testes para o hook assíncrono."""

    def test_enable_async_client(self):
        """Testa observação com httpx.AsyncClient."""
        sink = BufferOutputSink()
        config = ObservationConfig(output_sink=sink)

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                config.enable(client)
                assert isinstance(client.event_hooks["response"][0], AsyncObserverHook)
                return await client.get("https://api.example.com/json")

        response = asyncio.run(run())

        assert response.status_code == 200
        assert '"id": 1' in sink.exchanges[0].rendered_body

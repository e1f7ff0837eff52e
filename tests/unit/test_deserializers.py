#!/usr/bin/env python3
"""
Testes unitários para os deserializadores embutidos.
"""

import struct

from traffic_observer.deserializers import (
    CallableBodyDeserializer,
    HTMLBodyDeserializer,
    ImageBodyDeserializer,
    JSONBodyDeserializer,
    PlaintextBodyDeserializer,
    XMLBodyDeserializer,
    default_deserializers,
)


def make_png(width, height):
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + struct.pack(">II", width, height) + b"\x08\x02\x00\x00\x00"


def make_gif(width, height):
    return b"GIF89a" + struct.pack("<HH", width, height) + b"\x00\x00\x00"


def make_jpeg(width, height):
    app0 = b"\xff\xe0" + struct.pack(">H", 16) + b"JFIF\x00" + b"\x00" * 9
    sof0 = b"\xff\xc0" + struct.pack(">H", 17) + b"\x08" + struct.pack(">HH", height, width) + b"\x00" * 10
    return b"\xff\xd8" + app0 + sof0


class TestJSONBodyDeserializer:
    """Testes para o deserializador JSON."""

    def setup_method(self):
        self.deserializer = JSONBodyDeserializer()

    def test_pretty_prints_json(self):
        """Testa formatação de JSON com indentação."""
        rendered = self.deserializer.deserialize(b'{"name":"Jo\xc3\xa3o","ids":[1,2]}')
        assert rendered == '{\n  "name": "João",\n  "ids": [\n    1,\n    2\n  ]\n}'

    def test_invalid_json(self):
        """Testa que JSON inválido resulta em None."""
        assert self.deserializer.deserialize(b"{invalid") is None
        assert self.deserializer.deserialize(b"\xff\xfe") is None


class TestXMLBodyDeserializer:
    """Testes para o deserializador XML."""

    def setup_method(self):
        self.deserializer = XMLBodyDeserializer()

    def test_pretty_prints_xml(self):
        """Testa formatação de XML com indentação."""
        rendered = self.deserializer.deserialize(b"<root><item>1</item></root>")
        assert rendered.startswith("<?xml")
        assert "\n<root>\n  <item>1</item>\n</root>" in rendered

    def test_invalid_xml(self):
        """Testa que XML inválido resulta em None."""
        assert self.deserializer.deserialize(b"<root><item></root>") is None


class TestHTMLBodyDeserializer:
    """Testes para o deserializador HTML."""

    def test_prettifies_html(self):
        """Testa formatação de HTML."""
        rendered = HTMLBodyDeserializer().deserialize(b"<html><body><p>Hello</p></body></html>")
        assert "<p>" in rendered
        assert "Hello" in rendered
        assert rendered.count("\n") > 1

    def test_undecodable_html(self):
        """Testa que bytes que não são UTF-8 resultam em None."""
        assert HTMLBodyDeserializer().deserialize(b"\xff\xfe<p>") is None


class TestImageBodyDeserializer:
    """Testes para o deserializador de imagens."""

    def setup_method(self):
        self.deserializer = ImageBodyDeserializer()

    def test_png_dimensions(self):
        """Testa leitura das dimensões de PNG."""
        assert self.deserializer.deserialize(make_png(640, 480)) == "640px × 480px image"

    def test_gif_dimensions(self):
        """Testa leitura das dimensões de GIF."""
        assert self.deserializer.deserialize(make_gif(32, 16)) == "32px × 16px image"

    def test_jpeg_dimensions(self):
        """Testa leitura das dimensões de JPEG a partir do segmento SOF."""
        assert self.deserializer.deserialize(make_jpeg(800, 600)) == "800px × 600px image"

    def test_unknown_or_truncated_image(self):
        """Testa que imagens desconhecidas ou truncadas resultam em None."""
        assert self.deserializer.deserialize(b"not an image") is None
        assert self.deserializer.deserialize(make_png(1, 1)[:20]) is None
        assert self.deserializer.deserialize(b"\xff\xd8\xff\xe0") is None


class TestPlaintextBodyDeserializer:
    """Testes para o deserializador de texto."""

    def test_decodes_utf8(self):
        """Testa decodificação UTF-8."""
        assert PlaintextBodyDeserializer().deserialize("São Paulo".encode("utf-8")) == "São Paulo"

    def test_invalid_utf8(self):
        """Testa que bytes inválidos resultam em None."""
        assert PlaintextBodyDeserializer().deserialize(b"\xff\xfe\xfd") is None


class TestCallableBodyDeserializer:
    """Testes para o adaptador de funções."""

    def test_wraps_function(self):
        """Testa que a função recebe o body e seu retorno é repassado."""
        deserializer = CallableBodyDeserializer(lambda body: body.hex())
        assert deserializer.deserialize(b"\x01\x02") == "0102"


def test_default_deserializers_patterns():
    """Testa os padrões embutidos."""
    patterns = [pattern for pattern, _ in default_deserializers()]
    assert patterns == ["*/json", "*/xml", "*/html", "image/*", "text/plain"]

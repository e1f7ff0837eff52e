"""
Deserializadores de body HTTP
Convertem o body bruto de requests/responses em texto legível por content type
"""
import json
import struct
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple
from xml.dom import minidom
from xml.parsers.expat import ExpatError

from bs4 import BeautifulSoup


class BodyDeserializer(ABC):
    """Interface de um deserializador de body.

    Implementações não guardam estado e podem ser compartilhadas entre
    threads. Retornar None significa que o body não pôde ser convertido.
    """

    @abstractmethod
    def deserialize(self, body: bytes) -> Optional[str]:
        """Converte o body em texto ou retorna None"""


class JSONBodyDeserializer(BodyDeserializer):
    """Formata bodies JSON com indentação"""

    def deserialize(self, body: bytes) -> Optional[str]:
        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None

        return json.dumps(data, indent=2, ensure_ascii=False)


class XMLBodyDeserializer(BodyDeserializer):
    """Formata bodies XML com indentação"""

    def deserialize(self, body: bytes) -> Optional[str]:
        try:
            document = minidom.parseString(body)
        except ExpatError:
            return None

        # toprettyxml gera linhas vazias para nós de texto com espaços
        lines = document.toprettyxml(indent="  ").splitlines()
        return "\n".join(line for line in lines if line.strip())


class HTMLBodyDeserializer(BodyDeserializer):
    """Formata bodies HTML usando BeautifulSoup"""

    def deserialize(self, body: bytes) -> Optional[str]:
        try:
            markup = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

        return BeautifulSoup(markup, "html.parser").prettify().rstrip("\n")


class ImageBodyDeserializer(BodyDeserializer):
    """Descreve imagens PNG, GIF e JPEG pelas suas dimensões"""

    PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
    GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
    JPEG_SIGNATURE = b"\xff\xd8"

    # Marcadores SOF que carregam altura e largura do frame
    JPEG_SOF_MARKERS = frozenset(range(0xC0, 0xD0)) - {0xC4, 0xC8, 0xCC}

    def deserialize(self, body: bytes) -> Optional[str]:
        size = self._read_size(body)
        if size is None:
            return None

        width, height = size
        return f"{width}px × {height}px image"

    def _read_size(self, body: bytes) -> Optional[Tuple[int, int]]:
        if body.startswith(self.PNG_SIGNATURE) and len(body) >= 24:
            return struct.unpack(">II", body[16:24])

        if body[:6] in self.GIF_SIGNATURES and len(body) >= 10:
            return struct.unpack("<HH", body[6:10])

        if body.startswith(self.JPEG_SIGNATURE):
            return self._read_jpeg_size(body)

        return None

    def _read_jpeg_size(self, body: bytes) -> Optional[Tuple[int, int]]:
        """Percorre os segmentos JPEG até encontrar um SOF"""
        offset = 2
        while offset + 4 <= len(body):
            if body[offset] != 0xFF:
                return None

            marker = body[offset + 1]
            if marker == 0xFF:
                # Bytes de preenchimento entre segmentos
                offset += 1
                continue

            segment_length = struct.unpack(">H", body[offset + 2:offset + 4])[0]

            if marker in self.JPEG_SOF_MARKERS:
                if offset + 9 > len(body):
                    return None
                height, width = struct.unpack(">HH", body[offset + 5:offset + 9])
                return width, height

            offset += 2 + segment_length

        return None


class PlaintextBodyDeserializer(BodyDeserializer):
    """Decodifica o body como texto UTF-8"""

    def deserialize(self, body: bytes) -> Optional[str]:
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError:
            return None


class CallableBodyDeserializer(BodyDeserializer):
    """Adapta uma função `bytes -> Optional[str]` para a interface de deserializador"""

    def __init__(self, function: Callable[[bytes], Optional[str]]):
        self.function = function

    def deserialize(self, body: bytes) -> Optional[str]:
        return self.function(body)

    def __repr__(self) -> str:
        return f"CallableBodyDeserializer({self.function!r})"


def default_deserializers():
    """Retorna os pares (padrão, deserializador) embutidos, na ordem de registro"""
    return (
        ("*/json", JSONBodyDeserializer()),
        ("*/xml", XMLBodyDeserializer()),
        ("*/html", HTMLBodyDeserializer()),
        ("image/*", ImageBodyDeserializer()),
        ("text/plain", PlaintextBodyDeserializer()),
    )

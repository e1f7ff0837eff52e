"""
Registro de deserializadores de body
Resolve o deserializador adequado para um content type a partir dos padrões registrados
"""
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

import structlog

from .deserializers import BodyDeserializer, default_deserializers
from .matcher import parse_content_type, segments_match

logger = structlog.get_logger(__name__)

ContentTypes = Union[str, Sequence[str]]


class DeserializerRegistry:
    """Registro de deserializadores por padrão de content type.

    Mantém dois conjuntos de entradas:

    * padrões embutidos, fixos desde a construção;
    * padrões customizados, registrados em tempo de execução.

    A resolução percorre primeiro os padrões customizados e depois os
    embutidos, cada grupo na ordem de registro, e retorna o primeiro que
    casar. Um padrão embutido que também foi registrado como customizado
    só é examinado uma vez, na posição do customizado.
    """

    def __init__(self, defaults: Optional[Sequence[Tuple[str, BodyDeserializer]]] = None):
        if defaults is None:
            defaults = default_deserializers()

        self._defaults: Mapping[str, BodyDeserializer] = MappingProxyType(dict(defaults))
        self._custom: Dict[str, BodyDeserializer] = {}

    @property
    def defaults(self) -> Mapping[str, BodyDeserializer]:
        """Padrões embutidos (somente leitura)"""
        return self._defaults

    @property
    def custom(self) -> Mapping[str, BodyDeserializer]:
        """Cópia dos padrões customizados"""
        return dict(self._custom)

    def register(self, deserializer: BodyDeserializer, content_types: ContentTypes):
        """Registra um deserializador para um ou mais padrões.

        Nenhuma validação de sintaxe é feita aqui; padrões malformados só
        são detectados durante a resolução.
        """
        if isinstance(content_types, str):
            content_types = [content_types]

        for content_type in content_types:
            replaced = content_type in self._custom
            self._custom[content_type] = deserializer
            logger.debug(
                "Deserializador registrado",
                pattern=content_type,
                deserializer=type(deserializer).__name__,
                replaced=replaced
            )

    def clear_custom(self):
        """Remove todos os padrões customizados, mantendo os embutidos"""
        self._custom.clear()

    def candidates(self) -> Iterator[Tuple[str, BodyDeserializer]]:
        """Itera os pares (padrão, deserializador) na ordem de resolução"""
        yield from self._custom.items()

        for pattern, deserializer in self._defaults.items():
            if pattern not in self._custom:
                yield pattern, deserializer

    def resolve(self, content_type: str) -> Optional[BodyDeserializer]:
        """Encontra o deserializador para um content type concreto.

        Se o content type estiver malformado, ou se um padrão malformado for
        examinado antes de algum match, a busca é interrompida e nenhum
        deserializador é retornado.
        """
        actual_parts = parse_content_type(content_type)

        for pattern, deserializer in self.candidates():
            pattern_parts = parse_content_type(pattern)
            if pattern_parts is None or actual_parts is None:
                logger.debug(
                    "Content type malformado, interrompendo resolução",
                    pattern=pattern,
                    content_type=content_type
                )
                return None

            if segments_match(pattern_parts, actual_parts):
                return deserializer

        return None

    def deserialize_body(self, body: bytes, content_type: str) -> Optional[str]:
        """Deserializa o body com o deserializador resolvido para o content type"""
        return run_deserializer(self.resolve(content_type), body, content_type)


def run_deserializer(
    deserializer: Optional[BodyDeserializer],
    body: bytes,
    content_type: str
) -> Optional[str]:
    """Executa um deserializador já resolvido, convertendo falhas em None"""
    if deserializer is None:
        return None

    try:
        return deserializer.deserialize(body)
    except Exception as e:
        logger.warning(
            "Erro ao deserializar body",
            error=str(e),
            content_type=content_type,
            deserializer=type(deserializer).__name__
        )
        return None

"""
Módulo de matching de content types
Compara content types concretos com padrões no formato "tipo/subtipo" com curinga
"""
from typing import Optional, Tuple

WILDCARD = "*"


def parse_content_type(value: str) -> Optional[Tuple[str, str]]:
    """Divide um content type em (tipo, subtipo) ou retorna None se malformado"""
    if not isinstance(value, str):
        return None

    parts = value.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None

    return parts[0], parts[1]


def segments_match(pattern_parts: Tuple[str, str], actual_parts: Tuple[str, str]) -> bool:
    """Compara segmento a segmento, aceitando curinga no padrão"""
    return all(
        expected in (WILDCARD, actual)
        for expected, actual in zip(pattern_parts, actual_parts)
    )


def matches(pattern: str, actual: str) -> bool:
    """Verifica se o content type `actual` casa com o padrão `pattern`.

    A comparação é exata e sensível a maiúsculas. Parâmetros como
    "; charset=utf-8" não são removidos aqui, isso é responsabilidade
    de quem chama.
    """
    pattern_parts = parse_content_type(pattern)
    actual_parts = parse_content_type(actual)

    if pattern_parts is None or actual_parts is None:
        return False

    return segments_match(pattern_parts, actual_parts)

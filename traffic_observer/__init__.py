"""
Traffic Observer

Núcleo de configuração e despacho para observação de tráfego HTTP.
Decide quais requests observar e qual deserializador renderiza cada body.
"""

__version__ = "1.0.0"
__author__ = "Traffic Observer Team"
__description__ = "Configuration and dispatch core for HTTP traffic observation"

from typing import Optional

from .deserializers import (
    BodyDeserializer,
    CallableBodyDeserializer,
    HTMLBodyDeserializer,
    ImageBodyDeserializer,
    JSONBodyDeserializer,
    PlaintextBodyDeserializer,
    XMLBodyDeserializer,
)
from .gate import (
    CallablePredicate,
    HostPredicate,
    InterceptionGate,
    MethodPredicate,
    PathPredicate,
    RequestPredicate,
)
from .log import configure_logging
from .matcher import matches
from .models import RequestDescriptor, ResponseDescriptor
from .observer import ObservationConfig
from .output import BufferOutputSink, ConsoleOutputSink, ObservedExchange, OutputSink
from .registry import DeserializerRegistry
from .settings import ConfigManager, ObserverSettings


def create_observation_config(
    config_path: Optional[str] = None,
    output_sink: Optional[OutputSink] = None
) -> ObservationConfig:
    """Monta a configuração de observação do processo a partir de env/YAML"""
    config_manager = ConfigManager(config_path=config_path)
    settings = config_manager.settings

    configure_logging(settings.log_level, settings.log_format)
    return ObservationConfig.from_settings(settings, output_sink=output_sink)


__all__ = [
    'BodyDeserializer',
    'CallableBodyDeserializer',
    'HTMLBodyDeserializer',
    'ImageBodyDeserializer',
    'JSONBodyDeserializer',
    'PlaintextBodyDeserializer',
    'XMLBodyDeserializer',
    'CallablePredicate',
    'HostPredicate',
    'InterceptionGate',
    'MethodPredicate',
    'PathPredicate',
    'RequestPredicate',
    'configure_logging',
    'matches',
    'RequestDescriptor',
    'ResponseDescriptor',
    'ObservationConfig',
    'BufferOutputSink',
    'ConsoleOutputSink',
    'ObservedExchange',
    'OutputSink',
    'DeserializerRegistry',
    'ConfigManager',
    'ObserverSettings',
    'create_observation_config',
]

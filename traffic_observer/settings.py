"""
Configurações do Traffic Observer
Gerencia configurações de ambiente, arquivo YAML e validações
"""
import os
from typing import Any, Dict, List, Optional

import structlog
import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)


class ObserverSettings(BaseSettings):
    """Configurações principais do observer"""

    model_config = SettingsConfigDict(env_prefix="OBSERVER_", case_sensitive=False)

    # Configurações de logging
    log_level: str = Field(default="INFO", description="Nível de log")
    log_format: str = Field(default="json", description="Formato do log (json ou console)")

    # Configurações de captura
    body_size_limit: int = Field(default=1024 * 1024, description="Limite do body deserializado em bytes")

    # Configurações de filtros
    ignored_hosts: List[str] = Field(default_factory=list, description="Hosts (glob) para ignorar")
    ignored_paths: List[str] = Field(default_factory=list, description="Paths (glob) para ignorar")
    ignored_methods: List[str] = Field(default_factory=list, description="Métodos HTTP para ignorar")

    # Configurações de monitoramento
    enable_metrics: bool = Field(default=True, description="Habilitar métricas Prometheus")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level deve ser um de: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ('json', 'console'):
            raise ValueError('log_format deve ser json ou console')
        return v.lower()

    @field_validator('body_size_limit')
    @classmethod
    def validate_body_size_limit(cls, v):
        if v < 1024 or v > 16 * 1024 * 1024:  # Entre 1KB e 16MB
            raise ValueError('body_size_limit deve estar entre 1024 e 16777216 bytes')
        return v

    @field_validator('ignored_methods')
    @classmethod
    def validate_ignored_methods(cls, v):
        return [method.upper() for method in v]


class ConfigManager:
    """Gerenciador de configurações com suporte a arquivos YAML"""

    def __init__(self, config_path: Optional[str] = None):
        config_path = config_path or os.getenv('OBSERVER_CONFIG_PATH')
        self.config_path = config_path
        self.settings = ObserverSettings()

        if config_path and os.path.exists(config_path):
            self._load_config_file(config_path)

    def _load_config_file(self, config_path: str):
        """Carrega configurações de arquivo YAML"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}

            if 'observer' in config_data:
                self.settings = ObserverSettings(**self._known_fields(config_data['observer']))

        except Exception as e:
            logger.error(
                "Erro ao carregar arquivo de configuração",
                config_path=config_path,
                error=str(e)
            )
            # Continua com configurações padrão

    def _known_fields(self, values: Dict[str, Any]) -> Dict[str, Any]:
        known = {}
        for key, value in values.items():
            if key in ObserverSettings.model_fields:
                known[key] = value
            else:
                logger.warning("Chave de configuração desconhecida ignorada", key=key)
        return known


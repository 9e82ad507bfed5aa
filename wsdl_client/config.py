"""
Конфигурация для генерации SOAP клиента
"""

import os
from dataclasses import asdict, dataclass, field, fields
from typing import List, Optional

import toml

from .exceptions import ConfigError
from .runtime import constants

CONFIG_FILE_NAME = "wsdl_client.toml"


@dataclass
class WsdlConfig:
    """Конфигурация генератора SOAP клиента"""

    input_file: Optional[str] = None
    output_dir: Optional[str] = None
    prefix: str = ""
    suffix: str = ""
    one_file_per_service: bool = False
    namespace_name: str = ""
    allowed_class_names: List[str] = field(default_factory=list)
    assume_class_exists: bool = False
    omit_type_constructors: bool = False
    verbose: bool = False
    soap_feature_flags: List[str] = field(default_factory=list)
    wsdl_cache_mode: str = ""
    compression_mode: str = ""

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE_NAME, search_dir: str = None
    ) -> Optional["WsdlConfig"]:
        """Загрузка конфигурации из файла"""
        # Если указана директория для поиска, ищем конфиг там
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, CONFIG_FILE_NAME)
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except (OSError, toml.TomlDecodeError):
            return None

        known = {_.name for _ in fields(cls)}
        return cls(**{key: value for key, value in config_data.items() if key in known})

    def save_to_file(self, config_path: str = CONFIG_FILE_NAME) -> None:
        """Сохранение конфигурации в файл"""
        config_data = {
            key: value for key, value in asdict(self).items() if value is not None
        }

        with open(config_path, "w") as f:
            toml.dump(config_data, f)

    def merge_with_args(self, args) -> "WsdlConfig":
        """Объединение с аргументами командной строки, аргументы приоритетнее"""
        merged = asdict(self)

        for key in merged:
            value = getattr(args, key, None)
            if value not in (None, "", [], False):
                merged[key] = value

        return WsdlConfig(**merged)

    @property
    def compression_flags(self) -> List[str]:
        return [_.strip() for _ in self.compression_mode.split("|") if _.strip()]

    def is_class_allowed(self, class_name: str) -> bool:
        return not self.allowed_class_names or class_name in self.allowed_class_names

    def validate(self) -> "WsdlConfig":
        """Проверка обязательных полей и имен опций SOAP"""
        if not self.input_file:
            raise ConfigError("Не указан WSDL файл (input_file)")

        if not self.output_dir:
            raise ConfigError("Не указана директория для генерации (output_dir)")

        for flag in self.soap_feature_flags:
            if flag not in constants.FEATURES:
                raise ConfigError(f"Неизвестная опция SOAP: {flag}")

        if self.wsdl_cache_mode and self.wsdl_cache_mode not in constants.CACHE_MODES:
            raise ConfigError(f"Неизвестный режим кеша WSDL: {self.wsdl_cache_mode}")

        for flag in self.compression_flags:
            if not flag.isdigit() and flag not in constants.COMPRESSION_MODES:
                raise ConfigError(f"Неизвестный режим сжатия: {flag}")

        if self.namespace_name and not all(
            part.isidentifier() for part in self.namespace_name.split(".")
        ):
            raise ConfigError(f"Некорректное имя пакета: {self.namespace_name}")

        return self

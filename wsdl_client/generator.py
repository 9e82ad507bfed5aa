"""
Главный модуль генератора - чистый интерфейс
"""

from typing import List

from .config import WsdlConfig
from .internal.generator.client_generator import ClientGenerator
from .internal.types.models import Project


class WsdlClientGenerator:
    """Чистый интерфейс для генерации SOAP клиентов"""

    def __init__(self, config: WsdlConfig):
        self.generator = ClientGenerator(config.validate())

    def build(self) -> Project:
        """Загрузка WSDL и сборка файлов клиента без записи"""
        self.generator.load()
        return self.generator.build_project()

    def generate(self) -> List[str]:
        """Генерация клиента в output_dir"""
        return self.generator.generate()


def generate_client(config: WsdlConfig) -> List[str]:
    """Создание SOAP клиента из WSDL по конфигурации"""
    return WsdlClientGenerator(config).generate()

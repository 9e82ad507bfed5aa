import logging
import os
from typing import List, Optional, Tuple

from ...config import WsdlConfig
from ...exceptions import NoServiceLoadedError, OutputDirError
from ..parser.wsdl import Description, load_description
from ..types.descriptors import ServiceDescriptor, TypeDescriptor
from ..types.models import Project
from ..utils import log_step
from .emitter import Emitter
from .service_modeler import model_service
from .type_modeler import model_types

logger = logging.getLogger(__name__)


class ClientGenerator:
    """Генератор SOAP клиента из WSDL"""

    def __init__(self, config: WsdlConfig):
        self.config = config
        self.description: Optional[Description] = None
        self.types: Tuple[TypeDescriptor, ...] = ()
        self.service: Optional[ServiceDescriptor] = None

    def generate(self) -> List[str]:
        """Основная генерация: загрузка, модели и запись файлов"""
        log_step(logger, self.config, "Starting generation")

        self.load()
        paths = self.save()

        log_step(logger, self.config, "Generation complete")
        return paths

    def load(self) -> ServiceDescriptor:
        """Загрузка WSDL и построение моделей типов и сервиса"""
        log_step(logger, self.config, "Loading the wsdl %s", self.config.input_file)
        self.description = load_description(self.config.input_file)

        self.types = model_types(
            self.description.type_signatures, self.description.document, self.config
        )
        self.service = model_service(
            self.description.operation_signatures,
            self.types,
            self.description.document,
            self.config,
        )
        return self.service

    def build_project(self) -> Project:
        """Файлы кода для загруженного сервиса без записи на диск"""
        if self.service is None:
            raise NoServiceLoadedError("No service loaded")

        return Emitter(self.config).emit(self.service, self.types)

    def save(self) -> List[str]:
        """Запись файлов в output_dir; возвращает пути записанных файлов"""
        project = self.build_project()
        output_dir = self.config.output_dir

        log_step(logger, self.config, "Starting save to directory %s", output_dir)
        self._prepare_output_dir(output_dir)

        for code_file in project.files:
            log_step(logger, self.config, "Saving file %s", code_file.path)

        return project.save(output_dir)

    def _prepare_output_dir(self, output_dir: Optional[str]):
        if not output_dir:
            raise OutputDirError("Output directory is not set")

        if os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise OutputDirError(
                f"The output directory '{output_dir}' exists and is not a directory"
            )

        if not os.path.isdir(output_dir):
            log_step(logger, self.config, "Creating output dir %s", output_dir)
            try:
                os.makedirs(output_dir)
            except OSError as e:
                raise OutputDirError(
                    f"Could not create output directory '{output_dir}': {e}"
                ) from e

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ...config import WsdlConfig
from ..types.descriptors import MethodDescriptor, ServiceDescriptor, TypeDescriptor
from ..types.models import Class, CodeBlock, CodeFile, Function, Parameter, Project, Variable
from ..utils import log_step, python_annotation, validate_naming_convention
from .templates import templates

logger = logging.getLogger(__name__)

# Имена, занятые свойствами Enum
ENUM_RESERVED = {"name", "value", "mro"}


class Emitter:
    """Перевод дескрипторов в файлы кода с учетом режима вывода"""

    def __init__(self, config: WsdlConfig):
        self.config = config

    def emit(
        self, service: ServiceDescriptor, types: Tuple[TypeDescriptor, ...]
    ) -> Project:
        project = Project(name=service.generated_name)
        class_map = service.class_map_dict()

        if self.config.one_file_per_service:
            self._emit_single_file(project, service, types, class_map)
        else:
            self._emit_per_type(project, service, types, class_map)

        return project

    def _emit_single_file(
        self,
        project: Project,
        service: ServiceDescriptor,
        types: Tuple[TypeDescriptor, ...],
        class_map: Dict[str, str],
    ):
        code_file: Optional[CodeFile] = None
        allowed_types = [
            _ for _ in types if self.config.is_class_allowed(_.generated_name)
        ]
        include_service = self.config.is_class_allowed(service.generated_name)

        if include_service:
            code_file = self._new_file(service.generated_name)
            code_file.description = self._service_description(service)
            code_file.add_class(build_service_class(service, self.config))
            log_step(logger, self.config, "Adding service to file")

        for type_descriptor in allowed_types:
            if code_file is None:
                code_file = self._new_file(type_descriptor.generated_name)

            cls = build_type_class(type_descriptor, class_map, self.config)
            cls.order = -len(code_file.classes)
            code_file.add_class(cls)
            log_step(
                logger, self.config, "Adding type to file %s", type_descriptor.generated_name
            )

        # Если ни один класс не прошел фильтр, файл не создается
        if code_file is not None:
            code_file.imports = build_imports(
                with_service=include_service,
                with_options=include_service and self._has_options(),
                with_types=any(not _.is_enum for _ in allowed_types),
                with_enums=any(_.is_enum for _ in allowed_types),
            )
            project.add_file(code_file)

    def _emit_per_type(
        self,
        project: Project,
        service: ServiceDescriptor,
        types: Tuple[TypeDescriptor, ...],
        class_map: Dict[str, str],
    ):
        dependencies = []

        for type_descriptor in types:
            if not self.config.is_class_allowed(type_descriptor.generated_name):
                continue

            code_file = self._new_file(type_descriptor.generated_name)
            code_file.imports = build_imports(
                with_types=not type_descriptor.is_enum,
                with_enums=type_descriptor.is_enum,
            )
            code_file.add_class(build_type_class(type_descriptor, class_map, self.config))
            project.add_file(code_file)
            log_step(
                logger,
                self.config,
                "Adding class %s to file",
                type_descriptor.generated_name,
            )

            # Файл типа становится зависимостью сервиса
            dependencies.append(code_file.file_name)
            log_step(logger, self.config, "Adding dependency")

        if self.config.is_class_allowed(service.generated_name):
            code_file = self._new_file(service.generated_name)
            code_file.description = self._service_description(service)
            code_file.imports = build_imports(
                with_service=True, with_options=self._has_options()
            )
            for dependency in dependencies:
                code_file.add_dependency(dependency)
            code_file.add_class(build_service_class(service, self.config))
            project.add_file(code_file)
            log_step(logger, self.config, "Adding service to file")

    def _new_file(self, class_name: str) -> CodeFile:
        log_step(logger, self.config, "Opening file %s", class_name)
        return CodeFile(
            file_name=f"{class_name}.py",
            namespace=self.config.namespace_name or None,
        )

    @staticmethod
    def _service_description(service: ServiceDescriptor) -> str:
        return f"SOAP client for {service.wsdl_location}"

    def _has_options(self) -> bool:
        return bool(
            self.config.soap_feature_flags
            or self.config.wsdl_cache_mode
            or self.config.compression_flags
        )


def build_imports(
    with_service: bool = False,
    with_options: bool = False,
    with_types: bool = False,
    with_enums: bool = False,
) -> List[str]:
    imports = []

    if with_enums:
        imports.extend(templates.enum_imports)

    if with_service:
        imports.extend(templates.runtime_imports)
        if with_options:
            imports.append(templates.runtime_constants_import)
    elif with_types:
        imports.extend(templates.type_imports)

    return imports


def build_function(method: MethodDescriptor) -> Function:
    parameters = [Parameter(name="self")]

    for param in method.parameters:
        parameter = Parameter(name=param.name, doc_type=param.doc_type)
        if param.type_hint:
            parameter.set_type(param.type_hint)
        if param.default is not None:
            parameter.set_default(param.default)
        parameters.append(parameter)

    return Function(
        name=method.name,
        parameters=parameters,
        response=method.return_type,
        description=method.doc,
        returns=method.return_marker,
        code=CodeBlock(code=method.body),
    )


def build_service_class(service: ServiceDescriptor, config: WsdlConfig) -> Class:
    service_class = Class(
        name=service.generated_name,
        inherits=["SoapClient"],
        guarded=config.assume_class_exists,
        order=1,
    )

    if service.class_map:
        entries = "".join(
            f"\n    {raw!r}: {generated!r}," for raw, generated in service.class_map
        )
        classmap = f"_classmap = {{{entries}\n}}"
    else:
        classmap = "_classmap = {}"
    service_class.add_code_block(CodeBlock(code=classmap, order=1))

    service_class.add_function(build_function(service.constructor))

    for method in service.operations:
        service_class.add_function(build_function(method))

    return service_class


def build_type_class(
    type_descriptor: TypeDescriptor, class_map: Dict[str, str], config: WsdlConfig
) -> Class:
    if type_descriptor.is_enum:
        enum_class = Class(
            name=type_descriptor.generated_name,
            inherits=["str", "Enum"],
            guarded=config.assume_class_exists,
        )
        enum_class.add_code_block(
            CodeBlock(code="\n".join(enum_members(type_descriptor.enum_values)))
        )
        return enum_class

    type_class = Class(
        name=type_descriptor.generated_name,
        guarded=config.assume_class_exists,
    )

    for member in type_descriptor.members:
        type_class.parameters.append(
            Parameter(
                name=member.name,
                var_type=Variable(
                    value=python_annotation(member.type, class_map),
                    wrap_name="Optional",
                ),
                default=Variable(value="None"),
            )
        )

    if type_descriptor.constructor is not None:
        type_class.add_function(build_function(type_descriptor.constructor))

    return type_class


def enum_members(values: Iterable[str]) -> List[str]:
    """
    Строки `NAME = 'value'`.

    Повторяющиеся значения пропускаются. Совпавшее после нормализации имя
    получает суффикс `_`, чтобы каждое значение осталось в перечислении.
    Имена с ведущим `_` Enum трактует особо (`_x_`, `__x`), они получают
    префикс `v`.
    """
    members = []
    seen_names = set()
    seen_values = set()

    for value in values:
        if value in seen_values:
            continue
        seen_values.add(value)

        name = validate_naming_convention(value)
        if name in ENUM_RESERVED:
            name += "_"
        if name.startswith("_"):
            name = "v" + name
        while name in seen_names:
            name += "_"

        seen_names.add(name)
        members.append(f"{name} = {value!r}")

    return members

import logging
from typing import Dict, Iterable, List, Tuple

from ...config import WsdlConfig
from ...exceptions import MissingServiceError
from ...runtime.client import CLIENT_ATTRIBUTES
from ..parser.signatures import parse_operation_signature
from ..parser.wsdl import WsdlDocument
from ..types.descriptors import (
    MethodDescriptor,
    OperationDescriptor,
    ParameterDescriptor,
    ServiceDescriptor,
    TypeDescriptor,
)
from ..utils import (
    is_primitive,
    log_step,
    python_annotation,
    validate_class_name,
    validate_naming_convention,
    validate_or_custom,
)
from .templates import templates

logger = logging.getLogger(__name__)

MULTI_VALUE_MARKER = "list("


def model_service(
    operation_signatures: Iterable[str],
    types: Tuple[TypeDescriptor, ...],
    document: WsdlDocument,
    config: WsdlConfig,
) -> ServiceDescriptor:
    """Модель класса сервиса: карта классов, конструктор и методы операций"""
    service = document.find_service_element()
    if service is None:
        raise MissingServiceError("No <service> element found in the wsdl")

    service_name = validate_or_custom(
        validate_class_name, config.prefix + service.get("name", "") + config.suffix
    )
    log_step(logger, config, "Generating class %s", service_name)

    class_map = tuple((_.raw_name, _.generated_name) for _ in types)
    log_step(logger, config, "Adding classmap")

    constructor = build_service_constructor(config)
    log_step(logger, config, "Generating constructor for %s", service_name)

    log_step(logger, config, "Loading operations for %s", service_name)
    operations = build_operations(
        [parse_operation_signature(_) for _ in operation_signatures],
        dict(class_map),
        config,
    )
    log_step(logger, config, "Done loading service")

    return ServiceDescriptor(
        generated_name=service_name,
        wsdl_location=config.input_file or "",
        class_map=class_map,
        constructor=constructor,
        operations=tuple(operations),
    )


def build_service_options(config: WsdlConfig) -> str:
    """Блоки установки опций SOAP по умолчанию, если они заданы в конфиге"""
    log_step(logger, config, "Generating service options")

    options: List[Tuple[str, str]] = []

    if config.soap_feature_flags:
        log_step(logger, config, "Adding option features")
        options.append(
            ("features", " | ".join(f"soap.{_}" for _ in config.soap_feature_flags))
        )

    if config.wsdl_cache_mode:
        log_step(logger, config, "Adding wsdl cache option")
        options.append(("cache_wsdl", f"soap.{config.wsdl_cache_mode}"))

    if config.compression_flags:
        log_step(logger, config, "Adding compression")
        options.append(
            (
                "compression",
                " | ".join(
                    _ if _.isdigit() else f"soap.{_}" for _ in config.compression_flags
                ),
            )
        )

    return "".join(
        templates.service_option.format(key=key, value=value) for key, value in options
    )


def build_service_constructor(config: WsdlConfig) -> MethodDescriptor:
    return MethodDescriptor(
        name="__init__",
        parameters=(
            ParameterDescriptor(
                name="wsdl", type_hint="str", default=repr(config.input_file or "")
            ),
            ParameterDescriptor(
                name="options", type_hint="Optional[dict]", default="None"
            ),
        ),
        body=templates.service_constructor.format(
            service_options=build_service_options(config)
        ),
        doc="Creates the client for the given wsdl and options.",
    )


def build_operations(
    operations: List[OperationDescriptor],
    class_map: Dict[str, str],
    config: WsdlConfig,
) -> List[MethodDescriptor]:
    """
    Методы операций без повторов.

    Метод добавляется, только если метода с таким же именем еще нет;
    различия в параметрах не учитываются.
    """
    methods: Dict[str, MethodDescriptor] = {}

    for operation in operations:
        method = build_operation(operation, class_map)

        if method.name in methods:
            continue

        log_step(
            logger,
            config,
            "Adding operation %s(%s)",
            method.name,
            ", ".join(_.name for _ in method.parameters),
        )
        methods[method.name] = method

    return list(methods.values())


def build_operation(
    operation: OperationDescriptor, class_map: Dict[str, str]
) -> MethodDescriptor:
    parameters = []
    names = set()

    for param in operation.parameters:
        type_hint = None
        if param.type is not None and not is_primitive(param.type):
            type_hint = python_annotation(param.type, class_map)

        # Параметры передаются по позиции, поэтому совпавшее имя получает суффикс
        name = validate_naming_convention(param.name)
        while name in names:
            name += "_"
        names.add(name)

        parameters.append(
            ParameterDescriptor(name=name, type_hint=type_hint, doc_type=param.type)
        )

    if operation.return_type.startswith(MULTI_VALUE_MARKER):
        return_type = "dict"
    else:
        return_type = python_annotation(operation.return_type, class_map)

    method_name = validate_naming_convention(operation.name)
    if method_name in CLIENT_ATTRIBUTES:
        method_name += "_"

    # Имя метода может получить суффикс, сервер вызывается по имени из WSDL
    return MethodDescriptor(
        name=method_name,
        parameters=tuple(parameters),
        body=templates.soap_call.format(
            remote_name=operation.name,
            arguments=", ".join(_.name for _ in parameters),
        ),
        remote_name=operation.name,
        return_type=return_type,
        return_marker=operation.return_type,
        doc=f"Calls the {operation.name} operation.",
    )

import logging
from collections import OrderedDict
from typing import Iterable, List, Tuple

from ...config import WsdlConfig
from ..parser.enums import extract_enum_values
from ..parser.signatures import parse_type_signature
from ..parser.wsdl import WsdlDocument
from ..types.descriptors import (
    Member,
    MethodDescriptor,
    ParameterDescriptor,
    ParsedType,
    TypeDescriptor,
)
from ..utils import (
    log_step,
    validate_class_name,
    validate_naming_convention,
    validate_or_custom,
    validate_type_name,
)
from .templates import templates

logger = logging.getLogger(__name__)


def model_types(
    type_signatures: Iterable[str], document: WsdlDocument, config: WsdlConfig
) -> Tuple[TypeDescriptor, ...]:
    """
    Модели всех типов, кроме оберток массивов.

    Повторное объявление типа с тем же именем заменяет предыдущее,
    сохраняя его позицию в порядке обнаружения.
    """
    log_step(logger, config, "Loading types")

    types: "OrderedDict[str, TypeDescriptor]" = OrderedDict()

    for signature in type_signatures:
        parsed = parse_type_signature(signature)
        if parsed is None:
            continue

        types[parsed.name] = model_type(parsed, document, config)

    log_step(logger, config, "Done loading types")
    return tuple(types.values())


def model_type(
    parsed: ParsedType, document: WsdlDocument, config: WsdlConfig
) -> TypeDescriptor:
    class_name = validate_or_custom(
        validate_class_name, config.prefix + parsed.name + config.suffix
    )
    log_step(logger, config, "Generating type %s", class_name)

    # Разные исходные имена могут совпасть после нормализации, побеждает первое
    members: "OrderedDict[str, Member]" = OrderedDict()
    for member_type, member in parsed.members:
        name = validate_naming_convention(member)
        if name not in members:
            members[name] = Member(
                name=name, type=validate_or_custom(validate_type_name, member_type)
            )
    members = list(members.values())

    # Тип без полей может оказаться перечислением (simpleType)
    enum_values = () if members else extract_enum_values(document, parsed.name)

    constructor = None
    if not config.omit_type_constructors and not enum_values:
        constructor = build_type_constructor(members)
        log_step(logger, config, "Adding constructor for %s", class_name)

    return TypeDescriptor(
        raw_name=parsed.name,
        generated_name=class_name,
        members=tuple(members),
        enum_values=enum_values,
        constructor=constructor,
    )


def build_type_constructor(members: List[Member]) -> MethodDescriptor:
    parameters = tuple(
        ParameterDescriptor(name=member.name, default="None", doc_type=member.type)
        for member in members
    )
    body = "\n".join(
        templates.field_assignment.format(name=member.name) for member in members
    )

    return MethodDescriptor(
        name="__init__",
        parameters=parameters,
        body=body or "pass",
    )

"""Неизменяемые дескрипторы, которыми обмениваются этапы генерации"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class ParsedParameter:
    """Параметр из сигнатуры операции"""

    name: str
    type: Optional[str] = None


@dataclass(frozen=True)
class OperationDescriptor:
    """Разобранная сигнатура операции"""

    name: str
    return_type: str
    parameters: Tuple[ParsedParameter, ...] = ()


@dataclass(frozen=True)
class ParsedType:
    """Разобранная сигнатура типа: имя и пары (тип, имя поля)"""

    name: str
    members: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Member:
    name: str
    type: str


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    type_hint: Optional[str] = None
    default: Optional[str] = None
    # Исходный тип из WSDL, только для документации
    doc_type: Optional[str] = None


@dataclass(frozen=True)
class MethodDescriptor:
    """Метод генерируемого класса: сигнатура и тело в виде исходного кода"""

    name: str
    parameters: Tuple[ParameterDescriptor, ...] = ()
    body: str = "pass"
    remote_name: Optional[str] = None
    return_type: Optional[str] = None
    # Тип результата как в сигнатуре, включая форму list(...)
    return_marker: Optional[str] = None
    doc: Optional[str] = None


@dataclass(frozen=True)
class TypeDescriptor:
    raw_name: str
    generated_name: str
    members: Tuple[Member, ...] = ()
    enum_values: Tuple[str, ...] = ()
    constructor: Optional[MethodDescriptor] = None

    @property
    def is_enum(self) -> bool:
        return not self.members and bool(self.enum_values)


@dataclass(frozen=True)
class ServiceDescriptor:
    generated_name: str
    wsdl_location: str
    # Пары (имя в WSDL, имя сгенерированного класса) в порядке обнаружения
    class_map: Tuple[Tuple[str, str], ...] = ()
    constructor: Optional[MethodDescriptor] = None
    operations: Tuple[MethodDescriptor, ...] = field(default_factory=tuple)

    def class_map_dict(self) -> Dict[str, str]:
        return dict(self.class_map)

"""
Разбор текстовых сигнатур операций и типов.

Сигнатуры имеют формат интроспекции SOAP клиента:

    GetNameResponse getName(GetName $parameters)
    list(string $a, string $b) getPair()

    struct Person {
     string name;
     int age;
    }
"""

import re
from typing import List, Optional, Tuple

from ...exceptions import OperationGrammarError, TypeGrammarError
from ..types.descriptors import OperationDescriptor, ParsedParameter, ParsedType

# ReturnType name(paramList)
SCALAR_OPERATION = re.compile(r"^(\w+) (\w+)\(([\w$, ]*)\)$")
# list(...) name(paramList)
LIST_OPERATION = re.compile(r"^(list\([\w$, ]*\)) (\w+)\(([\w$, ]*)\)$")

ARRAY_SUFFIX = "[]"
ARRAY_PREFIX = "ArrayOf"


def parse_operation_signature(signature: str) -> OperationDescriptor:
    for grammar in (SCALAR_OPERATION, LIST_OPERATION):
        match = grammar.match(signature)
        if match is not None:
            break
    else:
        raise OperationGrammarError(signature)

    returns, call, params = match.groups()

    return OperationDescriptor(
        name=call,
        return_type=returns,
        parameters=tuple(parse_parameter_list(params)),
    )


def parse_parameter_list(params: str) -> List[ParsedParameter]:
    """Параметры в исходном порядке; пустые элементы пропускаются"""
    result = []

    for token in params.split(", "):
        parts = token.split()

        if len(parts) == 0:
            continue
        if len(parts) == 1:
            result.append(ParsedParameter(name=parts[0]))
        else:
            result.append(ParsedParameter(name=parts[1], type=parts[0]))

    return result


def is_array_type(class_name: str) -> bool:
    return class_name.endswith(ARRAY_SUFFIX) or class_name.startswith(ARRAY_PREFIX)


def parse_type_signature(signature: str) -> Optional[ParsedType]:
    """
    Разбор сигнатуры типа.

    Возвращает None для оберток массивов (Foo[], ArrayOfFoo).
    Поля с повторяющимся именем отбрасываются, побеждает первое.
    """
    lines = signature.strip("\n").split("\n")

    header = lines[0].split()
    if len(header) < 2:
        raise TypeGrammarError(signature, lines[0])

    class_name = header[1]
    if is_array_type(class_name):
        return None

    members: List[Tuple[str, str]] = []
    seen = set()

    for line in lines[1:-1]:
        member_type, member = _parse_member_line(signature, line)

        if member in seen:
            continue

        seen.add(member)
        members.append((member_type, member))

    return ParsedType(name=class_name, members=tuple(members))


def _parse_member_line(signature: str, line: str) -> Tuple[str, str]:
    parts = line.strip().rstrip(";").split()
    if len(parts) < 2:
        raise TypeGrammarError(signature, line)

    member_type, member = parts[0], parts[-1]

    if ":" in member:
        member = member.split(":")[-1]

    if ":" in member_type:
        qualifier, local = member_type.split(":", 1)
        # "int:age age" - тип, уточненный именем поля
        member_type = qualifier if local == member else local

    return member_type, member

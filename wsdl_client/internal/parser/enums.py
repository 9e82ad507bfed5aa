from typing import Tuple

from .wsdl import WsdlDocument


def extract_enum_values(document: WsdlDocument, raw_name: str) -> Tuple[str, ...]:
    """
    Значения перечисления для типа без полей.

    Среди узлов схемы с именем raw_name берется первый, у которого есть
    <enumeration>. Следующие одноименные узлы не учитываются, даже если
    у них тоже есть <enumeration>. Если таких узлов нет, возвращается
    пустой кортеж.
    """
    for node in document.find_named_schema_nodes(raw_name):
        values = document.enumeration_values_of(node)
        if values:
            return tuple(values)

    return ()

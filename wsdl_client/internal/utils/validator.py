"""Проверка и нормализация имен классов, типов, полей и операций"""

import builtins
import keyword
import re
import unicodedata
from typing import Callable, Dict, Optional

from ...exceptions import ValidationError

CUSTOM_SUFFIX = "Custom"

# Имена, которые импортирует или использует сгенерированный код
GENERATED_NAMES = {"SoapClient", "soap", "Any", "List", "Optional", "Enum"}

RESERVED_CLASS_NAMES = (
    set(keyword.kwlist)
    | set(keyword.softkwlist)
    | {name for name in dir(builtins) if not name.startswith("_")}
    | GENERATED_NAMES
)

PRIMITIVE_TYPES: Dict[str, str] = {
    "string": "str",
    "normalizedstring": "str",
    "ncname": "str",
    "nmtoken": "str",
    "idref": "str",
    "anyuri": "str",
    "qname": "str",
    "datetime": "str",
    "date": "str",
    "time": "str",
    "duration": "str",
    "gyear": "str",
    "gyearmonth": "str",
    "gmonth": "str",
    "gmonthday": "str",
    "gday": "str",
    "base64binary": "bytes",
    "hexbinary": "bytes",
    "int": "int",
    "integer": "int",
    "long": "int",
    "short": "int",
    "byte": "int",
    "unsignedint": "int",
    "unsignedlong": "int",
    "unsignedshort": "int",
    "unsignedbyte": "int",
    "positiveinteger": "int",
    "negativeinteger": "int",
    "nonnegativeinteger": "int",
    "nonpositiveinteger": "int",
    "float": "float",
    "double": "float",
    "decimal": "float",
    "boolean": "bool",
    "bool": "bool",
    "anytype": "Any",
    "anysimpletype": "Any",
    "mixed": "Any",
    "void": "None",
}

_ILLEGAL_CHARS = re.compile(r"[^A-Za-z0-9_]")


def _normalize(name: str) -> str:
    # Транслитерация в ASCII, затем удаление недопустимых символов
    ascii_name = (
        unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    )
    ascii_name = _ILLEGAL_CHARS.sub("", ascii_name)

    if not ascii_name or ascii_name[0].isdigit():
        ascii_name = "_" + ascii_name

    return ascii_name


def validate_class_name(name: str) -> str:
    """
    Проверка имени класса.

    Недопустимые символы удаляются; зарезервированное имя (ключевое слово,
    встроенное имя Python или имя из импортов сгенерированного кода)
    приводит к ValidationError с нормализованным именем.
    """
    normalized = _normalize(name)

    if normalized in RESERVED_CLASS_NAMES:
        raise ValidationError(normalized, "reserved name")

    return normalized


def validate_type_name(type_name: str) -> str:
    """Проверка имени типа поля; типы массивов (T[]) проверяются по T"""
    if type_name.endswith("[]"):
        item = type_name[:-2]
        if is_primitive(item):
            return type_name
        try:
            return validate_class_name(item) + "[]"
        except ValidationError as exc:
            raise ValidationError(type_name, exc.reason) from exc

    if is_primitive(type_name):
        return type_name

    return validate_class_name(type_name)


def validate_naming_convention(name: str) -> str:
    """Имя поля, параметра или операции; всегда возвращает пригодное имя"""
    normalized = _normalize(name)

    if keyword.iskeyword(normalized) or normalized == "self":
        normalized += "_"

    return normalized


def is_primitive(type_name: Optional[str]) -> bool:
    if not type_name:
        return False
    return type_name.lower() in PRIMITIVE_TYPES


def validate_or_custom(validator: Callable[[str], str], name: str) -> str:
    """Имя после проверки; отклоненное имя получает суффикс Custom без повторной проверки"""
    try:
        return validator(name)
    except ValidationError as exc:
        return exc.name + CUSTOM_SUFFIX


def python_annotation(type_name: str, class_map: Optional[Dict[str, str]] = None) -> str:
    """
    Аннотация Python для типа из WSDL.

    Примитивы становятся встроенными типами, T[] - List[...],
    известные типы - строковыми ссылками на сгенерированные классы.
    """
    if type_name.endswith("[]"):
        return f"List[{python_annotation(type_name[:-2], class_map)}]"

    if is_primitive(type_name):
        return PRIMITIVE_TYPES[type_name.lower()]

    class_map = class_map or {}
    return repr(class_map.get(type_name, type_name))

"""
Загрузка WSDL и интроспекция описания сервиса.

Минимальный читатель WSDL 1.1 на lxml: отдает сигнатуры операций и типов
в текстовом формате интроспекции SOAP клиента, а также запросы к дереву
схемы, нужные генератору и рантайму.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import httpx
from lxml import etree

from ...exceptions import LoadError

logger = logging.getLogger(__name__)

NS_WSDL = "http://schemas.xmlsoap.org/wsdl/"
NS_SOAP = "http://schemas.xmlsoap.org/wsdl/soap/"
NS_SOAP12 = "http://schemas.xmlsoap.org/wsdl/soap12/"
NS_XSD = "http://www.w3.org/2001/XMLSchema"

SOAP_NAMESPACES = (NS_SOAP, NS_SOAP12)

WSDL_ARRAY_TYPE = f"{{{NS_WSDL}}}arrayType"


def wsdl_tag(name: str) -> str:
    return f"{{{NS_WSDL}}}{name}"


def xsd_tag(name: str) -> str:
    return f"{{{NS_XSD}}}{name}"


def local(tag: str) -> str:
    return tag[tag.find("}") + 1 :]


def local_attr(attr: Optional[str]) -> Optional[str]:
    if attr and ":" in attr:
        return attr.split(":")[-1]
    return attr


def fetch(location: str, timeout: Optional[float] = None) -> bytes:
    """Содержимое WSDL по URL или пути к файлу"""
    if location.startswith(("http://", "https://")):
        logger.debug("Fetching %s", location)
        try:
            response = httpx.get(location, follow_redirects=True, timeout=timeout)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise LoadError(location, str(exc)) from exc
        return response.content

    try:
        with open(location, "rb") as f:
            return f.read()
    except OSError as exc:
        raise LoadError(location, str(exc)) from exc


@dataclass(frozen=True)
class MessagePart:
    name: str
    type: str
    element: Optional[str] = None
    namespace: Optional[str] = None
    qualified: bool = False


@dataclass(frozen=True)
class WsdlOperation:
    name: str
    action: str
    style: str
    use: str
    namespace: Optional[str]
    location: str
    input_parts: Tuple[MessagePart, ...] = ()
    output_parts: Tuple[MessagePart, ...] = ()


class WsdlDocument:
    """Дерево WSDL документа"""

    def __init__(self, root: etree._Element, location: str = ""):
        if root.tag != wsdl_tag("definitions"):
            raise LoadError(location, f"root element {root.tag} is not wsdl:definitions")

        self.root = root
        self.location = location

    @classmethod
    def from_string(cls, content: bytes, location: str = "") -> "WsdlDocument":
        if isinstance(content, str):
            content = content.encode("utf-8")

        try:
            root = etree.fromstring(content)
        except etree.XMLSyntaxError as exc:
            raise LoadError(location, str(exc)) from exc

        return cls(root, location)

    @classmethod
    def load(cls, location: str) -> "WsdlDocument":
        return cls.from_string(fetch(location), location)

    @property
    def target_namespace(self) -> Optional[str]:
        return self.root.get("targetNamespace")

    # Запросы к дереву схемы

    def schemas(self) -> List[etree._Element]:
        types = self.root.find(wsdl_tag("types"))
        if types is None:
            return []
        return list(types.iter(xsd_tag("schema")))

    def find_service_element(self) -> Optional[etree._Element]:
        return self.root.find(wsdl_tag("service"))

    def find_named_schema_nodes(self, name: str) -> List[etree._Element]:
        """Прямые потомки <schema> с атрибутом name, в порядке документа"""
        return [
            child
            for schema in self.schemas()
            for child in schema
            if isinstance(child.tag, str) and child.get("name") == name
        ]

    @staticmethod
    def enumeration_values_of(node: etree._Element) -> List[str]:
        return [
            enumeration.get("value")
            for enumeration in node.iter(xsd_tag("enumeration"))
            if enumeration.get("value") is not None
        ]

    def _find_schema_child(
        self, tag: str, name: str
    ) -> Tuple[Optional[etree._Element], Optional[etree._Element]]:
        for schema in self.schemas():
            for child in schema.findall(xsd_tag(tag)):
                if child.get("name") == name:
                    return child, schema
        return None, None

    # Операции

    def _find_definition(self, tag: str, name: Optional[str]) -> Optional[etree._Element]:
        for node in self.root.findall(wsdl_tag(tag)):
            if node.get("name") == local_attr(name):
                return node
        return None

    def _soap_ports(self) -> Iterator[Tuple[etree._Element, etree._Element]]:
        service = self.find_service_element()
        if service is None:
            return

        for port in service.findall(wsdl_tag("port")):
            address = next(
                (
                    child
                    for child in port
                    if isinstance(child.tag, str)
                    and child.tag.startswith("{")
                    and child.tag[1:].split("}")[0] in SOAP_NAMESPACES
                ),
                None,
            )
            if address is not None:
                yield port, address

    def operations(self) -> List[WsdlOperation]:
        """Операции всех SOAP портов сервиса, дубликаты между портами сохраняются"""
        result = []

        for port, address in self._soap_ports():
            binding = self._find_definition("binding", port.get("binding"))
            if binding is None:
                continue

            port_type = self._find_definition("portType", binding.get("type"))
            binding_style = self._binding_style(binding)

            for operation in binding.findall(wsdl_tag("operation")):
                result.append(
                    self._make_operation(
                        operation,
                        port_type,
                        binding_style,
                        address.get("location", ""),
                    )
                )

        if not result:
            # Без SOAP порта берем первый portType
            port_type = self.root.find(wsdl_tag("portType"))
            if port_type is not None:
                for operation in port_type.findall(wsdl_tag("operation")):
                    result.append(
                        self._make_operation(operation, port_type, "document", "")
                    )

        return result

    @staticmethod
    def _soap_child(node: etree._Element, name: str) -> Optional[etree._Element]:
        for namespace in SOAP_NAMESPACES:
            child = node.find(f"{{{namespace}}}{name}")
            if child is not None:
                return child
        return None

    def _binding_style(self, binding: etree._Element) -> str:
        soap_binding = self._soap_child(binding, "binding")
        if soap_binding is None:
            return "document"
        return soap_binding.get("style", "document")

    def _make_operation(
        self,
        operation: etree._Element,
        port_type: Optional[etree._Element],
        style: str,
        location: str,
    ) -> WsdlOperation:
        name = operation.get("name")

        soap_operation = self._soap_child(operation, "operation")
        action = ""
        if soap_operation is not None:
            action = soap_operation.get("soapAction", "")
            style = soap_operation.get("style", style)

        use = "literal"
        namespace = self.target_namespace
        body_input = operation.find(wsdl_tag("input"))
        if body_input is not None:
            body = self._soap_child(body_input, "body")
            if body is not None:
                use = body.get("use", use)
                namespace = body.get("namespace", namespace)

        input_parts: Tuple[MessagePart, ...] = ()
        output_parts: Tuple[MessagePart, ...] = ()

        if port_type is not None:
            for port_operation in port_type.findall(wsdl_tag("operation")):
                if port_operation.get("name") != name:
                    continue
                input_parts = self._message_parts(port_operation.find(wsdl_tag("input")))
                output_parts = self._message_parts(
                    port_operation.find(wsdl_tag("output"))
                )
                break

        return WsdlOperation(
            name=name,
            action=action,
            style=style,
            use=use,
            namespace=namespace,
            location=location,
            input_parts=input_parts,
            output_parts=output_parts,
        )

    def _message_parts(self, io_node: Optional[etree._Element]) -> Tuple[MessagePart, ...]:
        if io_node is None:
            return ()

        message = self._find_definition("message", io_node.get("message"))
        if message is None:
            return ()

        return tuple(self._make_part(part) for part in message.findall(wsdl_tag("part")))

    def _make_part(self, part: etree._Element) -> MessagePart:
        name = part.get("name", "")

        if part.get("type"):
            return MessagePart(name=name, type=local_attr(part.get("type")))

        element_name = local_attr(part.get("element", ""))
        element, schema = self._find_schema_child("element", element_name)

        part_type = element_name
        namespace = None
        qualified = False
        if element is not None:
            if element.get("type"):
                part_type = local_attr(element.get("type"))
            namespace = schema.get("targetNamespace")
            qualified = schema.get("elementFormDefault") == "qualified"

        return MessagePart(
            name=name,
            type=part_type,
            element=element_name,
            namespace=namespace,
            qualified=qualified,
        )

    def operation_signatures(self) -> List[str]:
        """Сигнатуры вида `ReturnType name(Type $part, ...)`"""
        signatures = []

        for operation in self.operations():
            params = ", ".join(f"{_.type} ${_.name}" for _ in operation.input_parts)

            if not operation.output_parts:
                returns = "void"
            elif len(operation.output_parts) == 1:
                returns = operation.output_parts[0].type
            else:
                returns = (
                    "list("
                    + ", ".join(f"{_.type} ${_.name}" for _ in operation.output_parts)
                    + ")"
                )

            signatures.append(f"{returns} {operation.name}({params})")

        return signatures

    # Типы

    def type_signatures(self) -> List[str]:
        """Сигнатуры всех именованных типов схемы, в порядке документа"""
        signatures = []

        for schema in self.schemas():
            for child in schema:
                if not isinstance(child.tag, str) or not child.get("name"):
                    continue

                name = child.get("name")

                if child.tag == xsd_tag("complexType"):
                    array_item = self._soap_array_item(child)
                    if array_item is not None:
                        signatures.append(f"{array_item} {name}[]")
                    else:
                        signatures.append(self._struct(name, self._members(child)))

                elif child.tag == xsd_tag("element"):
                    complex_type = child.find(xsd_tag("complexType"))
                    if complex_type is not None:
                        signatures.append(self._struct(name, self._members(complex_type)))

                elif child.tag == xsd_tag("simpleType"):
                    signatures.append(f"{self._simple_base(child)} {name}")

        return signatures

    @staticmethod
    def _struct(name: str, members: List[Tuple[str, str]]) -> str:
        lines = [f"struct {name} {{"]
        lines.extend(f" {member_type} {member};" for member_type, member in members)
        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def _simple_base(simple_type: etree._Element) -> str:
        restriction = simple_type.find(xsd_tag("restriction"))
        if restriction is not None and restriction.get("base"):
            return local_attr(restriction.get("base"))
        if simple_type.find(xsd_tag("list")) is not None:
            return "list"
        if simple_type.find(xsd_tag("union")) is not None:
            return "union"
        return "anyType"

    @staticmethod
    def _soap_array_item(complex_type: etree._Element) -> Optional[str]:
        restriction = complex_type.find(
            f"{xsd_tag('complexContent')}/{xsd_tag('restriction')}"
        )
        if restriction is None or local_attr(restriction.get("base")) != "Array":
            return None

        for attribute in restriction.iter(xsd_tag("attribute")):
            array_type = attribute.get(WSDL_ARRAY_TYPE)
            if array_type:
                return local_attr(array_type).split("[")[0]

        element = restriction.find(f".//{xsd_tag('element')}")
        if element is not None and element.get("type"):
            return local_attr(element.get("type"))

        return "anyType"

    def _members(
        self, complex_type: etree._Element, bases: Tuple[str, ...] = ()
    ) -> List[Tuple[str, str]]:
        members: List[Tuple[str, str]] = []

        content = complex_type.find(xsd_tag("complexContent"))
        simple_content = complex_type.find(xsd_tag("simpleContent"))

        if content is not None:
            derivation = content.find(xsd_tag("extension"))
            if derivation is None:
                derivation = content.find(xsd_tag("restriction"))

            if derivation is not None:
                base = local_attr(derivation.get("base"))
                base_type, _ = self._find_schema_child("complexType", base)
                if base_type is not None and base not in bases:
                    members.extend(self._members(base_type, bases + (base,)))
                complex_type = derivation

        elif simple_content is not None:
            for derivation in simple_content:
                if isinstance(derivation.tag, str) and derivation.get("base"):
                    members.append((local_attr(derivation.get("base")), "_"))
                    complex_type = derivation
                    break

        members.extend(self._particle_members(complex_type))

        for attribute in complex_type.findall(xsd_tag("attribute")):
            if attribute.get("name"):
                members.append(
                    (local_attr(attribute.get("type")) or "string", attribute.get("name"))
                )

        return members

    def _particle_members(self, node: etree._Element) -> List[Tuple[str, str]]:
        members = []

        for child in node:
            if not isinstance(child.tag, str):
                continue

            if child.tag == xsd_tag("element"):
                members.append(self._element_member(child))
            elif child.tag in (xsd_tag("sequence"), xsd_tag("all"), xsd_tag("choice")):
                members.extend(self._particle_members(child))

        return members

    def _element_member(self, element: etree._Element) -> Tuple[str, str]:
        if element.get("ref"):
            name = local_attr(element.get("ref"))
            referenced, _ = self._find_schema_child("element", name)
            if referenced is not None and referenced.get("type"):
                return local_attr(referenced.get("type")), name
            return name, name

        return local_attr(element.get("type")) or "anyType", element.get("name", "")


@dataclass(frozen=True)
class Description:
    operation_signatures: List[str]
    type_signatures: List[str]
    document: WsdlDocument


def load_description(location: str) -> Description:
    """Загрузка WSDL: сигнатуры операций, сигнатуры типов и дерево документа"""
    document = WsdlDocument.load(location)

    return Description(
        operation_signatures=document.operation_signatures(),
        type_signatures=document.type_signatures(),
        document=document,
    )

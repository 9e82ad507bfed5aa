import base64
import gzip
import hashlib
import logging
import os
import sys
import tempfile
import zlib
from enum import Enum
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import httpx
from lxml import etree
from simple_singleton import Singleton

from ..internal.parser.wsdl import WsdlDocument, WsdlOperation, fetch, local, local_attr
from ..internal.utils.validator import validate_naming_convention
from . import constants

logger = logging.getLogger(__name__)

NS_SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
NS_XSI = "http://www.w3.org/2001/XMLSchema-instance"

SOAP_ENVELOPE = f"{{{NS_SOAP_ENV}}}Envelope"
SOAP_BODY = f"{{{NS_SOAP_ENV}}}Body"
SOAP_FAULT = f"{{{NS_SOAP_ENV}}}Fault"
XSI_NIL = f"{{{NS_XSI}}}nil"
XSI_TYPE = f"{{{NS_XSI}}}type"

ARRAY_PREFIX = "ArrayOf"
COMPRESSION_LEVEL_MASK = 0x0F


class SoapFault(Exception):
    def __init__(self, operation, faultcode, faultstring, detail=None):
        self.operation = operation
        self.faultcode = faultcode
        self.faultstring = faultstring
        self.detail = detail
        super().__init__(f"[{faultcode}] {operation}: {faultstring}")


class SoapTransportError(Exception):
    def __init__(self, message, location, status_code=None):
        self.message = message
        self.location = location
        self.status_code = status_code
        super().__init__(f"[{status_code}] {location}: {message}")


class WsdlCache(metaclass=Singleton):
    """Кеш содержимого WSDL в памяти процесса"""

    def __init__(self):
        self._documents: Dict[str, bytes] = {}

    def get(self, location: str) -> Optional[bytes]:
        return self._documents.get(location)

    def set(self, location: str, content: bytes) -> None:
        self._documents[location] = content

    def clear(self) -> None:
        self._documents.clear()


def _disk_cache_path(location: str) -> str:
    digest = hashlib.sha1(location.encode("utf-8")).hexdigest()
    return os.path.join(tempfile.gettempdir(), "wsdl_client", f"{digest}.wsdl")


def load_wsdl(location: str, cache_mode: int = constants.WSDL_CACHE_NONE) -> WsdlDocument:
    """Загрузка WSDL с учетом режима кеша"""
    content = None

    if cache_mode & constants.WSDL_CACHE_MEMORY:
        content = WsdlCache().get(location)

    if content is None and cache_mode & constants.WSDL_CACHE_DISK:
        path = _disk_cache_path(location)
        if os.path.exists(path):
            with open(path, "rb") as f:
                content = f.read()

    if content is None:
        content = fetch(location)

        if cache_mode & constants.WSDL_CACHE_DISK:
            path = _disk_cache_path(location)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)

    if cache_mode & constants.WSDL_CACHE_MEMORY:
        WsdlCache().set(location, content)

    return WsdlDocument.from_string(content, location)


class SoapClient:
    """Синхронный SOAP 1.1 клиент, базовый класс сгенерированных сервисов"""

    def __init__(self, wsdl: str, options: Optional[dict] = None):
        options = dict(options or {})

        self.wsdl = wsdl
        self.classmap: Dict[str, Any] = dict(options.get("classmap") or {})
        self.features: int = options.get("features", 0)
        self.compression: Optional[int] = options.get("compression")
        self.location: Optional[str] = options.get("location")

        self.document = load_wsdl(
            wsdl, options.get("cache_wsdl", constants.WSDL_CACHE_NONE)
        )

        # Одна операция на имя, побеждает первый порт
        self._operations: Dict[str, WsdlOperation] = {}
        for operation in self.document.operations():
            self._operations.setdefault(operation.name, operation)

        self._http = httpx.Client(
            timeout=options.get("timeout", 30),
            headers=options.get("headers") or {},
            transport=options.get("transport"),
        )

    def get_functions(self) -> List[str]:
        """Сигнатуры операций сервиса"""
        return self.document.operation_signatures()

    def get_types(self) -> List[str]:
        """Сигнатуры типов сервиса"""
        return self.document.type_signatures()

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _soap_call(self, name: str, args: List[Any]) -> Any:
        operation = self._operations.get(name)
        if operation is None:
            raise SoapFault(
                name, "Client", f"Function {name} is not a valid method for this service"
            )

        envelope = self._envelope(operation, args)
        payload = etree.tostring(envelope, xml_declaration=True, encoding="utf-8")
        response = self._send(operation, payload)

        if response.status_code >= 400:
            self._raise_for_status(operation, response)

        if not operation.output_parts and not (
            self.features & constants.SOAP_WAIT_ONE_WAY_CALLS
        ):
            return None

        return self._parse_response(operation, response.content)

    # Запрос

    def _envelope(self, operation: WsdlOperation, args: List[Any]) -> etree._Element:
        envelope = etree.Element(
            SOAP_ENVELOPE, nsmap={"SOAP-ENV": NS_SOAP_ENV, "xsi": NS_XSI}
        )
        body = etree.SubElement(envelope, SOAP_BODY)

        if operation.style == "rpc":
            wrapper = etree.SubElement(
                body,
                _qname(operation.namespace, operation.name),
                nsmap={"ns1": operation.namespace} if operation.namespace else None,
            )
            for part, value in zip(operation.input_parts, args):
                self._serialize(wrapper, part.name, value)
        else:
            for part, value in zip(operation.input_parts, args):
                child_namespace = part.namespace if part.qualified else None
                self._serialize(
                    body, part.element or part.name, value, part.namespace, child_namespace
                )

        return envelope

    def _serialize(
        self,
        parent: etree._Element,
        name: str,
        value: Any,
        namespace: Optional[str] = None,
        child_namespace: Optional[str] = None,
    ) -> None:
        if isinstance(value, (list, tuple)):
            for item in value:
                self._serialize(parent, name, item, namespace, child_namespace)
            return

        element = etree.SubElement(parent, _qname(namespace, name))

        if value is None:
            element.set(XSI_NIL, "true")
        elif isinstance(value, Enum):
            element.text = str(value.value)
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        elif isinstance(value, bytes):
            element.text = base64.b64encode(value).decode("ascii")
        elif isinstance(value, (str, int, float)):
            element.text = str(value)
        else:
            fields = value if isinstance(value, dict) else vars(value)
            for key, child in fields.items():
                if key.startswith("_") or child is None:
                    continue
                self._serialize(element, key, child, child_namespace, child_namespace)

    def _send(self, operation: WsdlOperation, payload: bytes) -> httpx.Response:
        location = self.location or operation.location
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{operation.action}"',
        }

        if self.compression is not None:
            if self.compression & constants.SOAP_COMPRESSION_ACCEPT:
                headers["Accept-Encoding"] = "gzip, deflate"

            level = self.compression & COMPRESSION_LEVEL_MASK
            if level:
                if self.compression & constants.SOAP_COMPRESSION_DEFLATE:
                    payload = zlib.compress(payload, level)
                    headers["Content-Encoding"] = "deflate"
                else:
                    payload = gzip.compress(payload, level)
                    headers["Content-Encoding"] = "gzip"

        logger.debug("Making SOAP call %s to %s", operation.name, location)

        try:
            response = self._http.post(location, content=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise SoapTransportError(str(exc), location) from exc

        logger.debug("Response status: %s", response.status_code)
        return response

    def _raise_for_status(self, operation: WsdlOperation, response: httpx.Response):
        location = self.location or operation.location

        # Fault приходит с кодом 500
        try:
            body = etree.fromstring(response.content).find(SOAP_BODY)
        except etree.XMLSyntaxError:
            body = None
        if body is not None:
            self._raise_if_fault(operation, body)

        raise SoapTransportError(
            response.reason_phrase, location, status_code=response.status_code
        )

    # Ответ

    def _parse_response(self, operation: WsdlOperation, content: bytes) -> Any:
        if not content.strip():
            return None

        try:
            root = etree.fromstring(content)
        except etree.XMLSyntaxError as exc:
            raise SoapTransportError(
                f"Response is not XML: {exc}", self.location or operation.location
            ) from exc

        body = root.find(SOAP_BODY)
        if body is None:
            raise SoapTransportError(
                "No SOAP body found in response", self.location or operation.location
            )

        self._raise_if_fault(operation, body)

        elements = [_ for _ in body if isinstance(_.tag, str)]
        if not elements:
            return None

        if operation.style == "rpc":
            elements = [_ for _ in elements[0] if isinstance(_.tag, str)]
            if not elements:
                return None

        if len(elements) == 1:
            return self._unmarshal(elements[0])

        return {local(_.tag): self._unmarshal(_) for _ in elements}

    @staticmethod
    def _raise_if_fault(operation: WsdlOperation, body: etree._Element) -> None:
        fault = body.find(SOAP_FAULT)
        if fault is None:
            return

        detail = fault.find("detail")
        if detail is not None:
            detail = detail.text if detail.text and detail.text.strip() else (
                etree.tostring(detail, encoding="unicode")
            )

        raise SoapFault(
            operation.name,
            fault.findtext("faultcode"),
            fault.findtext("faultstring"),
            detail,
        )

    def _unmarshal(self, element: etree._Element) -> Any:
        if element.get(XSI_NIL) in ("true", "1"):
            return None

        type_name = local_attr(element.get(XSI_TYPE)) or local(element.tag)
        cls = self._resolve_class(type_name)
        children = [_ for _ in element if isinstance(_.tag, str)]

        if not children:
            if cls is not None and issubclass(cls, Enum):
                return cls(element.text)
            return element.text

        fields: Dict[str, List[Any]] = {}
        for child in children:
            fields.setdefault(local(child.tag), []).append(self._unmarshal(child))

        is_array = type_name.startswith(ARRAY_PREFIX) and len(fields) == 1
        if is_array and cls is None:
            items = next(iter(fields.values()))
            if len(items) == 1 and not self.features & constants.SOAP_SINGLE_ELEMENT_ARRAYS:
                return items[0]
            return items

        values = {
            validate_naming_convention(name): (
                items[0]
                if len(items) == 1
                and not (is_array and self.features & constants.SOAP_SINGLE_ELEMENT_ARRAYS)
                else items
            )
            for name, items in fields.items()
        }

        if cls is None:
            return SimpleNamespace(**values)

        instance = cls.__new__(cls)
        for name, value in values.items():
            setattr(instance, name, value)
        return instance

    def _resolve_class(self, type_name: str) -> Optional[type]:
        """Класс из карты классов; строковые значения ищутся в модуле сервиса"""
        target = self.classmap.get(type_name)

        if isinstance(target, str):
            module = sys.modules.get(type(self).__module__)
            target = getattr(module, target, None)

        return target if isinstance(target, type) else None


# Имена SoapClient и атрибуты сгенерированного сервиса, их нельзя занимать методами операций
CLIENT_ATTRIBUTES = frozenset(dir(SoapClient)) | {
    "wsdl",
    "classmap",
    "features",
    "compression",
    "location",
    "document",
    "_operations",
    "_http",
    "_classmap",
}


def _qname(namespace: Optional[str], name: str) -> str:
    return f"{{{namespace}}}{name}" if namespace else name

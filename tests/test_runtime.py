"""
Тесты SOAP рантайма
"""

import gzip
import importlib.util
import sys
from types import SimpleNamespace

import httpx
import pytest
from lxml import etree

from wsdl_client.config import WsdlConfig
from wsdl_client.generator import generate_client
from wsdl_client.runtime import (
    CLIENT_ATTRIBUTES,
    SoapClient,
    SoapFault,
    SoapTransportError,
    WsdlCache,
    constants,
    load_wsdl,
)

NS_SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"


def envelope(body: str) -> bytes:
    return (
        f'<SOAP-ENV:Envelope xmlns:SOAP-ENV="{NS_SOAP_ENV}" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
        'xmlns:ns1="urn:people">'
        f"<SOAP-ENV:Body>{body}</SOAP-ENV:Body></SOAP-ENV:Envelope>"
    ).encode("utf-8")


class Recorder:
    """Обработчик MockTransport, запоминающий запросы"""

    def __init__(self, response: bytes = b"", status_code: int = 200):
        self.response = response
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.response)

    @property
    def body(self) -> etree._Element:
        content = self.requests[-1].content
        if self.requests[-1].headers.get("Content-Encoding") == "gzip":
            content = gzip.decompress(content)
        return etree.fromstring(content).find(f"{{{NS_SOAP_ENV}}}Body")


def make_client(wsdl: str, recorder: Recorder, **options) -> SoapClient:
    return SoapClient(wsdl, {"transport": httpx.MockTransport(recorder), **options})


class TestSoapClient:
    """Тесты вызовов SOAP"""

    def test_rpc_call(self, people_wsdl):
        recorder = Recorder(
            envelope("<ns1:getNameResponse><return>Alice</return></ns1:getNameResponse>")
        )
        client = make_client(people_wsdl, recorder)

        assert client._soap_call("getName", ["42"]) == "Alice"

        request = recorder.requests[0]
        assert str(request.url) == "http://example.com/people"
        assert request.headers["SOAPAction"] == '"urn:people#getName"'
        assert request.headers["Content-Type"] == "text/xml; charset=utf-8"

        call = recorder.body[0]
        assert call.tag == "{urn:people}getName"
        assert call.findtext("id") == "42"

    def test_object_argument_and_classmap(self, people_wsdl):
        """Тест объекта в запросе и класса из карты классов в ответе"""

        class Person:
            name = None
            age = None

        recorder = Recorder(
            envelope(
                "<ns1:getPersonResponse>"
                '<return xsi:type="ns1:Person"><name>Bob</name><age>30</age>'
                "<address><street>Main</street><city>Springfield</city></address>"
                "</return></ns1:getPersonResponse>"
            )
        )
        client = make_client(people_wsdl, recorder, classmap={"Person": Person})

        result = client._soap_call("getPerson", ["7"])

        assert isinstance(result, Person)
        assert result.name == "Bob"
        assert result.age == "30"
        assert result.address == SimpleNamespace(street="Main", city="Springfield")

    def test_object_serialization(self, people_wsdl):
        recorder = Recorder()
        client = make_client(people_wsdl, recorder)

        person = SimpleNamespace(name="Bob", age=30, address=None, _hidden="x")
        assert client._soap_call("move", [person, {"city": "Paris"}]) is None

        call = recorder.body[0]
        assert call.find("person").findtext("name") == "Bob"
        assert call.find("person").findtext("age") == "30"
        assert call.find("person").find("address") is None
        assert call.find("person").find("_hidden") is None
        assert call.find("address").findtext("city") == "Paris"

    def test_multiple_results(self, people_wsdl):
        """Тест операции с несколькими результатами"""
        recorder = Recorder(
            envelope("<ns1:getPairResponse><a>x</a><b>y</b></ns1:getPairResponse>")
        )
        client = make_client(people_wsdl, recorder)

        assert client._soap_call("getPair", []) == {"a": "x", "b": "y"}

    def test_document_literal(self, catalog_wsdl):
        """Тест document/literal: элементы в пространстве имен схемы"""
        recorder = Recorder(
            envelope(
                '<findItemResponse xmlns="urn:catalog"><item>'
                "<title>Dune</title><color>Red</color><tags>a</tags><tags>b</tags>"
                "</item></findItemResponse>"
            )
        )
        client = make_client(catalog_wsdl, recorder)

        result = client._soap_call("findItem", [{"title": "Dune"}])

        assert result.item.title == "Dune"
        assert result.item.tags == ["a", "b"]

        request = recorder.requests[0]
        assert str(request.url) == "http://example.com/catalog"
        call = recorder.body[0]
        assert call.tag == "{urn:catalog}findItem"
        assert call.findtext("{urn:catalog}title") == "Dune"

    def test_location_override(self, people_wsdl):
        recorder = Recorder(
            envelope("<ns1:getNameResponse><return>A</return></ns1:getNameResponse>")
        )
        client = make_client(people_wsdl, recorder, location="http://localhost/soap")
        client._soap_call("getName", ["1"])

        assert str(recorder.requests[0].url) == "http://localhost/soap"

    def test_unknown_operation(self, people_wsdl):
        client = make_client(people_wsdl, Recorder())

        with pytest.raises(SoapFault) as exc_info:
            client._soap_call("missing", [])

        assert exc_info.value.faultcode == "Client"

    def test_fault(self, people_wsdl):
        """Тест SOAP Fault с кодом 500"""
        recorder = Recorder(
            envelope(
                "<SOAP-ENV:Fault><faultcode>SOAP-ENV:Server</faultcode>"
                "<faultstring>Person not found</faultstring>"
                "<detail>id=7</detail></SOAP-ENV:Fault>"
            ),
            status_code=500,
        )
        client = make_client(people_wsdl, recorder)

        with pytest.raises(SoapFault) as exc_info:
            client._soap_call("getPerson", ["7"])

        assert exc_info.value.faultcode == "SOAP-ENV:Server"
        assert exc_info.value.faultstring == "Person not found"
        assert exc_info.value.detail == "id=7"

    def test_http_error(self, people_wsdl):
        client = make_client(people_wsdl, Recorder(b"Service Unavailable", 503))

        with pytest.raises(SoapTransportError) as exc_info:
            client._soap_call("getName", ["1"])

        assert exc_info.value.status_code == 503

    def test_gzip_request(self, people_wsdl):
        """Тест сжатия запроса"""
        recorder = Recorder(
            envelope("<ns1:getNameResponse><return>A</return></ns1:getNameResponse>")
        )
        client = make_client(
            people_wsdl,
            recorder,
            compression=constants.SOAP_COMPRESSION_ACCEPT
            | constants.SOAP_COMPRESSION_GZIP
            | 5,
        )
        client._soap_call("getName", ["1"])

        request = recorder.requests[0]
        assert request.headers["Content-Encoding"] == "gzip"
        assert request.headers["Accept-Encoding"] == "gzip, deflate"
        assert recorder.body[0].findtext("id") == "1"

    def test_introspection(self, people_wsdl):
        client = make_client(people_wsdl, Recorder())

        assert "string getName(string $id)" in client.get_functions()
        assert "Person ArrayOfPerson[]" in client.get_types()

    def test_client_attributes(self, people_wsdl):
        """Тест имен, закрытых для методов операций"""
        client = make_client(people_wsdl, Recorder())

        assert {"close", "get_functions", "get_types", "_soap_call"} <= CLIENT_ATTRIBUTES
        assert set(vars(client)) <= CLIENT_ATTRIBUTES


class TestWsdlCache:
    """Тесты кеша WSDL"""

    def test_singleton(self):
        assert WsdlCache() is WsdlCache()

    def test_memory_cache(self, people_wsdl):
        WsdlCache().clear()
        load_wsdl(people_wsdl, constants.WSDL_CACHE_MEMORY)

        assert WsdlCache().get(people_wsdl) is not None

    def test_no_cache(self, catalog_wsdl):
        WsdlCache().clear()
        load_wsdl(catalog_wsdl, constants.WSDL_CACHE_NONE)

        assert WsdlCache().get(catalog_wsdl) is None


class TestGeneratedClient:
    """Тест сгенерированного клиента против рантайма"""

    def test_generated_service(self, people_wsdl, tmp_path, monkeypatch):
        config = WsdlConfig(
            input_file=people_wsdl,
            output_dir=str(tmp_path),
            one_file_per_service=True,
        )
        (path,) = generate_client(config)

        spec = importlib.util.spec_from_file_location("people_service", path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, "people_service", module)
        spec.loader.exec_module(module)

        recorder = Recorder(
            envelope(
                "<ns1:getPersonResponse>"
                '<return xsi:type="ns1:Person"><name>Bob</name></return>'
                "</ns1:getPersonResponse>"
            )
        )
        client = module.PeopleService(
            options={"transport": httpx.MockTransport(recorder)}
        )

        assert client.classmap == {"Person": "Person", "Address": "Address"}

        person = client.getPerson("7")

        assert isinstance(person, module.Person)
        assert person.name == "Bob"
        assert person.age is None

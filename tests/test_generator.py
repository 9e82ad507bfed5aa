"""
Тесты генератора SOAP клиентов
"""

import os

import pytest

from wsdl_client.config import WsdlConfig
from wsdl_client.exceptions import (
    ConfigError,
    LoadError,
    MissingServiceError,
    NoServiceLoadedError,
    OutputDirError,
)
from wsdl_client.generator import WsdlClientGenerator, generate_client
from wsdl_client.internal.generator.client_generator import ClientGenerator


def read(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


class TestPerTypeOutput:
    """Тесты режима 'файл на каждый класс'"""

    def test_three_files(self, config):
        """Тест двух типов и сервиса: ровно три файла"""
        paths = generate_client(config)

        assert sorted(os.path.basename(_) for _ in paths) == [
            "Address.py",
            "PeopleService.py",
            "Person.py",
        ]
        assert sorted(os.listdir(config.output_dir)) == [
            "Address.py",
            "PeopleService.py",
            "Person.py",
        ]

    def test_service_dependencies(self, config):
        generate_client(config)
        service = read(os.path.join(config.output_dir, "PeopleService.py"))

        assert "from Person import Person" in service
        assert "from Address import Address" in service
        assert "from wsdl_client.runtime import SoapClient" in service
        assert "class PeopleService(SoapClient):" in service

    def test_service_methods(self, config):
        """Тест методов операций"""
        generate_client(config)
        service = read(os.path.join(config.output_dir, "PeopleService.py"))

        assert "def getName(self, id) -> str:" in service
        assert "return self._soap_call('getName', [id])" in service
        assert "def getPerson(self, id) -> 'Person':" in service
        assert "def move(self, person: 'Person', address: 'Address') -> None:" in service
        assert "def getPair(self) -> dict:" in service
        assert "list(string $a, string $b)" in service

    def test_class_map(self, config):
        generate_client(config)
        service = read(os.path.join(config.output_dir, "PeopleService.py"))

        assert "_classmap = {\n        'Person': 'Person',\n        'Address': 'Address',\n    }" in service
        assert "ArrayOfPerson" not in service

    def test_type_file(self, config):
        """Тест файла типа с полями и конструктором"""
        generate_client(config)
        person = read(os.path.join(config.output_dir, "Person.py"))

        assert person.startswith("from typing import Any, List, Optional\n")
        assert "class Person:" in person
        assert "    name: Optional[str] = None" in person
        assert "    age: Optional[int] = None" in person
        assert "    address: Optional['Address'] = None" in person
        assert "def __init__(self, name=None, age=None, address=None):" in person
        assert "self.address = address" in person

    def test_generated_code_compiles(self, config):
        for path in generate_client(config):
            compile(read(path), path, "exec")

    def test_allowed_class_names(self, config):
        """Тест фильтра классов"""
        config.allowed_class_names = ["Person", "PeopleService"]
        paths = generate_client(config)

        assert sorted(os.path.basename(_) for _ in paths) == ["PeopleService.py", "Person.py"]

        service = read(os.path.join(config.output_dir, "PeopleService.py"))
        assert "from Person import Person" in service
        assert "from Address import Address" not in service
        # Карта классов не зависит от фильтра
        assert "'Address': 'Address'" in service

    def test_namespace(self, config):
        """Тест пакета для сгенерированных файлов"""
        config.namespace_name = "acme.people"
        generate_client(config)

        package_dir = os.path.join(config.output_dir, "acme", "people")
        assert sorted(os.listdir(package_dir)) == [
            "Address.py",
            "PeopleService.py",
            "Person.py",
        ]

        service = read(os.path.join(package_dir, "PeopleService.py"))
        assert "from acme.people.Person import Person" in service


class TestSingleFileOutput:
    """Тесты режима 'один файл на сервис'"""

    def test_single_file(self, config):
        config.one_file_per_service = True
        paths = generate_client(config)

        assert [os.path.basename(_) for _ in paths] == ["PeopleService.py"]

        source = read(paths[0])
        assert source.index("class PeopleService") < source.index("class Person:")
        assert source.index("class Person:") < source.index("class Address:")
        assert "from Person import" not in source
        compile(source, paths[0], "exec")

    def test_named_after_first_type(self, config):
        """Тест файла без сервиса: имя по первому разрешенному типу"""
        config.one_file_per_service = True
        config.allowed_class_names = ["Address"]
        paths = generate_client(config)

        assert [os.path.basename(_) for _ in paths] == ["Address.py"]
        assert "SoapClient" not in read(paths[0])

    def test_nothing_allowed(self, config):
        config.one_file_per_service = True
        config.allowed_class_names = ["Unknown"]

        assert generate_client(config) == []

    def test_enum_and_options(self, catalog_wsdl, tmp_path):
        """Тест перечисления, опций SOAP и защиты от повторного объявления"""
        config = WsdlConfig(
            input_file=catalog_wsdl,
            output_dir=str(tmp_path),
            one_file_per_service=True,
            assume_class_exists=True,
            soap_feature_flags=["SOAP_SINGLE_ELEMENT_ARRAYS"],
        )
        paths = generate_client(config)
        source = read(paths[0])

        assert os.path.basename(paths[0]) == "Catalog.py"
        assert "from enum import Enum" in source
        assert "from wsdl_client.runtime import constants as soap" in source
        assert 'if "Catalog" not in globals():' in source
        assert "class Color(str, Enum):" in source
        assert "class_ = 'class'" in source
        assert "class listCustom:" in source
        assert "'list': 'listCustom'," in source
        assert source.count("def findItem(") == 1
        compile(source, paths[0], "exec")


class TestGeneratorErrors:
    """Тесты ошибок генерации"""

    def test_save_before_load(self, config):
        with pytest.raises(NoServiceLoadedError):
            ClientGenerator(config).save()

    def test_output_dir_is_file(self, config, tmp_path):
        target = tmp_path / "occupied"
        target.write_text("")
        config.output_dir = str(target)

        with pytest.raises(OutputDirError):
            generate_client(config)

    def test_missing_wsdl(self, tmp_path):
        config = WsdlConfig(
            input_file=str(tmp_path / "missing.wsdl"), output_dir=str(tmp_path)
        )

        with pytest.raises(LoadError):
            generate_client(config)

    def test_missing_service(self, tmp_path):
        wsdl = tmp_path / "empty.wsdl"
        wsdl.write_text(
            '<definitions xmlns="http://schemas.xmlsoap.org/wsdl/"><types/></definitions>'
        )
        config = WsdlConfig(input_file=str(wsdl), output_dir=str(tmp_path / "out"))

        with pytest.raises(MissingServiceError):
            generate_client(config)

        assert not os.path.exists(tmp_path / "out")

    def test_invalid_config(self, people_wsdl):
        with pytest.raises(ConfigError):
            WsdlClientGenerator(WsdlConfig(input_file=people_wsdl))


class TestBuild:
    def test_build_without_saving(self, config):
        """Тест сборки проекта без записи на диск"""
        project = WsdlClientGenerator(config).build()

        assert project.name == "PeopleService"
        assert [_.file_name for _ in project.files] == [
            "Person.py",
            "Address.py",
            "PeopleService.py",
        ]
        assert not os.path.exists(config.output_dir)

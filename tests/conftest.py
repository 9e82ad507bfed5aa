import os

import pytest

from wsdl_client.config import WsdlConfig

FIXTURES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


@pytest.fixture
def people_wsdl() -> str:
    """WSDL в стиле rpc: типы Person, Address и массив ArrayOfPerson"""
    return os.path.join(FIXTURES_DIR, "people.wsdl")


@pytest.fixture
def catalog_wsdl() -> str:
    """WSDL в стиле document/literal с перечислением и двумя портами"""
    return os.path.join(FIXTURES_DIR, "catalog.wsdl")


@pytest.fixture
def config(people_wsdl, tmp_path) -> WsdlConfig:
    return WsdlConfig(input_file=people_wsdl, output_dir=str(tmp_path / "client"))

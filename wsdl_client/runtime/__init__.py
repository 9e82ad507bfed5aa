"""Рантайм, от которого наследуются сгенерированные клиенты"""

from . import constants
from .client import (
    CLIENT_ATTRIBUTES,
    SoapClient,
    SoapFault,
    SoapTransportError,
    WsdlCache,
    load_wsdl,
)

__all__ = [
    "constants",
    "CLIENT_ATTRIBUTES",
    "SoapClient",
    "SoapFault",
    "SoapTransportError",
    "WsdlCache",
    "load_wsdl",
]

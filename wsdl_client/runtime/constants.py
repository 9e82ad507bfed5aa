"""Опции SOAP клиента, значения совместимы с расширением SOAP в PHP"""

# Features
SOAP_SINGLE_ELEMENT_ARRAYS = 1
SOAP_WAIT_ONE_WAY_CALLS = 2
SOAP_USE_XSI_ARRAY_TYPE = 4

# WSDL cache
WSDL_CACHE_NONE = 0
WSDL_CACHE_DISK = 1
WSDL_CACHE_MEMORY = 2
WSDL_CACHE_BOTH = 3

# Compression
SOAP_COMPRESSION_GZIP = 0
SOAP_COMPRESSION_DEFLATE = 16
SOAP_COMPRESSION_ACCEPT = 32

FEATURES = (
    "SOAP_SINGLE_ELEMENT_ARRAYS",
    "SOAP_WAIT_ONE_WAY_CALLS",
    "SOAP_USE_XSI_ARRAY_TYPE",
)

CACHE_MODES = (
    "WSDL_CACHE_NONE",
    "WSDL_CACHE_DISK",
    "WSDL_CACHE_MEMORY",
    "WSDL_CACHE_BOTH",
)

COMPRESSION_MODES = (
    "SOAP_COMPRESSION_GZIP",
    "SOAP_COMPRESSION_DEFLATE",
    "SOAP_COMPRESSION_ACCEPT",
)

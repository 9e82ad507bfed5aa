from .config import WsdlConfig
from .generator import WsdlClientGenerator, generate_client

__all__ = ["WsdlConfig", "WsdlClientGenerator", "generate_client"]

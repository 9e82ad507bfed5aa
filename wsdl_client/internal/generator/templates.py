class Templates:
    """Шаблоны фрагментов генерируемого кода"""

    service_constructor = """options = dict(options or {{}})
classmap = dict(options.get("classmap") or {{}})
for key, value in self._classmap.items():
    if key not in classmap:
        classmap[key] = value
options["classmap"] = classmap
{service_options}
super().__init__(wsdl, options)"""

    service_option = """
if "{key}" not in options:
    options["{key}"] = {value}
"""

    soap_call = "return self._soap_call({remote_name!r}, [{arguments}])"

    field_assignment = "self.{name} = {name}"

    runtime_imports = [
        "from typing import Any, List, Optional",
        "",
        "from wsdl_client.runtime import SoapClient",
    ]

    runtime_constants_import = "from wsdl_client.runtime import constants as soap"

    type_imports = [
        "from typing import Any, List, Optional",
    ]

    enum_imports = [
        "from enum import Enum",
    ]


templates = Templates()

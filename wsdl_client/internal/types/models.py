import os
import textwrap
from typing import Optional, Union

from pydantic import BaseModel, field_validator

INDENT = "    "
MAX_LINE_LENGTH = 88


class Variable(BaseModel):
    value: list[Union["Variable", str]] = []
    wrap_name: Optional[str] = None

    @field_validator("value", mode="before")
    def value_check(cls, value):
        _value = value

        if not isinstance(value, list):
            _value = [value]

        return _value

    def __str__(self):
        _value = ", ".join([_.__str__() for _ in self.value])

        if self.wrap_name is None:
            return _value

        return self.__wrap(_value, self.wrap_name)

    @classmethod
    def __wrap(cls, value: str, wrap_name: str):
        return f"{wrap_name}[{value}]" if value else "Any"


Variable.model_rebuild()


class Parameter(BaseModel):
    name: str

    default: Optional[Variable] = None
    var_type: Optional[Variable] = None

    # Тип для docstring, когда аннотация не выводится
    doc_type: Optional[str] = None

    order: int = 0

    def set_default(self, default: Union[str, Variable], **kwargs):
        if isinstance(default, str):
            default = Variable(value=default, **kwargs)

        self.default = default

    def set_type(self, var_type: Union[str, Variable], **kwargs):
        if isinstance(var_type, str):
            var_type = Variable(value=var_type, **kwargs)

        self.var_type = var_type

    def __str__(self):
        if self.var_type:
            return (
                f"{self.name}: {self.var_type}"
                + (f" = {self.default}" if self.default else "")
            )

        return self.name + (f"={self.default}" if self.default else "")


class CodeBlock(BaseModel):
    order: int = 0
    code: str = "pass"

    def __str__(self):
        return self.code.replace("\t", INDENT)


class Function(BaseModel):
    name: str
    parameters: list[Parameter] = []
    response: Optional[str] = None

    description: Optional[str] = None
    returns: Optional[str] = None

    code: CodeBlock = CodeBlock(order=0, code="pass")

    order: int = 0

    def __str__(self) -> str:
        header = f"def {self.name}({', '.join(map(str, self.parameters))})"
        if self.response:
            header += f" -> {self.response}"

        if (
            len(header) + len(INDENT) + 1 > MAX_LINE_LENGTH
            and len(self.parameters) > 1
        ):
            # Длинная сигнатура - по одному параметру на строку
            header = (
                f"def {self.name}(\n"
                + ",\n".join(INDENT + str(_) for _ in self.parameters)
                + ",\n)"
                + (f" -> {self.response}" if self.response else "")
            )

        body = [str(self.code)]
        docstring = self._generate_docstring()
        if docstring:
            body.insert(0, docstring)

        return header + ":\n" + textwrap.indent("\n".join(body), INDENT)

    def _generate_docstring(self) -> str:
        """Генерация docstring по описанию, параметрам и возвращаемому значению"""
        documented = [_ for _ in self.parameters if _.name != "self"]
        if not self.description and not documented and not self.returns:
            return ""

        lines = ['"""']

        if self.description:
            lines.append(self.description)

        if documented:
            if len(lines) > 1:
                lines.append("")
            lines.append("Args:")
            for param in documented:
                param_type = param.doc_type or (
                    str(param.var_type) if param.var_type else "Any"
                )
                lines.append(f"    {param.name} ({param_type})")

        if self.returns:
            if len(lines) > 1:
                lines.append("")
            lines.append("Returns:")
            lines.append(f"    {self.returns}")

        lines.append('"""')
        return "\n".join(lines)


class Class(BaseModel):
    name: str

    functions: dict[str, "Function"] = {}
    code_blocks: list["CodeBlock"] = []
    parameters: list[Parameter] = []

    inherits: list[str] = []
    description: Optional[str] = None

    # Объявлять класс только если одноименный класс еще не определен
    guarded: bool = False

    order: int = 0

    def __str__(self) -> str:
        sections = []

        if self.description:
            sections.append(f'"""{self.description}"""')

        if self.parameters:
            sections.append("\n".join(map(str, self.parameters)))

        sections.extend(
            str(_)
            for _ in sorted(
                self.code_blocks + list(self.functions.values()),
                key=lambda x: x.order,
                reverse=True,
            )
        )

        source = (
            f"class {self.name}"
            + (f"({', '.join(self.inherits)})" if self.inherits else "")
            + ":\n"
            + textwrap.indent("\n\n".join(sections) if sections else "pass", INDENT)
        )

        if self.guarded:
            source = f'if "{self.name}" not in globals():\n\n' + textwrap.indent(
                source, INDENT
            )

        return source.replace("\t", INDENT)

    def add_function(self, function: Union["Function", str], **kwargs) -> "Function":
        if isinstance(function, str):
            function = Function(name=function, **kwargs)

        self.functions[function.name] = function

        return function

    def add_code_block(
        self, code_block: Union["CodeBlock", str], **kwargs
    ) -> "Class":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


Class.model_rebuild()


class CodeFile(BaseModel):
    file_name: str

    description: Optional[str] = None
    namespace: Optional[str] = None

    imports: list[str] = []
    # Имена файлов, от которых зависит этот файл
    dependencies: list[str] = []
    classes: dict[str, "Class"] = {}

    @property
    def path(self) -> str:
        if self.namespace:
            return os.path.join(*self.namespace.split("."), self.file_name)
        return self.file_name

    def __str__(self):
        header = [f'"""{self.description}"""'] if self.description else []

        imports = list(self.imports)
        dependency_imports = [self._dependency_import(_) for _ in self.dependencies]
        if dependency_imports:
            if imports:
                imports.append("")
            imports.extend(dependency_imports)

        body = "\n\n\n".join(
            map(
                str,
                sorted(
                    self.classes.values(),
                    key=lambda x: x.order,
                    reverse=True,
                ),
            )
        )

        return (
            "\n\n".join(
                filter(
                    bool,
                    [
                        "\n".join(header),
                        "\n".join(imports),
                    ],
                )
            )
            + ("\n\n\n" if header or imports else "")
            + body
            + "\n"
        ).replace("\t", INDENT)

    def _dependency_import(self, file_name: str) -> str:
        module = os.path.splitext(file_name)[0]
        package = f"{self.namespace}.{module}" if self.namespace else module
        return f"from {package} import {module}"

    def add_dependency(self, file_name: str) -> "CodeFile":
        if file_name not in self.dependencies:
            self.dependencies.append(file_name)
        return self

    def add_class(self, cls: Union["Class", str], **kwargs) -> "Class":
        if isinstance(cls, str):
            cls = Class(name=cls, **kwargs)

        self.classes[cls.name] = cls

        return cls

    def save(self, directory: str) -> str:
        """Запись файла в директорию, возвращает полный путь"""
        path = os.path.join(directory, self.path)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(str(self))

        return path


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: Union["CodeFile", str], **kwargs) -> "CodeFile":
        if isinstance(file_name, str):
            file_name = CodeFile(file_name=file_name, **kwargs)

        self.files.append(file_name)
        return file_name

    def save(self, directory: str) -> list[str]:
        """Сохранение всех файлов проекта"""
        return [code_file.save(directory) for code_file in self.files]

"""
Исключения генератора
"""


class GeneratorError(Exception):
    """Базовая ошибка генерации, прерывает весь запуск"""


class LoadError(GeneratorError):
    """WSDL недоступен или не разбирается"""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Error loading the wsdl {location}: {reason}")


class MissingServiceError(GeneratorError):
    """В WSDL нет элемента <service>"""


class OperationGrammarError(GeneratorError):
    """Сигнатура операции не подходит ни под одну грамматику"""

    def __init__(self, signature: str):
        self.signature = signature
        super().__init__(f"Invalid function call: {signature}")


class TypeGrammarError(GeneratorError):
    """Строка поля в сигнатуре типа не разбирается"""

    def __init__(self, signature: str, line: str):
        self.signature = signature
        self.line = line
        super().__init__(f"Invalid member line {line!r} in type: {signature}")


class OutputDirError(GeneratorError):
    """Директорию для файлов нельзя создать"""


class NoServiceLoadedError(GeneratorError):
    """Сохранение вызвано до построения модели сервиса"""


class ConfigError(GeneratorError, ValueError):
    """Некорректная конфигурация"""


class ValidationError(Exception):
    """Имя недопустимо; обрабатывается на месте добавлением суффикса"""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"{name!r} is not a valid name: {reason}")

import argparse
import logging
import os
import sys
from typing import List, Optional

from wsdl_client.config import CONFIG_FILE_NAME, WsdlConfig
from wsdl_client.exceptions import GeneratorError
from wsdl_client.generator import WsdlClientGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Генерация Python клиента из WSDL")
    parser.add_argument("--input-file", dest="input_file", type=str, help="Путь или URL к WSDL")
    parser.add_argument(
        "--output-dir", dest="output_dir", type=str, help="Директория для генерации клиента"
    )
    parser.add_argument("--prefix", type=str, help="Префикс имен классов")
    parser.add_argument("--suffix", type=str, help="Суффикс имен классов")
    parser.add_argument(
        "--one-file-per-service",
        dest="one_file_per_service",
        action="store_true",
        help="Весь сервис в одном файле",
    )
    parser.add_argument(
        "--namespace-name",
        dest="namespace_name",
        type=str,
        help="Пакет для сгенерированных файлов (через точку)",
    )
    parser.add_argument(
        "--allowed-class-names",
        dest="allowed_class_names",
        type=str,
        help="Генерировать только эти классы (через запятую)",
    )
    parser.add_argument(
        "--assume-class-exists",
        dest="assume_class_exists",
        action="store_true",
        help="Не переопределять уже объявленные классы",
    )
    parser.add_argument(
        "--omit-type-constructors",
        dest="omit_type_constructors",
        action="store_true",
        help="Не генерировать конструкторы типов",
    )
    parser.add_argument(
        "--soap-feature-flags",
        dest="soap_feature_flags",
        type=str,
        help="Опции SOAP через запятую, например SOAP_SINGLE_ELEMENT_ARRAYS",
    )
    parser.add_argument(
        "--wsdl-cache-mode",
        dest="wsdl_cache_mode",
        type=str,
        help="Режим кеша WSDL, например WSDL_CACHE_MEMORY",
    )
    parser.add_argument(
        "--compression-mode",
        dest="compression_mode",
        type=str,
        help='Сжатие, например "SOAP_COMPRESSION_ACCEPT | SOAP_COMPRESSION_GZIP"',
    )
    parser.add_argument("--verbose", action="store_true", help="Подробный вывод")
    parser.add_argument(
        "--config", type=str, default=CONFIG_FILE_NAME, help="Путь к конфиг файлу"
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help=f"Создать конфиг файл {CONFIG_FILE_NAME}",
    )
    return parser


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [_.strip() for _ in value.split(",") if _.strip()]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)

    # Списки в аргументах передаются через запятую
    args.allowed_class_names = _split_list(args.allowed_class_names)
    args.soap_feature_flags = _split_list(args.soap_feature_flags)

    return args


def resolve_config(args: argparse.Namespace) -> WsdlConfig:
    """Конфиг из файла, дополненный аргументами командной строки"""
    file_config = WsdlConfig.from_file(args.config)

    if file_config:
        print(f"📋 Используется конфиг из {args.config}")
        return file_config.merge_with_args(args)

    return WsdlConfig().merge_with_args(args)


def generate(argv: Optional[List[str]] = None):
    """Команда генерации SOAP клиента"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Инициализация конфига
    if args.init_config:
        config = WsdlConfig().merge_with_args(args)
        config.save_to_file(args.config)
        print(f"✅ Создан конфиг файл {args.config}")
        return

    config = resolve_config(args)

    if not config.input_file:
        print("❌ Ошибка: Укажите WSDL или создайте конфиг с --init-config")
        sys.exit(1)

    print(f"🚀 Генерация клиента из {config.input_file}")

    try:
        paths = WsdlClientGenerator(config).generate()
    except GeneratorError as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)

    print(f"💾 Сохранено {len(paths)} файлов")
    print("✅ Генерация завершена успешно!")
    print(f"📦 Клиент создан в: {os.path.abspath(config.output_dir)}")


if __name__ == "__main__":
    generate()

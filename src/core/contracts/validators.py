"""
JSON Schema Contract Validators

Контракты на границах pre-sale движка:
- sale_state.json: снапшот персистентного состояния (PreSaleToken.state_snapshot)
- oracle_callback.json: payload callback оракула до разбора курса

Схемы лежат в contracts/schema/ (Draft 2020-12) и проверяются на
корректность при первой загрузке. Валидаторы создаются один раз на схему:
callback оракула проверяется на каждом обновлении курса.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

# Корень проекта: src/core/contracts/validators.py → 4 уровня вверх
DEFAULT_SCHEMA_DIR = Path(__file__).parent.parent.parent.parent / "contracts" / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик контрактов из каталога схем.

    Каждая схема читается с диска один раз и проходит meta-validation
    (Draft 2020-12) до первого использования.
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        self._schema_dir = Path(schema_dir) if schema_dir is not None else DEFAULT_SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def schema_names(self) -> List[str]:
        """Имена доступных контрактов (без .json), по алфавиту."""
        return sorted(p.stem for p in self._schema_dir.glob("*.json"))

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка контракта по имени ('sale_state', 'oracle_callback').

        Raises:
            FileNotFoundError: Контракт отсутствует в каталоге схем
            ValueError: Файл не является корректной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e.message}") from e

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Проверка payload против одного контракта."""

    def __init__(self, schema_name: str, loader: Optional[SchemaLoader] = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: payload нарушает контракт (первая найденная ошибка)
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)

    def error_messages(self, data: Dict[str, Any]) -> List[str]:
        """Все нарушения в виде 'path: message', отсортированные по пути.

        Корень payload обозначается '$'.
        """
        messages = []
        for error in self.iter_errors(data):
            path = "$" + "".join(
                f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path
            )
            messages.append(f"{path}: {error.message}")
        return sorted(messages)


class SaleStateValidator(ContractValidator):
    """Снапшот состояния: балансы, holder index, тиры, price feed."""

    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__("sale_state", loader)


class OracleCallbackValidator(ContractValidator):
    """Callback оракула: query_id, строка результата, hex proof."""

    def __init__(self, loader: Optional[SchemaLoader] = None):
        super().__init__("oracle_callback", loader)


@lru_cache(maxsize=None)
def _sale_state_validator() -> SaleStateValidator:
    return SaleStateValidator()


@lru_cache(maxsize=None)
def _oracle_callback_validator() -> OracleCallbackValidator:
    return OracleCallbackValidator()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_sale_state(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: снапшот нарушает sale_state.json
    """
    _sale_state_validator().validate(data)


def validate_oracle_callback(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: payload нарушает oracle_callback.json
    """
    _oracle_callback_validator().validate(data)


def oracle_callback_errors(data: Dict[str, Any]) -> List[str]:
    """Нарушения oracle_callback.json для диагностики отклонённого callback."""
    return _oracle_callback_validator().error_messages(data)

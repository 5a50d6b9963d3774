"""Units of measure, conversions between them and a caching unit service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from zanobia.errors import AppError, BadRequestError
from zanobia.validation import validate_unit, validate_unit_conversion

_log = logging.getLogger(__name__)

GRAMS = "grams"
KILOGRAMS = "kilograms"
MILLILITERS = "milliliters"
LITERS = "liters"
PIECE = "piece"
TABLESPOON = "tablespoon"
TEASPOON = "teaspoon"
JAR = "jar"
CARTON = "carton"
BOTTLE = "bottle"
BOX = "box"


@dataclass
class Unit:
    name: str
    symbol: str
    id: int | None = None


@dataclass
class UnitConversion:
    to_unit_id: int | None
    from_unit_id: int | None
    conversion_factor: float
    id: int | None = None


@dataclass(frozen=True)
class UnitConversionInput:
    to_unit_name: str
    from_unit_name: str
    conversion_factor: float


@dataclass
class ConvertUnitInput:
    to_unit_id: int | None
    from_unit_id: int | None
    quantity: float


@dataclass
class ConvertUnitOutput:
    unit: Unit
    quantity: float


INITIAL_UNITS: tuple[Unit, ...] = (
    Unit(GRAMS, "g"),
    Unit(KILOGRAMS, "kg"),
    Unit(MILLILITERS, "ml"),
    Unit(LITERS, "L"),
    Unit(PIECE, "pc"),
    Unit(TABLESPOON, "tbsp"),
    Unit(TEASPOON, "tsp"),
    Unit(JAR, "jar"),
    Unit(CARTON, "carton"),
    Unit(BOTTLE, "bottle"),
    Unit(BOX, "box"),
)

INITIAL_CONVERSIONS: tuple[UnitConversionInput, ...] = (
    UnitConversionInput(KILOGRAMS, GRAMS, 0.001),
    UnitConversionInput(GRAMS, KILOGRAMS, 1000),
    UnitConversionInput(LITERS, MILLILITERS, 0.001),
    UnitConversionInput(MILLILITERS, LITERS, 1000),
    UnitConversionInput(GRAMS, TABLESPOON, 15),
    UnitConversionInput(GRAMS, TEASPOON, 5),
    UnitConversionInput(MILLILITERS, TABLESPOON, 15),
    UnitConversionInput(MILLILITERS, TEASPOON, 5),
    UnitConversionInput(LITERS, TABLESPOON, 0.015),
    UnitConversionInput(LITERS, TEASPOON, 0.005),
    UnitConversionInput(KILOGRAMS, TABLESPOON, 0.015),
    UnitConversionInput(KILOGRAMS, TEASPOON, 0.005),
    UnitConversionInput(TABLESPOON, GRAMS, 0.67),
    UnitConversionInput(TEASPOON, GRAMS, 0.2),
    UnitConversionInput(TABLESPOON, MILLILITERS, 0.67),
    UnitConversionInput(TEASPOON, MILLILITERS, 0.2),
    UnitConversionInput(TABLESPOON, LITERS, 670),
    UnitConversionInput(TEASPOON, LITERS, 200),
    UnitConversionInput(TABLESPOON, KILOGRAMS, 670),
    UnitConversionInput(TEASPOON, KILOGRAMS, 200),
    UnitConversionInput(LITERS, KILOGRAMS, 1),
    UnitConversionInput(KILOGRAMS, LITERS, 1),
    UnitConversionInput(MILLILITERS, KILOGRAMS, 1000),
    UnitConversionInput(KILOGRAMS, MILLILITERS, 0.001),
    UnitConversionInput(MILLILITERS, GRAMS, 1),
    UnitConversionInput(GRAMS, MILLILITERS, 1),
    UnitConversionInput(LITERS, GRAMS, 0.001),
    UnitConversionInput(GRAMS, LITERS, 1000),
)


class UnitService:
    """Unit operations over a repository, with in-memory caches of units and conversions."""

    def __init__(self, repo: Any) -> None:
        self.repo = repo
        self._conversions: dict[str, UnitConversion] = {}
        self._units: dict[int, Unit] = {}

    def get_unit_conversion_key(self, to_unit_id: int, from_unit_id: int) -> str:
        return f"{to_unit_id}-{from_unit_id}"

    def get_all_unit_conversions(self) -> dict[str, UnitConversion]:
        return dict(self._conversions)

    def create_unit(self, unit: Unit) -> None:
        validate_unit(unit)
        unit_id = self.repo.create_unit(unit)
        _log.info("adding unit to cached map: %s", unit.name)
        self._units[unit_id] = replace(unit, id=unit_id)

    def translate_unit(self, unit: Unit, language_code: str) -> None:
        validate_unit(unit)
        self.repo.translate_unit(unit, language_code)

    def get_all_units(self) -> list[Unit]:
        return self.repo.get_all_units()

    def create_conversion(self, conversion: UnitConversion) -> None:
        validate_unit_conversion(conversion)
        self.repo.add_unit_conversion(conversion)
        key = self.get_unit_conversion_key(conversion.to_unit_id, conversion.from_unit_id)
        _log.info("adding unit conversion to cached map: %s", key)
        self._conversions[key] = conversion

    def convert_unit(self, convert_input: ConvertUnitInput) -> ConvertUnitOutput:
        to_id, from_id = convert_input.to_unit_id, convert_input.from_unit_id
        if (to_id is None and from_id is None) or convert_input.quantity == 0:
            raise BadRequestError("Invalid unit conversion input")
        if not to_id or not from_id:
            raise BadRequestError("Invalid unit conversion input")
        if to_id == from_id:
            return ConvertUnitOutput(self.get_unit_by_id(to_id), convert_input.quantity)
        key = self.get_unit_conversion_key(to_id, from_id)
        conversion = self._conversions.get(key)
        if conversion is None:
            _log.info("converting using database; cache miss")
            conversion = self.repo.get_unit_conversion_by_unit_id(to_id, from_id)
            self._conversions[key] = conversion
        else:
            _log.info("converting using cached unit conversions map")
        quantity = convert_input.quantity * conversion.conversion_factor
        return ConvertUnitOutput(self.get_unit_by_id(conversion.to_unit_id), quantity)

    def get_unit_by_id(self, unit_id: int | None) -> Unit:
        if not unit_id:
            raise BadRequestError("Invalid unit id")
        cached = self._units.get(unit_id)
        if cached is not None and cached.id is not None:
            _log.info("unit found in cached map: %s", cached.name)
            return cached
        _log.info("unit not found in cached map, fetching from database")
        unit = self.repo.get_unit_by_id(unit_id)
        self._units[unit_id] = unit
        return unit

    def setup_unit_conversions_map(self) -> None:
        conversions = self.repo.get_unit_conversions()
        self._conversions = {
            self.get_unit_conversion_key(c.to_unit_id, c.from_unit_id): c
            for c in conversions
        }
        _log.info("unit conversions map setup: %d entries", len(self._conversions))

    def setup_units_map(self) -> None:
        units = self.repo.get_all_units()
        self._units = {unit.id: unit for unit in units}
        _log.info("units map setup: %d entries", len(self._units))

    def initiate_all(self) -> None:
        """Create the standard units and conversions, skipping any that fail."""
        for unit in INITIAL_UNITS:
            try:
                self.create_unit(unit)
            except AppError as err:
                _log.error("failed to create unit %s: %s", unit.name, err)
        for spec in INITIAL_CONVERSIONS:
            try:
                to_unit = self.repo.get_unit_from_name(spec.to_unit_name)
                from_unit = self.repo.get_unit_from_name(spec.from_unit_name)
            except AppError as err:
                _log.error("failed to get unit from name: %s", err)
                continue
            try:
                self.create_conversion(
                    UnitConversion(to_unit.id, from_unit.id, spec.conversion_factor)
                )
            except AppError as err:
                _log.error("failed to create conversion: %s", err)
        for setup in (self.setup_units_map, self.setup_unit_conversions_map):
            try:
                setup()
            except AppError as err:
                _log.error("failed to set up cache: %s", err)
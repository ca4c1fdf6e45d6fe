"""
field.py

Prime-field element adapter over Python integers.

- FieldConfig: immutable field parameters (prime, gf2n degree). Built once at
  startup, usually with load_field_config(), and passed to every component
  that does field arithmetic.
- FieldElement: reduced residue mod prime with +, -, *, ==, signed view and a
  fixed-width little-endian pack format (prime width rounded up to 64-bit limbs).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .. import constants
from ..errors import ConfigurationError, WireFormatError

LIMB_BYTES = 8


@dataclass(frozen=True)
class FieldConfig:
    prime: int
    gf2n_degree: int = constants.DEFAULTS["GF2N_DEGREE"]

    def __post_init__(self):
        if self.prime < 3:
            raise ConfigurationError(f"Field prime must be an odd prime, got {self.prime}")

    @property
    def element_bytes(self) -> int:
        limbs = (self.prime.bit_length() + 63) // 64
        return limbs * LIMB_BYTES

    def element(self, value: int) -> "FieldElement":
        return FieldElement(value, self)

    def zero(self) -> "FieldElement":
        return FieldElement(0, self)

    def from_signed(self, value: int) -> "FieldElement":
        """Lift a signed integer; negatives map to prime - |value|."""
        if abs(value) > self.prime // 2:
            raise ValueError(f"Signed value {value} does not fit in the field")
        return FieldElement(value, self)

    def unpack(self, buffer: Union[bytes, bytearray, memoryview], offset: int = 0) -> "FieldElement":
        width = self.element_bytes
        end = offset + width
        if end > len(buffer):
            raise WireFormatError(
                f"Buffer underflow: need {width} bytes at offset {offset}, have {len(buffer) - offset}"
            )
        raw = int.from_bytes(bytes(buffer[offset:end]), byteorder="little")
        if raw >= self.prime:
            raise WireFormatError("Encoded element is not reduced modulo the field prime")
        return FieldElement(raw, self)


class FieldElement:
    __slots__ = ("_value", "_field")

    def __init__(self, value: int, field: FieldConfig):
        self._field = field
        self._value = int(value) % field.prime

    @property
    def value(self) -> int:
        return self._value

    @property
    def field(self) -> FieldConfig:
        return self._field

    def _check(self, other: "FieldElement") -> None:
        if not isinstance(other, FieldElement):
            raise TypeError(f"Expected FieldElement, got {type(other).__name__}")
        if other._field.prime != self._field.prime:
            raise ValueError("Cannot combine elements of different fields")

    def __add__(self, other: "FieldElement") -> "FieldElement":
        self._check(other)
        return FieldElement(self._value + other._value, self._field)

    def __sub__(self, other: "FieldElement") -> "FieldElement":
        self._check(other)
        return FieldElement(self._value - other._value, self._field)

    def __mul__(self, other: "FieldElement") -> "FieldElement":
        self._check(other)
        return FieldElement(self._value * other._value, self._field)

    def __neg__(self) -> "FieldElement":
        return FieldElement(-self._value, self._field)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FieldElement):
            return NotImplemented
        return self._field.prime == other._field.prime and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._field.prime, self._value))

    def __repr__(self) -> str:
        # residue is never rendered
        return f"FieldElement(<{self._field.prime.bit_length()}-bit field>)"

    def to_signed(self) -> int:
        p = self._field.prime
        return self._value if self._value <= p // 2 else self._value - p

    def pack(self, buffer: bytearray) -> bytearray:
        buffer.extend(self._value.to_bytes(self._field.element_bytes, byteorder="little"))
        return buffer


def params_file_path(n_parties: int, prep_dir: str = None) -> Path:
    """<prep_dir>/<n>-<prime_bits>-<gf2n_degree>/Params-Data, as laid out by the engines' setup."""
    d = constants.DEFAULTS
    base = Path(prep_dir if prep_dir is not None else d["PREP_DIR"])
    return base / f"{n_parties}-{d['PRIME_BITS']}-{d['GF2N_DEGREE']}" / d["PARAMS_FILE_NAME"]


def load_field_config(path: Union[str, Path]) -> FieldConfig:
    """
    Read the prime modulus and gf2n degree (whitespace separated) from a params file.
    """
    path = Path(path)
    try:
        tokens = path.read_text().split()
    except OSError as e:
        raise ConfigurationError(f"Cannot read field parameters from {path}: {e}") from e
    if len(tokens) < 2:
        raise ConfigurationError(f"Field parameters file {path} must hold a prime and a gf2n degree")
    try:
        prime = int(tokens[0])
        degree = int(tokens[1])
    except ValueError as e:
        raise ConfigurationError(f"Malformed field parameters in {path}: {e}") from e
    return FieldConfig(prime=prime, gf2n_degree=degree)

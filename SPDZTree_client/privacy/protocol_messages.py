"""
protocol_messages.py

Values exchanged with the SPDZ engines once reconstructed on the client side.
"""

from dataclasses import dataclass

from .field import FieldElement


@dataclass(frozen=True)
class Triple:
    a: FieldElement
    b: FieldElement
    c: FieldElement

    def accumulate(self, other: "Triple") -> "Triple":
        """Add another engine's shares to this running sum."""
        return Triple(self.a + other.a, self.b + other.b, self.c + other.c)

    def is_consistent(self) -> bool:
        return self.a * self.b == self.c


@dataclass(frozen=True)
class AuthenticatedResult:
    y: FieldElement  # output value
    r: FieldElement  # random blinding value
    w: FieldElement  # y * r

    def accumulate(self, other: "AuthenticatedResult") -> "AuthenticatedResult":
        return AuthenticatedResult(self.y + other.y, self.r + other.r, self.w + other.w)

    def is_valid(self) -> bool:
        return self.y * self.r == self.w

    @property
    def index(self) -> int:
        return self.y.to_signed()

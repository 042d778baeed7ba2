"""Reed–Solomon codec parameterised by a binary extension field."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import CapacityError, DecodeError, ValidationError
from .field import GaloisField


class ReedSolomon:
    """Systematic RS code with ``ecc_symbols`` parity symbols per block.

    The generator has consecutive roots alpha^0 .. alpha^(t-1). Parity is
    appended after the message, so a codeword is ``message + parity``.
    """

    def __init__(self, field: GaloisField, ecc_symbols: int) -> None:
        if not 1 <= ecc_symbols < field.order - 1:
            raise ValidationError(
                f"ecc_symbols={ecc_symbols} must lie in [1, {field.order - 2}] for GF(2^{field.bits})"
            )
        self.field = field
        self.ecc_symbols = ecc_symbols
        self.max_length = field.order - 1
        self._generator = field.generator_poly(ecc_symbols)

    def _symbols(self, values: Sequence[int]) -> List[int]:
        out = [int(v) for v in values]
        for v in out:
            if not 0 <= v < self.field.order:
                raise ValidationError(f"Symbol {v} is outside GF(2^{self.field.bits})")
        return out

    def encode(self, message: Sequence[int]) -> List[int]:
        """Return the ``ecc_symbols`` parity symbols for ``message``."""

        msg = self._symbols(message)
        if not msg:
            raise ValidationError("Cannot encode an empty message")
        if len(msg) + self.ecc_symbols > self.max_length:
            raise CapacityError(
                f"Block of {len(msg)}+{self.ecc_symbols} symbols exceeds the "
                f"{self.max_length}-symbol limit of GF(2^{self.field.bits})"
            )
        return self.field.poly_remainder(msg + [0] * self.ecc_symbols, self._generator)

    def syndromes(self, codeword: Sequence[int]) -> List[int]:
        return [self.field.poly_eval(codeword, self.field.exp(i)) for i in range(self.ecc_symbols)]

    def decode(self, codeword: Sequence[int]) -> List[int]:
        """Return the corrected codeword or raise :class:`DecodeError`."""

        f = self.field
        t = self.ecc_symbols
        received = self._symbols(codeword)
        n = len(received)
        if n <= t or n > self.max_length:
            raise DecodeError(f"Codeword length {n} is invalid for {t} parity symbols")

        syndromes = self.syndromes(received)
        if not any(syndromes):
            return received

        # syndromes[i] is the coefficient of x^i.
        syndrome_poly = f.polynomial(syndromes[::-1])
        try:
            sigma, omega = f.euclidean(f.monomial(t, 1), syndrome_poly, t)
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc

        num_errors = f.degree(sigma)
        if num_errors > t // 2:
            raise DecodeError(f"Too many errors: locator degree {num_errors} exceeds {t // 2}")

        locations = [f.inv(a) for a in range(1, f.order) if f.poly_eval(sigma, a) == 0]
        if len(locations) != num_errors:
            raise DecodeError(
                f"Error locator has {len(locations)} roots but degree {num_errors}"
            )

        derivative = f.poly_derivative(sigma)
        corrected = list(received)
        for x in locations:
            position = n - 1 - f.log(x)
            if position < 0:
                raise DecodeError("Error location lies outside the codeword")
            x_inv = f.inv(x)
            denominator = f.poly_eval(derivative, x_inv)
            if denominator == 0:
                raise DecodeError("Forney denominator vanished")
            magnitude = f.mul(x, f.div(f.poly_eval(omega, x_inv), denominator))
            corrected[position] ^= magnitude

        if any(self.syndromes(corrected)):
            raise DecodeError("Correction left a non-zero syndrome")
        return corrected

    def decode_message(self, codeword: Sequence[int]) -> List[int]:
        return self.decode(codeword)[: -self.ecc_symbols]


__all__ = ["ReedSolomon"]

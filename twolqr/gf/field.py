"""Element and polynomial arithmetic over binary extension fields GF(2^m)."""

from __future__ import annotations

import functools
from typing import Dict, List, Sequence, Tuple

import numpy as np

# Primitive polynomials per field width; bit `m` is the implicit x^m term.
PRIMITIVES: Dict[int, int] = {
    3: 0b1011,
    8: 0x11D,
    10: 0x409,
}

Poly = List[int]


class GaloisField:
    """GF(2^bits) with log/exp tables and dense polynomial helpers.

    Polynomials are plain lists of field elements ordered from the highest
    degree down to the constant term. Every helper returns the canonical form
    with leading zeros stripped; the zero polynomial is ``[0]``.
    """

    def __init__(self, bits: int, primitive: int) -> None:
        if bits <= 0:
            raise ValueError("Field width must be positive")
        if primitive >> bits != 1:
            raise ValueError(f"Primitive polynomial {primitive:#x} must have degree {bits}")

        self.bits = bits
        self.order = 1 << bits
        self.primitive = primitive
        cycle = self.order - 1

        # exp is doubled so that log(a) + log(b) never needs a modulo.
        exp = np.zeros(2 * cycle, dtype=np.int64)
        log = np.full(self.order, -1, dtype=np.int64)
        x = 1
        for i in range(cycle):
            if log[x] != -1:
                raise ValueError(f"Polynomial {primitive:#x} is not primitive over GF(2^{bits})")
            exp[i] = x
            log[x] = i
            x <<= 1
            if x & self.order:
                x ^= primitive
        exp[cycle:] = exp[:cycle]
        exp.setflags(write=False)
        log.setflags(write=False)

        self.exp_table = exp
        self.log_table = log
        self._exp = exp.tolist()
        self._log = log.tolist()
        self._generators: Dict[int, Tuple[int, ...]] = {}

    def __repr__(self) -> str:
        return f"GaloisField(bits={self.bits}, primitive={self.primitive:#x})"

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------
    def exp(self, power: int) -> int:
        return self._exp[power % (self.order - 1)]

    def log(self, a: int) -> int:
        if a <= 0 or a >= self.order:
            raise ValueError(f"log({a}) is undefined in GF(2^{self.bits})")
        return self._log[a]

    @staticmethod
    def add(a: int, b: int) -> int:
        return a ^ b

    def mul(self, a: int, b: int) -> int:
        if a == 0 or b == 0:
            return 0
        return self._exp[self._log[a] + self._log[b]]

    def inv(self, a: int) -> int:
        if a == 0:
            raise ValueError("0 has no multiplicative inverse")
        return self._exp[self.order - 1 - self._log[a]]

    def div(self, a: int, b: int) -> int:
        return self.mul(a, self.inv(b))

    def pow(self, a: int, power: int) -> int:
        if power == 0:
            return 1
        if a == 0:
            if power < 0:
                raise ValueError("0 cannot be raised to a negative power")
            return 0
        return self._exp[(self.log(a) * power) % (self.order - 1)]

    # ------------------------------------------------------------------
    # Polynomials
    # ------------------------------------------------------------------
    @staticmethod
    def polynomial(coefficients: Sequence[int]) -> Poly:
        """Strip leading zeros; the empty or all-zero input becomes ``[0]``."""

        coeffs = [int(c) for c in coefficients]
        for i, c in enumerate(coeffs):
            if c != 0:
                return coeffs[i:]
        return [0]

    @staticmethod
    def monomial(degree: int, coefficient: int) -> Poly:
        if degree < 0:
            raise ValueError("Monomial degree must be non-negative")
        if coefficient == 0:
            return [0]
        return [coefficient] + [0] * degree

    @staticmethod
    def degree(p: Sequence[int]) -> int:
        return len(p) - 1

    def coefficient(self, p: Sequence[int], degree: int) -> int:
        return p[self.degree(p) - degree]

    def poly_add(self, a: Sequence[int], b: Sequence[int]) -> Poly:
        if len(a) < len(b):
            a, b = b, a
        diff = len(a) - len(b)
        out = list(a[:diff]) + [x ^ y for x, y in zip(a[diff:], b)]
        return self.polynomial(out)

    def poly_mul(self, a: Sequence[int], b: Sequence[int]) -> Poly:
        a = self.polynomial(a)
        b = self.polynomial(b)
        if a[0] == 0 or b[0] == 0:
            return [0]
        out = [0] * (len(a) + len(b) - 1)
        for i, x in enumerate(a):
            if x == 0:
                continue
            for j, y in enumerate(b):
                out[i + j] ^= self.mul(x, y)
        return self.polynomial(out)

    def poly_scale(self, p: Sequence[int], scalar: int) -> Poly:
        if scalar == 0:
            return [0]
        return self.polynomial([self.mul(c, scalar) for c in p])

    def poly_mul_monomial(self, p: Sequence[int], degree: int, coefficient: int) -> Poly:
        if degree < 0:
            raise ValueError("Monomial degree must be non-negative")
        if coefficient == 0:
            return [0]
        return self.polynomial([self.mul(c, coefficient) for c in p] + [0] * degree)

    def poly_remainder(self, dividend: Sequence[int], divisor: Sequence[int]) -> Poly:
        """Remainder of long division, returned with exactly ``deg(divisor)`` terms."""

        divisor = self.polynomial(divisor)
        if divisor[0] == 0:
            raise ValueError("Division by the zero polynomial")
        out = [int(c) for c in dividend]
        lead_inv = self.inv(divisor[0])
        steps = len(out) - len(divisor) + 1
        for i in range(max(steps, 0)):
            factor = self.mul(out[i], lead_inv)
            if factor == 0:
                continue
            for j in range(1, len(divisor)):
                if divisor[j]:
                    out[i + j] ^= self.mul(divisor[j], factor)
        rem_len = len(divisor) - 1
        tail = out[len(out) - rem_len :] if rem_len else []
        return [0] * (rem_len - len(tail)) + tail

    def poly_eval(self, p: Sequence[int], x: int) -> int:
        if x == 0:
            return int(p[-1])
        acc = 0
        for c in p:
            acc = self.mul(acc, x) ^ int(c)
        return acc

    def poly_derivative(self, p: Sequence[int]) -> Poly:
        """Formal derivative; in characteristic two only odd powers survive."""

        n = self.degree(p)
        if n <= 0:
            return [0]
        return self.polynomial([c if (n - k) % 2 else 0 for k, c in enumerate(p[:-1])])

    def generator_poly(self, degree: int) -> Poly:
        """Return prod(x - alpha^i) for i in [0, degree)."""

        if degree < 0:
            raise ValueError("Generator degree must be non-negative")
        cached = self._generators.get(degree)
        if cached is None:
            g: Poly = [1]
            for i in range(degree):
                g = self.poly_mul(g, [1, self.exp(i)])
            cached = tuple(g)
            self._generators[degree] = cached
        return list(cached)

    def euclidean(self, a: Sequence[int], b: Sequence[int], limit: int) -> Tuple[Poly, Poly]:
        """Extended Euclid until ``2 * deg(r) < limit``.

        Returns the error locator and error evaluator, both scaled so that the
        locator's constant term is one.
        """

        a = self.polynomial(a)
        b = self.polynomial(b)
        if self.degree(a) < self.degree(b):
            a, b = b, a
        r_last, r = a, b
        t_last, t = [0], [1]
        while 2 * self.degree(r) >= limit:
            r_last_last, t_last_last = r_last, t_last
            r_last, t_last = r, t
            if r_last[0] == 0:
                raise ValueError("Euclidean step reached a zero remainder")
            r = r_last_last
            q: Poly = [0]
            lead_inv = self.inv(r_last[0])
            while self.degree(r) >= self.degree(r_last) and r[0] != 0:
                shift = self.degree(r) - self.degree(r_last)
                scale = self.mul(r[0], lead_inv)
                q = self.poly_add(q, self.monomial(shift, scale))
                r = self.poly_add(r, self.poly_mul_monomial(r_last, shift, scale))
            t = self.poly_add(self.poly_mul(q, t_last), t_last_last)
            if self.degree(r) >= self.degree(r_last):
                raise ValueError("Euclidean division did not reduce the remainder degree")

        sigma_at_zero = self.coefficient(t, 0)
        if sigma_at_zero == 0:
            raise ValueError("Error locator has a zero constant term")
        inverse = self.inv(sigma_at_zero)
        return self.poly_scale(t, inverse), self.poly_scale(r, inverse)


@functools.lru_cache(maxsize=None)
def get_field(bits: int) -> GaloisField:
    """Return the shared field instance for GF(2^bits)."""

    try:
        primitive = PRIMITIVES[bits]
    except KeyError:
        raise ValueError(f"No primitive polynomial registered for GF(2^{bits})") from None
    return GaloisField(bits, primitive)


GF8 = get_field(3)
GF256 = get_field(8)
GF1024 = get_field(10)


__all__ = ["GaloisField", "PRIMITIVES", "Poly", "get_field", "GF8", "GF256", "GF1024"]

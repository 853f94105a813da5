"""Scalar complex arithmetic for the escape-time recurrence.

These are the public per-point API: classify a single point without building a
buffer. They also serve as the reference for the vectorized kernel in
:mod:`multibrot.renderer`, which does not call them but performs the same
real/imaginary operations in the same order, so the two agree bit for bit.
"""

from __future__ import annotations


def complex_power(z: complex, exponent: int) -> complex:
    """Return ``z ** exponent`` by repeated multiplication.

    ``exponent - 1`` multiplications are performed. ``z ** 0`` is ``1`` for
    every ``z``, including zero.
    """

    if exponent < 0:
        raise ValueError(f"exponent must be non-negative, got {exponent}")
    if exponent == 0:
        return complex(1.0, 0.0)

    z_real, z_imag = z.real, z.imag
    w_real, w_imag = z_real, z_imag
    for _ in range(exponent - 1):
        w_real, w_imag = z_real * w_real - z_imag * w_imag, z_real * w_imag + z_imag * w_real
    return complex(w_real, w_imag)


def squared_magnitude(z: complex) -> float:
    return z.real * z.real + z.imag * z.imag


def escapes(c: complex, iterations: int, exponent: int, escape_radius: float) -> bool:
    """Whether the orbit of ``c`` leaves the escape radius.

    The orbit is seeded at ``z = c`` and iterated as ``z <- z**exponent + c``.
    After every step ``|z|**2`` is compared with ``escape_radius**2``; a point
    exactly on the radius has not escaped.
    """

    limit = escape_radius * escape_radius
    z = c
    for _ in range(iterations):
        z = complex_power(z, exponent) + c
        if squared_magnitude(z) > limit:
            return True
    return False

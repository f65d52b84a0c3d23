"""Unique code generation for QR code URLs.

Codes are fixed-length strings drawn uniformly from an alphabet
(``A-Z0-9`` by default). A batch is unique against a caller-supplied
snapshot of already issued codes and against itself.

Flow Diagram — UniqueCodeGenerator.generate()
=============================================
::
    ┌─────────────┐
    │ count,       │
    │ existing     │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Validate     │──── bad ───▶ InvalidCountError
    │ count        │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Enough free  │──── no ────▶ CodeSpaceExhaustedError
    │ codes left?  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Draw code    │◀──────────┐
    └──────┬──────┘           │
    SEEN?  │                  │
    ┌──────┴─────┐            │
    │ YES         │ NO        │
    ▼             ▼           │
┌─────────┐  ┌─────────┐      │
│ retries │  │ Accept  │──────┘ (until count reached)
│ += 1    │  │         │
└────┬────┘  └─────────┘
     │ > max_retries
     ▼
  CodeSpaceExhaustedError

How to Use
===========
**Step 1 — Secure defaults (nanoid)**::
    generator = UniqueCodeGenerator()
    codes = generator.generate(100, existing_codes={"AAAAAAAAAA"})

**Step 2 — Deterministic draws for tests**::
    generator = UniqueCodeGenerator(rng=random.Random(42))

**Step 3 — One-shot helper**::
    codes = generate_unique_codes(5, set())

Key Behaviours
===============
- Without an injected ``random.Random`` draws go through nanoid, which
  uses the OS CSPRNG; no process-wide random state is touched.
- The generator keeps no memory between calls.
- ``count == 0`` returns ``[]`` without drawing.
- ``max_retries`` bounds consecutive rejected draws for one slot.

Classes:
    UniqueCodeGenerator:  Rejection-sampling generator.
    InvalidCountError:  Raised for negative or non-integer counts.
    CodeSpaceExhaustedError:  Raised when no fresh code can be found.

Functions:
    generate_unique_codes():  Convenience wrapper over UniqueCodeGenerator.
    is_valid_code():  Shape check against length and alphabet.
"""

import random
from collections.abc import Collection, Iterable
from typing import Optional

from nanoid import generate

from qrcode_urls.config import DEFAULT_ALPHABET

__all__ = [
    "CODE_ALPHABET",
    "CODE_LENGTH",
    "DEFAULT_MAX_RETRIES",
    "CodeSpaceExhaustedError",
    "InvalidCountError",
    "UniqueCodeGenerator",
    "generate_unique_codes",
    "is_valid_code",
    "validate_count",
]

CODE_ALPHABET = DEFAULT_ALPHABET
CODE_LENGTH = 10
DEFAULT_MAX_RETRIES = 1000


class InvalidCountError(ValueError):
    """Requested number of codes is negative or not an integer."""


class CodeSpaceExhaustedError(RuntimeError):
    """No fresh code could be produced within the retry ceiling."""


def is_valid_code(code: str, length: int = CODE_LENGTH, alphabet: str = CODE_ALPHABET) -> bool:
    return len(code) == length and set(code) <= set(alphabet)


class UniqueCodeGenerator:
    """Rejection-sampling generator of batch-unique codes.

    Args:
        length: Number of symbols per code.
        alphabet: Symbols to draw from; must be non-empty and duplicate-free.
        rng: Optional seedable random source. ``None`` uses nanoid.
        max_retries: Consecutive rejected draws allowed for one slot.

    Raises:
        ValueError: If any argument is out of range.
    """

    def __init__(
        self,
        length: int = CODE_LENGTH,
        alphabet: str = CODE_ALPHABET,
        rng: Optional[random.Random] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        if length < 1:
            raise ValueError(f"length must be positive, got {length!r}")
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must not contain duplicate symbols")
        if max_retries < 1:
            raise ValueError(f"max_retries must be positive, got {max_retries!r}")
        self.length = length
        self.alphabet = alphabet
        self._symbols = frozenset(alphabet)
        self.rng = rng
        self.max_retries = max_retries

    @property
    def space_size(self) -> int:
        """Number of distinct codes this generator can produce."""
        return len(self.alphabet) ** self.length

    def draw(self) -> str:
        """Draw one uniformly random code, ignoring uniqueness."""
        if len(self.alphabet) == 1:
            # nanoid cannot build its bit mask for a one-symbol alphabet
            return self.alphabet * self.length
        if self.rng is None:
            return generate(self.alphabet, self.length)
        return "".join(self.rng.choices(self.alphabet, k=self.length))

    def is_valid(self, code: str) -> bool:
        return len(code) == self.length and self._symbols.issuperset(code)

    def generate(self, count: int, existing_codes: Collection[str] = frozenset()) -> list[str]:
        """Generate ``count`` codes unique against ``existing_codes`` and each other.

        Args:
            count: Number of codes wanted (>= 0).
            existing_codes: Snapshot of codes already issued. Membership is
                checked against it directly, so pass a set for large inputs.

        Returns:
            list[str]: Codes in the order they were accepted.

        Raises:
            InvalidCountError: If count is negative or not an integer.
            CodeSpaceExhaustedError: If the free code space is smaller than
                count, or a slot exceeds ``max_retries`` rejected draws.
        """
        validate_count(count)
        if count == 0:
            return []

        taken = existing_codes if isinstance(existing_codes, (set, frozenset)) else set(existing_codes)
        # Only malformed snapshot entries can make len(taken) overstate what is used.
        if self.space_size - len(taken) < count:
            available = self.space_size - sum(1 for code in taken if self.is_valid(code))
            if count > available:
                raise CodeSpaceExhaustedError(
                    f"Requested {count} codes but only {available} unused codes remain"
                )

        accepted: set[str] = set()
        codes: list[str] = []
        while len(codes) < count:
            codes.append(self._draw_fresh(taken, accepted))
        return codes

    def _draw_fresh(self, taken: Collection[str], accepted: set[str]) -> str:
        for _ in range(self.max_retries + 1):
            code = self.draw()
            if code not in taken and code not in accepted:
                accepted.add(code)
                return code
        raise CodeSpaceExhaustedError(
            f"No unused code found after {self.max_retries} retries "
            f"({len(accepted)} codes accepted so far)"
        )


def validate_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidCountError(f"count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidCountError(f"count must be non-negative, got {count}")


def generate_unique_codes(
    count: int,
    existing_codes: Iterable[str] = (),
    *,
    rng: Optional[random.Random] = None,
    length: int = CODE_LENGTH,
    alphabet: str = CODE_ALPHABET,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> list[str]:
    generator = UniqueCodeGenerator(length=length, alphabet=alphabet, rng=rng, max_retries=max_retries)
    return generator.generate(count, set(existing_codes))

"""Unit tests for unique code generation and URL formatting."""

import random
import re
from unittest.mock import Mock, patch

import pytest

from qrcode_urls.codes import (
    CODE_ALPHABET,
    CODE_LENGTH,
    CodeSpaceExhaustedError,
    InvalidCountError,
    UniqueCodeGenerator,
    generate_unique_codes,
    is_valid_code,
)
from qrcode_urls.urls import DEFAULT_BASE_PATH, build_full_url

CODE_PATTERN = re.compile(r"^[A-Z0-9]{10}$")


class ConstantRandom(random.Random):
    """Random source that always yields the first alphabet symbol."""

    def __init__(self) -> None:
        super().__init__(0)
        self.calls = 0

    def choices(self, population, weights=None, *, cum_weights=None, k=1):
        self.calls += 1
        return [population[0]] * k


# ============================================================================
# CONTRACT
# ============================================================================


def test_alphabet_is_uppercase_and_digits() -> None:
    assert CODE_ALPHABET == "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    assert CODE_LENGTH == 10


@pytest.mark.parametrize("count", [1, 7, 250])
def test_generate_returns_exact_count(count: int) -> None:
    codes = UniqueCodeGenerator(rng=random.Random(count)).generate(count, set())
    assert len(codes) == count


def test_generated_codes_match_character_class() -> None:
    codes = UniqueCodeGenerator(rng=random.Random(1)).generate(500, set())
    assert all(CODE_PATTERN.match(code) for code in codes)


def test_generated_codes_are_pairwise_distinct() -> None:
    codes = UniqueCodeGenerator(rng=random.Random(2)).generate(2000, set())
    assert len(set(codes)) == len(codes)


def test_generated_codes_avoid_existing() -> None:
    rng = random.Random(3)
    existing = {"".join(rng.choices(CODE_ALPHABET, k=10)) for _ in range(100)}

    # Same seed, so the first draws collide with the snapshot.
    codes = UniqueCodeGenerator(rng=random.Random(3)).generate(200, existing)

    assert len(codes) == 200
    assert existing.isdisjoint(codes)


def test_zero_count_returns_empty_without_drawing() -> None:
    rng = Mock(spec=random.Random)
    assert UniqueCodeGenerator(rng=rng).generate(0, {"AAAAAAAAAA"}) == []
    rng.choices.assert_not_called()


def test_default_source_uses_nanoid() -> None:
    codes = UniqueCodeGenerator().generate(50, set())
    assert len(set(codes)) == 50
    assert all(CODE_PATTERN.match(code) for code in codes)


# ============================================================================
# DETERMINISM AND STATELESSNESS
# ============================================================================


def test_same_seed_produces_same_codes() -> None:
    first = UniqueCodeGenerator(rng=random.Random(42)).generate(20, set())
    second = UniqueCodeGenerator(rng=random.Random(42)).generate(20, set())
    assert first == second


def test_generator_keeps_no_state_between_calls() -> None:
    rng = random.Random(99)
    generator = UniqueCodeGenerator(rng=rng)
    first = generator.generate(10, {"AAAAAAAAAA"})

    rng.seed(99)
    second = generator.generate(10, {"ZZZZZZZZZZ"})

    # Nothing remembers the first batch, so the reseeded call repeats it.
    assert first == second


# ============================================================================
# INVALID INPUT
# ============================================================================


@pytest.mark.parametrize("count", [-1, -1000])
def test_negative_count_rejected(count: int) -> None:
    with pytest.raises(InvalidCountError, match="non-negative"):
        UniqueCodeGenerator().generate(count, set())


@pytest.mark.parametrize("count", [1.5, "3", True, None])
def test_non_integer_count_rejected(count: object) -> None:
    with pytest.raises(InvalidCountError, match="integer"):
        UniqueCodeGenerator().generate(count, set())  # type: ignore[arg-type]


def test_invalid_count_error_is_value_error() -> None:
    assert issubclass(InvalidCountError, ValueError)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"length": 0},
        {"alphabet": ""},
        {"alphabet": "AAB"},
        {"max_retries": 0},
    ],
)
def test_generator_rejects_bad_configuration(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        UniqueCodeGenerator(**kwargs)


# ============================================================================
# SMALL CODE SPACES AND THE RETRY CEILING
# ============================================================================


def test_tiny_alphabet_fills_whole_space() -> None:
    generator = UniqueCodeGenerator(length=2, alphabet="AB", rng=random.Random(5))
    assert sorted(generator.generate(4, set())) == ["AA", "AB", "BA", "BB"]


def test_tiny_alphabet_returns_only_remaining_code() -> None:
    generator = UniqueCodeGenerator(length=2, alphabet="AB", rng=random.Random(6))
    assert generator.generate(1, {"AA", "AB", "BA"}) == ["BB"]


def test_request_larger_than_free_space_fails_fast() -> None:
    rng = Mock(spec=random.Random)
    generator = UniqueCodeGenerator(length=1, alphabet="AB", rng=rng)

    with pytest.raises(CodeSpaceExhaustedError, match="only 1 unused"):
        generator.generate(2, {"A"})
    rng.choices.assert_not_called()


def test_malformed_existing_codes_do_not_shrink_space() -> None:
    generator = UniqueCodeGenerator(length=1, alphabet="AB", rng=random.Random(7))
    assert generator.generate(1, {"A", "zz", "ABC"}) == ["B"]


def test_snapshot_not_rescanned_when_space_is_ample() -> None:
    existing = {f"{i:010d}" for i in range(1000)}
    generator = UniqueCodeGenerator(rng=random.Random(11))

    with patch.object(UniqueCodeGenerator, "is_valid") as is_valid:
        codes = generator.generate(10, existing)

    is_valid.assert_not_called()
    assert existing.isdisjoint(codes)


def test_retry_ceiling_stops_degenerate_source() -> None:
    rng = ConstantRandom()
    generator = UniqueCodeGenerator(length=2, alphabet="AB", rng=rng, max_retries=5)

    with pytest.raises(CodeSpaceExhaustedError, match="after 5 retries"):
        generator.generate(1, {"AA"})
    assert rng.calls == 6


def test_retry_ceiling_counts_batch_collisions() -> None:
    generator = UniqueCodeGenerator(length=2, alphabet="AB", rng=ConstantRandom(), max_retries=3)

    with pytest.raises(CodeSpaceExhaustedError, match="1 codes accepted"):
        generator.generate(2, set())


# ============================================================================
# HELPERS
# ============================================================================


def test_generate_unique_codes_accepts_any_iterable() -> None:
    codes = generate_unique_codes(2, ["AA", "AB"], rng=random.Random(8), length=2, alphabet="AB")
    assert sorted(codes) == ["BA", "BB"]


def test_is_valid_code() -> None:
    assert is_valid_code("AB12CD34EF")
    assert not is_valid_code("ab12cd34ef")
    assert not is_valid_code("AB12CD34E")
    assert not is_valid_code("AB12-D34EF")


def test_build_full_url_concatenates_without_separator() -> None:
    assert build_full_url("AB12CD34EF") == "https://yourdomain.com/QR/AB12CD34EF"
    assert build_full_url("AB12CD34EF") == DEFAULT_BASE_PATH + "AB12CD34EF"
    assert build_full_url("AB12CD34EF", "https://qr.example/s") == "https://qr.example/sAB12CD34EF"


@pytest.mark.slow
def test_five_million_codes_avoid_single_existing_code() -> None:
    codes = UniqueCodeGenerator(rng=random.Random(2024)).generate(5_000_000, {"AAAAAAAAAA"})
    assert len(codes) == 5_000_000
    assert len(set(codes)) == 5_000_000
    assert "AAAAAAAAAA" not in codes

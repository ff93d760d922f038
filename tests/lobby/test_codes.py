"""
Tests for lobby code generation and normalization.
"""

import random

import pytest

from durak_online.lobby.codes import (
    LOBBY_CODE_ALPHABET,
    LOBBY_CODE_LENGTH,
    generate_lobby_code,
    normalize_lobby_code,
)


def test_code_shape():
    code = generate_lobby_code(rng=random.Random(1))
    assert len(code) == LOBBY_CODE_LENGTH
    assert all(ch in LOBBY_CODE_ALPHABET for ch in code)


def test_alphabet_has_no_confusable_characters():
    for ch in "IO01":
        assert ch not in LOBBY_CODE_ALPHABET


def test_codes_are_seeded():
    assert generate_lobby_code(rng=random.Random(9)) == generate_lobby_code(
        rng=random.Random(9)
    )


def test_collision_is_regenerated():
    taken = generate_lobby_code(rng=random.Random(4))
    code = generate_lobby_code(existing={taken}, rng=random.Random(4))
    assert code != taken


def test_custom_length():
    assert len(generate_lobby_code(length=4)) == 4


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("abc123", "ABC123"),
        ("  xyz789\n", "XYZ789"),
        ("", ""),
        (None, ""),
        (123456, "123456"),
    ],
)
def test_normalize(raw, expected):
    assert normalize_lobby_code(raw) == expected

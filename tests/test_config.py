import pytest

from config import InterpreterConfig


def test_default_config_is_32_bit():
    config = InterpreterConfig()
    assert config.word_size == 32
    assert config.max_steps is None
    assert config.entry_point == "main"


@pytest.mark.parametrize(
    "word_size, value, expected",
    [
        (32, 2147483647, 2147483647),
        (32, 2147483648, -2147483648),
        (32, -2147483649, 2147483647),
        (8, 127, 127),
        (8, 128, -128),
        (8, 255, -1),
        (8, 256, 0),
    ],
)
def test_wrap_two_complement(word_size, value, expected):
    assert InterpreterConfig(word_size=word_size).wrap(value) == expected


def test_from_mapping_ignores_none_and_rejects_unknown_keys():
    config = InterpreterConfig.from_mapping({"word_size": 8, "max_steps": None})
    assert config.word_size == 8
    assert config.max_steps is None

    with pytest.raises(ValueError):
        InterpreterConfig.from_mapping({"wordsize": 8})


@pytest.mark.parametrize(
    "kwargs", [{"word_size": 1}, {"max_steps": -1}, {"entry_point": ""}]
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        InterpreterConfig(**kwargs)

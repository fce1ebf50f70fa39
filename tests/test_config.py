import pytest
from pydantic import ValidationError

from src.poolroute.config import Settings


def test_order_base_defaults_to_one():
    assert Settings().order_base == 1


def test_order_base_accepts_zero():
    assert Settings(order_base=0).order_base == 0


@pytest.mark.parametrize("value", [-1, 2])
def test_order_base_rejects_other_values(value: int):
    with pytest.raises(ValidationError):
        Settings(order_base=value)

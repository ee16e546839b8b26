import asyncio

import pytest

from roadside.core.exceptions import ValidationError
from roadside.utils.concurrency import gather_or_raise


async def value(result, delay=0):
    await asyncio.sleep(delay)
    return result


@pytest.mark.unit
async def test_results_in_argument_order():
    assert await gather_or_raise(value("slow", 0.01), value("fast")) == ["slow", "fast"]


@pytest.mark.unit
async def test_first_failure_raised_after_siblings_finish():
    finished = []

    async def invalid():
        raise ValidationError("bad coordinates")

    async def also_failing():
        await asyncio.sleep(0)
        finished.append("sibling")
        raise RuntimeError("sibling failed too")

    with pytest.raises(ValidationError):
        await gather_or_raise(invalid(), also_failing())

    assert finished == ["sibling"]


@pytest.mark.unit
async def test_no_tasks():
    assert await gather_or_raise() == []


import asyncio


async def gather_or_raise(*aws):
    """Run awaitables concurrently and re-raise the first failure in argument order.

    Every awaitable runs to completion and every exception is retrieved, so a
    sibling failing alongside the first one is never left unobserved.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results

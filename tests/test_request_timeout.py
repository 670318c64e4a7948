# tests/test_request_timeout.py
import asyncio

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middlewares.request_timeout import RequestTimeoutMiddleware


def _app(timeout):
    app = FastAPI()
    app.add_middleware(RequestTimeoutMiddleware, timeout=timeout, message="The request took too long to complete")

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(1)
        return {"done": True}

    @app.get("/fast")
    async def fast():
        return {"done": True}

    return app


@pytest.mark.asyncio
async def test_slow_request_gets_504():
    async with AsyncClient(transport=ASGITransport(app=_app(0.05)), base_url="http://testserver") as ac:
        res = await ac.get("/slow")

    assert res.status_code == 504
    assert res.json() == {"error": "The request took too long to complete"}


@pytest.mark.asyncio
async def test_fast_request_passes_through():
    async with AsyncClient(transport=ASGITransport(app=_app(5)), base_url="http://testserver") as ac:
        res = await ac.get("/fast")

    assert res.status_code == 200
    assert res.json() == {"done": True}

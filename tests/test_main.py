# tests/test_main.py
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_read_root_endpoint(async_client: AsyncClient):
    """Test the root endpoint."""
    response = await async_client.get("/")
    assert response.status_code == 200
    assert response.json() == {"msg": "Welcome to Maintenix!"}


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient):
    response = await async_client.get("/health-check")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_metrics_endpoint_exposed(async_client: AsyncClient):
    await async_client.get("/health-check")
    response = await async_client.get("/metrics")
    assert response.status_code == 200
    assert "inprogress_requests" in response.text


@pytest.mark.asyncio
async def test_app_state_is_wired(app):
    """Shared collaborators are built once per app."""
    assert app.state.session_factory is not None
    assert app.state.rate_limiter.clock is app.state.clock
    assert app.state.password_reset_settings.OTP_EXPIRE_MINUTES == 10

"""Tests for the standalone seed script."""

import importlib.util
from pathlib import Path

import pytest

from crm_tenancy.common.database import DatabaseManager

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "seed_default_tenant.py"


@pytest.fixture
def seed_module(tmp_path, monkeypatch):
    monkeypatch.setenv("TENANCY_DB_URL", f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    monkeypatch.setenv("TENANCY_DEFAULT_TENANT_ID", "default")
    from crm_tenancy.common.config import get_settings
    get_settings.cache_clear()
    spec = importlib.util.spec_from_file_location("seed_default_tenant", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    yield module
    get_settings.cache_clear()


@pytest.fixture
def closed(seed_module, monkeypatch):
    calls = []

    class TrackingManager(DatabaseManager):
        async def close(self):
            calls.append(self)
            await super().close()

    monkeypatch.setattr(seed_module, "DatabaseManager", TrackingManager)
    return calls


class TestSeedScript:
    async def test_seeds_then_skips(self, seed_module, closed, capsys):
        await seed_module.seed()
        await seed_module.seed()
        out = capsys.readouterr().out
        assert "[ready] default tenant default" in out
        assert "[created] basic plan template" in out
        assert "[skip] basic plan template already exists" in out
        assert len(closed) == 2

    async def test_engine_closed_on_failure(self, seed_module, closed, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("seed failed")

        monkeypatch.setattr(seed_module, "ensure_default_tenant", broken)
        with pytest.raises(RuntimeError, match="seed failed"):
            await seed_module.seed()
        assert len(closed) == 1
        assert closed[0].engine is None

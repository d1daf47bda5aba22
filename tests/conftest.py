from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from oni_med.data_manager import InventarioStore, restablecer_store  # noqa: E402
from oni_med.storage import AlmacenJSON  # noqa: E402


@pytest.fixture()
def store(tmp_path):
    return InventarioStore(AlmacenJSON(tmp_path / "data"), tmp_path / "exports")


@pytest.fixture()
def store_por_defecto(tmp_path, monkeypatch):
    monkeypatch.setenv("ONI_MED_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("ONI_MED_EXPORT_DIR", raising=False)
    restablecer_store()
    yield tmp_path / "data"
    restablecer_store()


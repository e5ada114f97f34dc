from __future__ import annotations

import pytest


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'bedfinder.db'}"

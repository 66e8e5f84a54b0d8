import io
import json
import os
import pytest

import sys, pathlib
ROOT = pathlib.Path(__file__).resolve().parents[1]          #Project repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

ORDERS_CSV = (
    "Name,Created at,Subtotal,Shipping,Total,Lineitem quantity,Lineitem name\n"
    "#1001,2025-12-26 18:48:00 -0500,60.00,5.00,66.81,2,Classic Tee - Black / Large\n"
    "#1001,,,,,1,Classic Tee - Heather White / SM\n"
    "#1002,2025-12-27 09:15:00 -0500,30.00,0.00,35.80,1,Hoodie - Storm Blue / XL\n"
    "#1003,2025-12-28 11:00:00 -0500,25.00,4.00,29.00,1,Classic Tee - Navy / M\n"
    "#1003,,,,,3,Sticker Pack\n"
    "#1003,,,,,abc,Shipping Protection\n"
)

SHIPPING_CSV = (
    "Order name,Shipping charge\n"
    "#1001,$7.25\n"
    "1002,$4.10\n"
    "#1003,n/a\n"
)


@pytest.fixture
def orders_csv_text():
    return ORDERS_CSV


@pytest.fixture
def orders_records():
    """The ORDERS_CSV rows as the reader would return them."""
    from core.reader import read_records
    _, records = read_records(io.StringIO(ORDERS_CSV))
    return records


@pytest.fixture
def app_module(tmp_path, monkeypatch):
    import app as app_mod

    # Redirect upload/output dirs to tmp
    monkeypatch.setattr(app_mod, "UPLOAD_FOLDER", str(tmp_path / "uploads"), raising=False)
    monkeypatch.setattr(app_mod, "OUTPUT_FOLDER", str(tmp_path / "outputs"), raising=False)
    os.makedirs(app_mod.UPLOAD_FOLDER, exist_ok=True)
    os.makedirs(app_mod.OUTPUT_FOLDER, exist_ok=True)

    def fake_render_template(template_name, **ctx):
        return f"TEMPLATE:{template_name}|CTX:{json.dumps(ctx, default=str)}"
    monkeypatch.setattr(app_mod, "render_template", fake_render_template, raising=True)

    return app_mod

@pytest.fixture
def client(app_module):
    app = app_module.app
    app.config.update(TESTING=True)
    return app.test_client()

# Reusable in-memory uploads
@pytest.fixture
def orders_file():
    return io.BytesIO(ORDERS_CSV.encode("utf-8"))

@pytest.fixture
def shipping_file():
    return io.BytesIO(SHIPPING_CSV.encode("utf-8"))

@pytest.fixture
def stub_writer(monkeypatch):
    def fake_write_to_excel(data, rows, stats, path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(b"XLSX")
    monkeypatch.setattr("app.write_to_excel", fake_write_to_excel)

def pytest_addoption(parser):
    parser.addoption(
        "--update-golden",
        action="store_true",
        default=False,
        help="Update expected golden export files"
    )

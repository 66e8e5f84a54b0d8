from flask import (
    Flask,
    request,
    jsonify,
    send_file,
    render_template,
    flash,
    redirect,
    url_for,
)
from werkzeug.utils import secure_filename
import io
import json
import os
import logging
from datetime import datetime

# Import project modules
from core.reader import read_records, CSVReadError
from core.parser import parse_orders
from core.aggregator import aggregate_data, quick_stats
from core.shipping import resolve_shipping_costs
from core.earnings import process_orders, earnings_stats
from core.checklist import toggle_cell, progress_stats
from core.validator import run_qa_checks
from excel_io.csv_export import export_inventory_csv, export_filename
from excel_io.excel_writer import write_to_excel
from core.logging_config import setup_logging

# -----------------------------------------------------------------------------
# App & logging setup
# -----------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024  # 16MB max upload

ALLOWED_EXTENSIONS = {"csv"}
UPLOAD_FOLDER = "temp_uploads"
OUTPUT_FOLDER = "temp_outputs"

DEFAULT_FEE_PERCENT = os.environ.get("FEE_PERCENT", "2.9")
DEFAULT_FEE_FIXED = os.environ.get("FEE_FIXED", "0.30")

os.makedirs(UPLOAD_FOLDER, exist_ok=True)
os.makedirs(OUTPUT_FOLDER, exist_ok=True)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class UploadError(ValueError):
    """The request did not carry a usable CSV upload."""


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def allowed_file(filename: str) -> bool:
    """
    Check whether the uploaded filename has an allowed extension.

    Args:
        filename: The original filename from the upload.

    Returns:
        True if the extension is in the allowed set (currently CSV); otherwise False.
    """
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def save_upload(field: str, required: bool = True):
    """
    Validate and save an uploaded CSV from the current request.

    Args:
        field: Form field name holding the file.
        required: Raise when the field is missing or empty.

    Returns:
        The saved path, or None for an absent optional upload.

    Raises:
        UploadError: Missing required file or non-CSV filename.
    """
    file = request.files.get(field)
    if file is None or file.filename == "":
        if required:
            raise UploadError("No file selected" if file is not None else "No file uploaded")
        return None
    if not allowed_file(file.filename):
        raise UploadError("Only CSV files are allowed")

    filename = secure_filename(file.filename)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = os.path.join(UPLOAD_FOLDER, f"{timestamp}_{field}_{filename}")
    file.save(path)
    logger.info(f"Saved uploaded file to: {path}")
    return path


def remove_quietly(*paths) -> None:
    for p in paths:
        if not p:
            continue
        try:
            os.remove(p)
        except OSError:
            logger.warning(f"Could not remove uploaded file: {p}")


def import_orders(csv_path: str):
    """
    Read an orders export and build its line items, orders and pivots.

    Args:
        csv_path: Path to the orders CSV.

    Returns:
        A tuple of (columns, parse result, aggregated data).

    Raises:
        CSVReadError: If the file cannot be read as CSV at all.
    """
    columns, records = read_records(csv_path)
    result = parse_orders(records)
    data = aggregate_data(result.items, result.orders)
    logger.info(
        f"Imported {result.rows_read} rows: {len(result.items)} items, "
        f"{len(result.orders)} orders, {data.grand_total} pieces"
    )
    return columns, result, data


def load_shipping_costs(csv_path):
    """Shipping cost lookup from an optional shipping CSV; {} when none was uploaded."""
    if not csv_path:
        return {}
    columns, records = read_records(csv_path)
    return resolve_shipping_costs(columns, records)


def earnings_from_form(data, shipping_costs):
    """
    Run the earnings calculation with fee, cost and sort inputs from the form.

    A blank or absent shipping field means "use the shipping file".
    """
    form = request.form
    shipping = form.get("shipping_cost")
    if shipping is not None and shipping.strip() == "":
        shipping = None
    rows = process_orders(
        data.orders,
        form.get("fee_percent", DEFAULT_FEE_PERCENT),
        form.get("fee_fixed", DEFAULT_FEE_FIXED),
        shipping_costs,
        sort_field=form.get("sort_field", "net"),
        direction=form.get("sort_direction", "desc"),
    )
    stats = earnings_stats(rows, shipping, form.get("blank_costs", "0"))
    return rows, stats


def checked_from_form():
    """Parse the checklist JSON object from the "checked" form field."""
    raw = request.form.get("checked", "")
    if not raw.strip():
        return {}
    try:
        checked = json.loads(raw)
    except json.JSONDecodeError as e:
        raise UploadError(f"Invalid checklist JSON: {e}") from e
    if not isinstance(checked, dict):
        raise UploadError("Checklist must be a JSON object")
    return checked


def build_workbook():
    """
    Shared body of /convert and /api/convert.

    Returns:
        A tuple of (excel filename, excel path, aggregated data, earnings stats).
    """
    orders_path = save_upload("file")
    shipping_path = None
    try:
        shipping_path = save_upload("shipping_file", required=False)
        _, _, data = import_orders(orders_path)
        rows, stats = earnings_from_form(data, load_shipping_costs(shipping_path))

        base = os.path.basename(orders_path).rsplit(".", 1)[0]
        excel_filename = f"{base}_report.xlsx"
        excel_path = os.path.join(OUTPUT_FOLDER, excel_filename)
        write_to_excel(data, rows, stats, excel_path)
        logger.info(f"Created Excel file: {excel_path}")
        return excel_filename, excel_path, data, stats
    finally:
        remove_quietly(orders_path, shipping_path)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@app.route("/")
def index():
    """
    Render the main upload page.

    Returns:
        HTML response for the upload form.
    """
    return render_template(
        "index.html",
        fee_percent=DEFAULT_FEE_PERCENT,
        fee_fixed=DEFAULT_FEE_FIXED,
    )


@app.route("/convert", methods=["POST"])
def convert_orders():
    """
    Build the inventory / earnings workbook from the web form.

    Returns:
        A file download response, or a redirect back to the index with a
        flashed message when anything goes wrong.
    """
    try:
        excel_filename, excel_path, _, _ = build_workbook()
        return send_file(
            excel_path,
            as_attachment=True,
            download_name=excel_filename,
            mimetype=XLSX_MIMETYPE,
        )
    except UploadError as e:
        flash(str(e), "error")
        return redirect(url_for("index"))
    except Exception as e:
        logger.error(f"Error during conversion: {e}")
        flash(f"Error processing file: {e}", "error")
        return redirect(url_for("index"))


@app.route("/api/inventory", methods=["POST"])
def api_inventory():
    """
    Parse an orders CSV and return the size pivots.

    Form fields:
        file: Orders CSV (required).
        checked: Optional checklist JSON; adds a "progress" block.

    Returns:
        JSON with the aggregation, headline stats and QA diagnostics.
    """
    csv_path = None
    try:
        checked = checked_from_form()
        csv_path = save_upload("file")
        columns, result, data = import_orders(csv_path)
        payload = {
            "success": True,
            "rows_processed": result.rows_read,
            "items_parsed": len(result.items),
            "data": data.to_dict(),
            "stats": quick_stats(data),
            "qa": run_qa_checks(columns, result, data),
        }
        if checked:
            payload["progress"] = progress_stats(data, checked)
        return jsonify(payload)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"API inventory error: {e}")
        return jsonify({"error": str(e)}), 500
    finally:
        remove_quietly(csv_path)


@app.route("/api/earnings", methods=["POST"])
def api_earnings():
    """
    Per-order fees and batch profit for an orders CSV.

    Form fields:
        file: Orders CSV (required).
        shipping_file: Shipping charges CSV (optional).
        fee_percent, fee_fixed, shipping_cost, blank_costs: Amounts; unparseable -> 0.
        sort_field: "date" or "net"; sort_direction: "asc" or "desc".

    Returns:
        JSON with sorted orders and batch totals.
    """
    orders_path = shipping_path = None
    try:
        orders_path = save_upload("file")
        shipping_path = save_upload("shipping_file", required=False)
        _, _, data = import_orders(orders_path)
        shipping_costs = load_shipping_costs(shipping_path)
        rows, stats = earnings_from_form(data, shipping_costs)
        return jsonify(
            {
                "success": True,
                "orders": [r.to_dict() for r in rows],
                "stats": stats.to_dict(),
                "shipping_matched": sum(1 for o in data.orders if o.name in shipping_costs),
            }
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"API earnings error: {e}")
        return jsonify({"error": str(e)}), 500
    finally:
        remove_quietly(orders_path, shipping_path)


@app.route("/api/export", methods=["POST"])
def api_export():
    """
    Download the inventory sheet as CSV.

    Form fields:
        file: Orders CSV (required).
        mode: "blank" (default) or "progress".
        checked: Checklist JSON, used in progress mode.
        sort_field: "name" or "total"; sort_direction: "asc" or "desc".
    """
    csv_path = None
    try:
        mode = request.form.get("mode", "blank")
        if mode not in ("blank", "progress"):
            raise UploadError(f"Unknown export mode: {mode}")
        checked = checked_from_form()
        csv_path = save_upload("file")
        _, _, data = import_orders(csv_path)

        with_progress = mode == "progress"
        text = export_inventory_csv(
            data,
            checked,
            with_progress=with_progress,
            sort_field=request.form.get("sort_field", "name"),
            direction=request.form.get("sort_direction", "asc"),
        )
        return send_file(
            io.BytesIO(text.encode("utf-8")),
            as_attachment=True,
            download_name=export_filename(with_progress),
            mimetype="text/csv",
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"API export error: {e}")
        return jsonify({"error": str(e)}), 500
    finally:
        remove_quietly(csv_path)


@app.route("/api/checklist/toggle", methods=["POST"])
def api_checklist_toggle():
    """
    Move one checklist cell by delta, clamped to [0, qty].

    JSON body: {"checked": {...}, "row_key": str, "size": str, "qty": int, "delta": int}

    Returns:
        JSON with the updated checklist mapping.
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Expected a JSON object"}), 400
    checked = body.get("checked") or {}
    row_key = body.get("row_key")
    size = body.get("size")
    qty = body.get("qty")
    delta = body.get("delta", 1)
    if not isinstance(checked, dict) or not row_key or not size:
        return jsonify({"error": "checked, row_key and size are required"}), 400
    if not isinstance(qty, int) or not isinstance(delta, int):
        return jsonify({"error": "qty and delta must be integers"}), 400

    updated = toggle_cell(checked, row_key, size, qty, delta)
    return jsonify({"checked": updated})


@app.route("/api/convert", methods=["POST"])
def api_convert():
    """
    API endpoint building the workbook from an orders CSV.

    Returns:
        JSON response containing headline numbers and a download URL on success.
        On failure, returns a JSON error message with an appropriate status code.
    """
    try:
        excel_filename, _, data, stats = build_workbook()
        return jsonify(
            {
                "success": True,
                "message": "Report created successfully",
                "orders": len(data.orders),
                "total_items": data.grand_total,
                "net_profit": stats.net_profit,
                "download_url": f"/download/{excel_filename}",
            }
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"API conversion error: {e}")
        return jsonify({"error": str(e)}), 500


@app.route("/download/<filename>")
def download_file(filename):
    """
    Download a previously generated Excel file by name.

    Args:
        filename: The generated Excel filename within the output folder.

    Returns:
        A Flask file download response, or a 404 JSON response if missing.
    """
    try:
        file_path = os.path.join(OUTPUT_FOLDER, secure_filename(filename))
        if not os.path.exists(file_path):
            return jsonify({"error": "File not found"}), 404

        return send_file(
            file_path,
            as_attachment=True,
            download_name=filename,
            mimetype=XLSX_MIMETYPE,
        )
    except Exception as e:
        logger.error(f"Download error: {e}")
        return jsonify({"error": "Error downloading file"}), 500


@app.route("/health")
def health_check():
    """
    Basic health check endpoint.

    Returns:
        JSON payload with service status, timestamp, and version.
    """
    return jsonify(
        {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": "1.0.0",
        }
    )


@app.errorhandler(413)
def too_large(e):
    flash("File too large. Maximum size is 16MB.", "error")
    return redirect(url_for("index"))


# -----------------------------------------------------------------------------
# Maintenance helper
# -----------------------------------------------------------------------------


def cleanup_old_files(hours: int = 1):
    """
    Remove old files from the upload and output directories.

    Args:
        hours: Age threshold in hours; files older than this are removed.
    """
    import time

    cutoff = time.time() - hours * 3600
    for folder in [UPLOAD_FOLDER, OUTPUT_FOLDER]:
        for fname in os.listdir(folder):
            fpath = os.path.join(folder, fname)
            if os.path.isfile(fpath) and os.path.getmtime(fpath) < cutoff:
                try:
                    os.remove(fpath)
                    logger.info(f"Cleaned up old file: {fpath}")
                except OSError:
                    logger.warning(f"Could not remove old file: {fpath}")


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    cleanup_old_files(hours=24)
    logger.info("Cleaned up old temporary files")

    app.run(debug=True, host="0.0.0.0", port=int(os.environ.get("PORT", "5000")))

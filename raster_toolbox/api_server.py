#!/usr/bin/env python3
"""
Raster Toolbox API Server
Upload a raster, start a conversion or resample job in the background, poll
its progress, then download the result.  Routes are registered in
create_app() so tests can build isolated apps with their own folders.
"""

import logging
import os
import threading
import uuid
from concurrent.futures import Future
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, request, send_file
from flask_cors import CORS
from werkzeug.utils import secure_filename

from .bootstrap import configure_logging
from .models.enums import RasterFormat, ResampleMethod
from .models.errors import RasterError
from .pipeline.cancellation import CancellationToken
from .pipeline.progress import RecordingProgress
from .pipeline.runner import RasterJobRunner
from .repositories.raster_repository import RasterRepository

# Load environment variables first
load_dotenv()

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "data/temp_uploads")
RESULTS_FOLDER = os.getenv("RESULTS_FOLDER", "data/api_results")
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "100")) * 1024 * 1024


class RasterJob:
    """State for one background conversion or resample request."""

    def __init__(self, job_id: str, kind: str, upload_path: Path, output_path: Path):
        self.job_id = job_id
        self.kind = kind
        self.upload_path = upload_path
        self.output_path = output_path
        self.discarded = False
        self.finished = threading.Event()
        self._lock = threading.Lock()
        self.progress = RecordingProgress()
        self.cancel_token = CancellationToken()
        self.future: Optional[Future] = None

    @property
    def state(self) -> str:
        if self.future is None or not self.future.done():
            return "running"
        return "done" if self.future.result().success else "failed"

    def to_dict(self) -> dict:
        payload = {
            "job_id": self.job_id,
            "kind": self.kind,
            "state": self.state,
            "progress": self.progress.latest,
            "result": None,
        }
        if self.future is not None and self.future.done():
            result = self.future.result()
            payload["result"] = result.to_dict()
            if result.success:
                payload["download_url"] = f"/api/results/{self.output_path.name}"
        return payload

    def release(self, future: Future) -> None:
        """Done-callback: drop the upload, and the result too once the job was deleted."""
        with self._lock:
            self.upload_path.unlink(missing_ok=True)
            if self.discarded:
                self.output_path.unlink(missing_ok=True)
            self.finished.set()
        logger.debug(f"Job {self.job_id} finished, upload removed")

    def discard(self) -> None:
        """Cancel the job and delete its result, now or when it finishes."""
        with self._lock:
            self.discarded = True
            self.cancel_token.cancel()
            if self.finished.is_set():
                self.output_path.unlink(missing_ok=True)


class JobRegistry:
    def __init__(self):
        self._lock = threading.RLock()
        self._jobs: Dict[str, RasterJob] = {}

    def add(self, job: RasterJob) -> RasterJob:
        with self._lock:
            self._jobs[job.job_id] = job
        return job

    def get(self, job_id: str) -> Optional[RasterJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def remove(self, job_id: str) -> Optional[RasterJob]:
        with self._lock:
            return self._jobs.pop(job_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


def _jobs() -> JobRegistry:
    return current_app.extensions["raster_jobs"]


def _runner() -> RasterJobRunner:
    return current_app.extensions["raster_runner"]


def _bad_request(message: str):
    return jsonify({"success": False, "message": message}), 400


def _store_upload(job_id: str):
    """Save the uploaded 'raster' file; returns (path, error_response)."""
    if "raster" not in request.files:
        return None, _bad_request("No raster file provided")

    file = request.files["raster"]
    if file.filename == "":
        return None, _bad_request("No file selected")

    filename = secure_filename(file.filename)
    if Path(filename).suffix.lower() not in current_app.config["ALLOWED_EXTENSIONS"]:
        return None, _bad_request(f"Unsupported file type: {file.filename}")

    upload_path = Path(current_app.config["UPLOAD_FOLDER"]) / f"{job_id}_{filename}"
    file.save(str(upload_path))
    return upload_path, None


def _output_path(job_id: str, upload_path: Path, fmt: RasterFormat) -> Path:
    stem = upload_path.stem[len(job_id) + 1:] or "raster"
    return Path(current_app.config["RESULTS_FOLDER"]) / f"{job_id}_{stem}{fmt.extension}"


def convert_raster():
    """Start a format conversion job."""
    job_id = uuid.uuid4().hex
    upload_path, error = _store_upload(job_id)
    if error:
        return error

    try:
        input_format = RasterFormat.parse(request.form.get("input_format") or upload_path.suffix)
        output_format = RasterFormat.parse(request.form.get("output_format", ""))
    except RasterError as err:
        upload_path.unlink()
        return _bad_request(str(err))
    if input_format is output_format:
        upload_path.unlink()
        return _bad_request(f"Input and output formats are both {input_format.value}")

    output_path = _output_path(job_id, upload_path, output_format)
    job = _jobs().add(RasterJob(job_id, "convert", upload_path, output_path))
    job.future = _runner().submit_convert(upload_path, input_format, job.output_path, output_format,
                                          job.progress, cancel_token=job.cancel_token)
    job.future.add_done_callback(job.release)
    logger.info(f"Conversion job {job_id}: {input_format.value} → {output_format.value}")
    return jsonify({"success": True, "job_id": job_id,
                    "message": f"Conversion to {output_format.value} started"}), 202


def resample_raster():
    """Start a resample job.  The output keeps the input format."""
    job_id = uuid.uuid4().hex
    upload_path, error = _store_upload(job_id)
    if error:
        return error

    try:
        input_format = RasterFormat.parse(request.form.get("input_format") or upload_path.suffix)
        method = ResampleMethod.parse(request.form.get("method", "bilinear"))
        width = int(request.form.get("width", ""))
        height_field = request.form.get("height")
        if height_field:
            height = int(height_field)
        else:
            width, height = _runner().raster_service.fit_to_width(upload_path, width)
    except (RasterError, ValueError) as err:
        upload_path.unlink()
        return _bad_request(f"Invalid resample request: {err}")

    output_path = _output_path(job_id, upload_path, input_format)
    job = _jobs().add(RasterJob(job_id, "resample", upload_path, output_path))
    job.future = _runner().submit_resample(upload_path, input_format, job.output_path, width, height,
                                           method, job.progress, cancel_token=job.cancel_token)
    job.future.add_done_callback(job.release)
    logger.info(f"Resample job {job_id}: {width}x{height} ({method.value})")
    return jsonify({"success": True, "job_id": job_id,
                    "message": f"Resampling to {width}x{height} started"}), 202


def job_status(job_id: str):
    job = _jobs().get(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404
    return jsonify(job.to_dict())


def cancel_job(job_id: str):
    job = _jobs().get(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404
    job.cancel_token.cancel()
    return jsonify({"success": True, "job_id": job_id, "message": "Cancellation requested"})


def delete_job(job_id: str):
    """Forget a job; a running one is cancelled first.  Its result file is removed."""
    job = _jobs().remove(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404
    job.discard()
    logger.info(f"Deleted job {job_id}")
    return jsonify({"success": True, "job_id": job_id, "message": "Job deleted"})


def serve_result(filename: str):
    """Serve a finished raster."""
    result_path = Path(current_app.config["RESULTS_FOLDER"]) / secure_filename(filename)
    if not result_path.is_file():
        return jsonify({"error": "Result not found"}), 404
    return send_file(result_path.resolve(), as_attachment=True)


def health_check():
    return jsonify({
        "status": "healthy",
        "message": "Raster Toolbox API is running",
        "jobs": len(_jobs()),
    })


def too_large(e):
    limit_mb = current_app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
    return jsonify({"error": f"File too large. Maximum size is {limit_mb}MB."}), 413


def internal_error(e):
    logger.error(f"Internal server error: {e}")
    return jsonify({"error": "Internal server error"}), 500


def create_app(upload_folder: str = None, results_folder: str = None,
               runner: RasterJobRunner = None) -> Flask:
    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend communication

    app.config["UPLOAD_FOLDER"] = upload_folder or UPLOAD_FOLDER
    app.config["RESULTS_FOLDER"] = results_folder or RESULTS_FOLDER
    app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH
    app.config["ALLOWED_EXTENSIONS"] = RasterRepository().VALID_EXTS

    Path(app.config["UPLOAD_FOLDER"]).mkdir(parents=True, exist_ok=True)
    Path(app.config["RESULTS_FOLDER"]).mkdir(parents=True, exist_ok=True)

    app.extensions["raster_jobs"] = JobRegistry()
    app.extensions["raster_runner"] = runner or RasterJobRunner()

    app.add_url_rule("/api/convert", view_func=convert_raster, methods=["POST"])
    app.add_url_rule("/api/resample", view_func=resample_raster, methods=["POST"])
    app.add_url_rule("/api/jobs/<job_id>", view_func=job_status, methods=["GET"])
    app.add_url_rule("/api/jobs/<job_id>", view_func=delete_job, methods=["DELETE"])
    app.add_url_rule("/api/jobs/<job_id>/cancel", view_func=cancel_job, methods=["POST"])
    app.add_url_rule("/api/results/<filename>", view_func=serve_result, methods=["GET"])
    app.add_url_rule("/api/health", view_func=health_check, methods=["GET"])
    app.register_error_handler(413, too_large)
    app.register_error_handler(500, internal_error)
    return app


def main():
    configure_logging()
    app = create_app()
    print("🚀 Starting Raster Toolbox API Server...")
    print(f"📁 Upload directory: {app.config['UPLOAD_FOLDER']}")
    print(f"📁 Results directory: {app.config['RESULTS_FOLDER']}")
    print(f"🔧 Max upload size: {app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)}MB")
    print("=" * 60)
    app.run(host="0.0.0.0", port=int(os.getenv("API_SERVER_PORT", "5002")))


if __name__ == "__main__":
    main()

"""HTTP ingress: upload a PDF, receive the illustrated PDF."""
import io
from typing import Callable, Optional
from flask import Flask, Response, request, send_file

from utils.logger import setup_logger
from ingestion.pdf_extractor import InvalidPDFError, NoExtractableTextError
from execution.pipeline import IllustrationPipeline
import config

logger = setup_logger(__name__)


def _plain(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def create_app(pipeline_factory: Optional[Callable[[], IllustrationPipeline]] = None) -> Flask:
    """Build the Flask app.

    Args:
        pipeline_factory: Returns a pipeline per request; defaults to one
            configured from the environment

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES
    make_pipeline = pipeline_factory or IllustrationPipeline

    @app.post("/api/process-pdf")
    def process_pdf():
        upload = request.files.get("file")
        if upload is None:
            return _plain("no file", 400)

        pdf_bytes = upload.read()
        logger.info(f"Starting PDF processing: {upload.filename} ({len(pdf_bytes)} bytes)")

        try:
            with make_pipeline() as pipeline:
                result = pipeline.run(pdf_bytes)
        except InvalidPDFError as e:
            return _plain(str(e), 400)
        except NoExtractableTextError:
            return _plain("No extractable text found in PDF.", 422)
        except Exception:
            logger.exception("PDF processing failed")
            return _plain("Failed to process PDF.", 500)

        response = send_file(
            io.BytesIO(result.pdf_bytes),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=config.OUTPUT_FILENAME
        )
        response.headers["Cache-Control"] = "no-store"
        return response

    return app

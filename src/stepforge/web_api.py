"""Lightweight web API for step generation and pattern lookup."""

from __future__ import annotations

import argparse
import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlsplit

from stepforge.mcp_server import (
    _extract_feature_steps,
    _generate_step,
    _generate_steps_file,
    _list_step_patterns,
    _search_step_patterns,
)

logger = logging.getLogger(__name__)

POST_ROUTES = {"/search", "/step", "/generate", "/extract"}


class StepforgeHandler(BaseHTTPRequestHandler):
    """JSON HTTP interface for generate/extract/search operations."""

    project_root = Path(".")

    def do_GET(self) -> None:  # noqa: N802
        url = urlsplit(self.path)
        if url.path == "/health":
            self._write_json({"ok": True, "service": "stepforge-web"}, HTTPStatus.OK)
            return
        if url.path == "/patterns":
            tag = parse_qs(url.query).get("tag", [None])[0]
            self._respond(_list_step_patterns(tag=tag, project_root=str(self.project_root)))
            return
        self._write_json({"ok": False, "error": "Not found"}, HTTPStatus.NOT_FOUND)

    def do_POST(self) -> None:  # noqa: N802
        path = urlsplit(self.path).path
        if path not in POST_ROUTES:
            self._write_json({"ok": False, "error": "Not found"}, HTTPStatus.NOT_FOUND)
            return

        try:
            payload = self._read_json_body()
            response = self._dispatch(path, payload)
        except Exception as exc:  # broad by design for API boundary
            logger.debug("Request to %s failed: %s", path, exc)
            self._write_json({"ok": False, "error": str(exc)}, HTTPStatus.BAD_REQUEST)
            return
        self._respond(response)

    def _dispatch(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        root = str(payload.get("project_root", self.project_root))
        if path == "/search":
            return _search_step_patterns(
                query=str(payload["query"]),
                limit=int(payload.get("limit", 10)),
                project_root=root,
            )
        if path == "/step":
            return _generate_step(
                text=str(payload["text"]),
                keyword=payload.get("keyword"),
                output_target=payload.get("output_target"),
                execution_target=payload.get("execution_target"),
                project_root=root,
            )
        if path == "/generate":
            return _generate_steps_file(
                content=str(payload["content"]),
                filename=payload.get("filename"),
                output_target=payload.get("output_target"),
                execution_target=payload.get("execution_target"),
                group_by_kind=payload.get("group_by_kind"),
                project_root=root,
            )
        return _extract_feature_steps(content=str(payload["content"]))

    def _respond(self, response: dict[str, Any]) -> None:
        if "error" in response:
            self._write_json({"ok": False, **response}, HTTPStatus.BAD_REQUEST)
        else:
            self._write_json({"ok": True, **response}, HTTPStatus.OK)

    def _read_json_body(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(length) if length else b"{}"
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data

    def _write_json(self, payload: dict[str, Any], status: HTTPStatus) -> None:
        body = (json.dumps(payload, indent=2, sort_keys=True) + "\n").encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.info("%s - %s", self.address_string(), format % args)


def run_web_api(host: str = "127.0.0.1", port: int = 8765, project_root: str = ".") -> None:
    StepforgeHandler.project_root = Path(project_root)
    server = ThreadingHTTPServer((host, port), StepforgeHandler)
    logger.info("Serving stepforge web API on http://%s:%d", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run stepforge web API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--project-root", default=".")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_web_api(host=args.host, port=args.port, project_root=args.project_root)


if __name__ == "__main__":
    main()

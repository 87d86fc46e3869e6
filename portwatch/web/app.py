from __future__ import annotations
import logging
from typing import Iterator

from flask import Flask, Response, current_app, request

from ..collectors import scan_one
from ..query import query
from ..rules import recognize
from ..state import ServiceState, Subscription
from ..utils.jsonio import SerializationError, dumps, dumps_snapshot

logger = logging.getLogger(__name__)

KEEPALIVE_FRAME = ": keep-alive\n\n"

def json_response(obj, status: int = 200) -> Response:
    return Response(dumps(obj), status=status, mimetype="application/json")

def sse_frame(services) -> str:
    return f"data: {dumps_snapshot(services)}\n\n"

def event_stream(sub: Subscription, keepalive: float) -> Iterator[str]:
    """SSE frames for one subscriber: a data frame per change, a comment frame when idle."""
    try:
        while not sub.closed:
            services = sub.get(timeout=keepalive)
            if services is None:
                if sub.closed:
                    break
                yield KEEPALIVE_FRAME
                continue
            try:
                frame = sse_frame(services)
            except SerializationError as exc:
                logger.error("dropping unencodable snapshot from event stream: %s", exc)
                continue
            yield frame
    finally:
        sub.close()

def _int_arg(name: str):
    # non-numeric values fall back to the defaults
    return request.args.get(name, default=None, type=int)

def create_app(state: ServiceState) -> Flask:
    app = Flask(__name__)

    @app.after_request
    def allow_any_origin(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET"
        return resp

    @app.errorhandler(SerializationError)
    def serialization_failed(exc):
        current_app.logger.error("response serialization failed: %s", exc)
        return Response('{"error":"serialization failed"}', status=500, mimetype="application/json")

    @app.get("/")
    def list_services():
        page = query(
            state.cache.read(),
            sort_by=request.args.get("sort_by"),
            sort_order=request.args.get("sort_order"),
            page=_int_arg("page"),
            page_size=_int_arg("page_size"),
        )
        return json_response(page.to_dict())

    @app.get("/<int:port>")
    def service_detail(port: int):
        if port > 0xFFFF:
            return Response(status=404)
        svc = scan_one(state.discovery.discover(), port, state.cfg.probe_timeout)
        if svc is None:
            return Response(status=404)
        return json_response(svc.to_dict())

    @app.get("/events")
    def events():
        sub = state.hub.subscribe()
        current_app.logger.debug("event stream opened (%d subscribers)", state.hub.subscriber_count)
        resp = Response(event_stream(sub, state.cfg.keepalive), mimetype="text/event-stream")
        resp.headers["Cache-Control"] = "no-cache"
        resp.headers["X-Accel-Buffering"] = "no"
        # the generator's finally only runs once it has started
        resp.call_on_close(sub.close)
        return resp

    @app.get("/recognized")
    def recognized():
        out = []
        for svc in state.cache.read():
            label = recognize(svc, state.rules)
            if label:
                out.append({"port": svc.port, "pid": svc.pid, "process": svc.process, "service": label})
        return json_response(out)

    return app

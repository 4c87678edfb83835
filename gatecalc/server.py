"""
gatecalc Server
===============
FastAPI application exposing one shared evaluation session over HTTP.

Launch:
    python -m gatecalc.server --port 8000

Endpoints:
    GET  /api/dialects   → Selectable dialect names
    GET  /api/context    → Frames bottom to top with their definitions
    POST /api/eval       → Execute lines in order, return rendered output
    POST /api/reset      → Drop all frames and definitions
"""
from __future__ import annotations

import argparse
import threading

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from gatecalc.context import Dialect
from gatecalc.errors import GateCalcError
from gatecalc.session import Session, SessionConfig


# ─────────────────────────────────────────────────────────────
#  App Setup
# ─────────────────────────────────────────────────────────────

app = FastAPI(title="gatecalc", version="0.1.0")

_state = {
    "session": None,
}
_lock = threading.Lock()


def configure(config: SessionConfig | None = None) -> Session:
    """Replace the shared session (used at startup and by tests)."""
    session = Session(config or SessionConfig.from_env(), output_fn=lambda s: None)
    _state["session"] = session
    return session


def _session() -> Session:
    if _state["session"] is None:
        configure()
    return _state["session"]


# ─────────────────────────────────────────────────────────────
#  Request / Response Models
# ─────────────────────────────────────────────────────────────

class EvalRequest(BaseModel):
    lines: list[str]


class LineOutput(BaseModel):
    line: str
    dialect: str
    output: str
    netlist: str | None = None


class EvalResponse(BaseModel):
    results: list[LineOutput]


# ─────────────────────────────────────────────────────────────
#  Routes
# ─────────────────────────────────────────────────────────────

@app.get("/api/dialects")
def api_dialects():
    return {"dialects": [d.value for d in Dialect]}


@app.get("/api/context")
def api_context():
    with _lock:
        session = _session()
        return {
            "dialect": session.dialect.value,
            "frames": session.stack.describe(),
        }


@app.post("/api/eval", response_model=EvalResponse)
def api_eval(req: EvalRequest):
    """Execute lines in order; stop at the first failing line."""
    results = []
    with _lock:
        session = _session()
        for line in req.lines:
            if not line.strip():
                continue
            try:
                result = session.execute(line)
            except GateCalcError as e:
                raise HTTPException(
                    status_code=400,
                    detail={
                        "line": line,
                        "kind": e.kind,
                        "error": str(e),
                        "completed": [r.model_dump() for r in results],
                    },
                )
            results.append(LineOutput(
                line=line,
                dialect=result.dialect.value,
                output=session.render(result),
                netlist=result.netlist,
            ))
    return EvalResponse(results=results)


@app.post("/api/reset")
def api_reset():
    with _lock:
        _session().reset()
    return {"success": True}


# ─────────────────────────────────────────────────────────────
#  Launch
# ─────────────────────────────────────────────────────────────

def run_server(host: str = "127.0.0.1", port: int = 8000,
               config: SessionConfig | None = None):
    """Launch the API with uvicorn."""
    import uvicorn

    configure(config)
    print(f"  gatecalc server → http://{host}:{port}/api/context")
    uvicorn.run(app, host=host, port=port, log_level="warning")


def main():
    parser = argparse.ArgumentParser(prog="gatecalc-server", description="gatecalc HTTP API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", default=8000, type=int, help="Port number (default: 8000)")
    parser.add_argument("--dialect", default=None, help="Initial dialect")
    args = parser.parse_args()

    config = SessionConfig.from_env()
    if args.dialect:
        config.dialect = args.dialect
    run_server(args.host, args.port, config)


if __name__ == "__main__":
    main()

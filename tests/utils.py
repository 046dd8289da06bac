import json
from pathlib import Path

import httpx

SERVER_URL = "http://localhost:13557"


def write_log(path: Path, lines: list[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def ndjson(*records: dict) -> bytes:
    return b"".join(json.dumps(r, ensure_ascii=False).encode() + b"\n" for r in records)


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def invoked(request_id: str, function_id: str = "fn", worker_id: str = "w1", input: str = "in") -> dict:
    return {
        "type": "aws.FunctionInvokedEvent",
        "event": {
            "FunctionID": function_id,
            "WorkerID": worker_id,
            "RequestID": request_id,
            "Input": input,
        },
    }


def log_line(request_id: str, line: str) -> dict:
    return {
        "type": "aws.FunctionLogEvent",
        "event": {"FunctionID": "fn", "WorkerID": "w1", "RequestID": request_id, "Line": line},
    }


def response(request_id: str, output: str) -> dict:
    return {
        "type": "aws.FunctionResponseEvent",
        "event": {"FunctionID": "fn", "WorkerID": "w1", "RequestID": request_id, "Output": output},
    }


def error(request_id: str, message: str = "boom") -> dict:
    return {
        "type": "aws.FunctionErrorEvent",
        "event": {
            "FunctionID": "fn",
            "WorkerID": "w1",
            "RequestID": request_id,
            "ErrorType": "Error",
            "ErrorMessage": message,
            "Trace": ["at handler (index.ts:3)"],
        },
    }

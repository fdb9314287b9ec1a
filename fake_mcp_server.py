#!/usr/bin/env python3
"""
Minimal stdio MCP server used by the tests.

Answers initialize and tools/call for get_dom, take_screenshot and
execute_js with canned data. Behaviour is steered by environment variables:

    FAKE_MCP_FAIL_TOOL      tool name to answer with a JSON-RPC error
    FAKE_MCP_SILENT_TOOL    tool name to never answer
    FAKE_MCP_CALL_LOG       file that receives one line per request
    FAKE_MCP_SCREENSHOT     text returned by take_screenshot
    FAKE_MCP_SCREENSHOT_PNG base64 returned by take_screenshot as an image block
    FAKE_MCP_JS_RESULT      text returned by every execute_js call
    FAKE_MCP_WINDOW_INFO    text returned by the window info script
"""

import json
import os
import sys
import time

DOM = "<html><head><title>Fake</title></head><body><button>Save</button><button> </button></body></html>"

JS_RESULTS = {
    "innerWidth": {"width": 1280, "height": 800, "url": "tauri://localhost/", "title": "Fake"},
    "errorCount": {"errors": [], "errorCount": 0},
    "buttonTexts": {"buttons": 2, "inputs": 1, "links": 0, "buttonTexts": ["Save"]},
}


def write(message, split=False):
    line = json.dumps(message) + "\n"
    if split:
        # Deliver one response in two pieces to exercise reassembly
        half = len(line) // 2
        sys.stdout.write(line[:half])
        sys.stdout.flush()
        time.sleep(0.05)
        line = line[half:]
    sys.stdout.write(line)
    sys.stdout.flush()


def text_result(text):
    return {"content": [{"type": "text", "text": text}]}


def handle_tool(name, arguments):
    if name == "get_dom":
        return text_result(DOM)
    if name == "take_screenshot":
        if "FAKE_MCP_SCREENSHOT_PNG" in os.environ:
            return {"content": [{"type": "image", "data": os.environ["FAKE_MCP_SCREENSHOT_PNG"], "mimeType": "image/png"}]}
        return text_result(os.environ.get("FAKE_MCP_SCREENSHOT", "data:image/png;base64,AAAA"))
    if name == "execute_js":
        if "FAKE_MCP_JS_RESULT" in os.environ:
            return text_result(os.environ["FAKE_MCP_JS_RESULT"])
        code = arguments.get("code", "")
        if "innerWidth" in code and "FAKE_MCP_WINDOW_INFO" in os.environ:
            return text_result(os.environ["FAKE_MCP_WINDOW_INFO"])
        for marker, result in JS_RESULTS.items():
            if marker in code:
                return text_result(json.dumps(result))
        return text_result("{}")
    return None


def log_call(entry):
    path = os.environ.get("FAKE_MCP_CALL_LOG")
    if path:
        with open(path, "a") as f:
            f.write(entry + "\n")


def main():
    print(f"fake server starting, ipc={os.environ.get('TAURI_MCP_IPC_PATH')}", file=sys.stderr, flush=True)
    # Protocol noise on stdout must be tolerated by the client
    sys.stdout.write("fake server ready\n")
    sys.stdout.flush()

    for line in sys.stdin:
        if not line.strip():
            continue
        request = json.loads(line)
        method = request.get("method")
        request_id = request.get("id")
        if request_id is None:
            log_call(method)
            continue

        if method == "initialize":
            log_call(method)
            write({"jsonrpc": "2.0", "id": request_id, "result": {
                "protocolVersion": request["params"]["protocolVersion"],
                "capabilities": {"tools": {}},
                "serverInfo": {"name": "fake-mcp", "version": "0.0.1"},
            }})
            continue

        if method != "tools/call":
            write({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32601, "message": f"Method not found: {method}"}})
            continue

        name = request["params"]["name"]
        arguments = request["params"].get("arguments", {})
        log_call(f"{method} {name} {json.dumps(arguments, sort_keys=True)}")
        print(f"tools/call {name}", file=sys.stderr, flush=True)

        if name == os.environ.get("FAKE_MCP_SILENT_TOOL"):
            continue
        if name == os.environ.get("FAKE_MCP_FAIL_TOOL"):
            write({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32000, "message": f"{name} failed"}})
            continue

        result = handle_tool(name, arguments)
        if result is None:
            write({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32602, "message": f"Unknown tool: {name}"}})
        else:
            write({"jsonrpc": "2.0", "id": request_id, "result": result}, split=(name == "get_dom"))


if __name__ == "__main__":
    main()

import os
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from starlette.exceptions import HTTPException as StarletteHTTPException

from library_gateway.config import get_settings
from library_gateway.logging_setup import setup_logging
from library_gateway.service import handle_library_request

LIBRARY_PATH = "/api/library"

load_dotenv()
setup_logging(get_settings().log_level)

app = FastAPI(title="extension-library-gateway")

def _library_response(request: Request) -> JSONResponse:
    # Local mirror of api/library.py; the body is never read.
    raw_length = request.headers.get("content-length")
    reply = handle_library_request(
        request.method,
        request.headers,
        content_length=int(raw_length) if raw_length and raw_length.isdigit() else None,
        peer=request.client.host if request.client else None,
    )
    return JSONResponse(status_code=reply.status_code, content=reply.body, headers=reply.headers)

@app.exception_handler(StarletteHTTPException)
async def method_not_allowed(request: Request, exc: StarletteHTTPException):
    # Verbs outside the route's list (TRACE, PROPFIND, ...) still get the library's 405 envelope.
    if exc.status_code == 405 and request.url.path == LIBRARY_PATH:
        return _library_response(request)
    return await http_exception_handler(request, exc)

@app.api_route(LIBRARY_PATH, methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def library(request: Request):
    return _library_response(request)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8787)))

import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from pythonjsonlogger.json import JsonFormatter
from app.config import settings

class JSONLogFormatter(JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super(JSONLogFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))
        if log_record.get('level'):
            log_record['level'] = log_record['level'].upper()
        else:
            log_record['level'] = record.levelname

def setup_logging(level: int = logging.INFO):
    logger = logging.getLogger()
    # Reloads (uvicorn --reload, repeated imports in tests) must not stack handlers
    if any(isinstance(h.formatter, JSONLogFormatter) for h in logger.handlers):
        return
    logHandler = logging.StreamHandler()
    formatter = JSONLogFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
    logHandler.setFormatter(formatter)
    logger.addHandler(logHandler)
    logger.setLevel(level)

class PerformanceMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        # Log slow requests
        if process_time > settings.SLOW_REQUEST_SECONDS:
            logging.getLogger("performance").warning(
                f"Slow Request: {request.method} {request.url.path} took {process_time:.4f}s"
            )

        response.headers["X-Process-Time"] = str(process_time)
        return response

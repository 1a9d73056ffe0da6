from __future__ import annotations

import os

import uvicorn

from facility_pipeline.config import load_settings
from facility_pipeline.observability import configure_logging, configure_otel, configure_probe_access_log_filter


def main() -> None:
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    configure_otel(load_settings().SERVICE_NAME)
    configure_probe_access_log_filter()
    host = os.getenv("MONITORING_HOST", "0.0.0.0")
    port = int(os.getenv("MONITORING_PORT", "8001"))
    uvicorn.run("facility_pipeline.monitoring.app:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()

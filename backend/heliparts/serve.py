# backend/heliparts/serve.py
"""
Run the HeliParts API with uvicorn.

    python -m heliparts.serve

Settings come from the environment: HOST, PORT, RELOAD, LOG_LEVEL,
WEB_CONCURRENCY, FORWARDED_ALLOW_IPS and the SSL_* file paths.
"""

import logging
import os
from typing import Any, Dict

import uvicorn

logger = logging.getLogger(__name__)

APP_PATH = "heliparts.main:app"

_SSL_ENV = {
    "ssl_certfile": "SSL_CERTFILE",
    "ssl_keyfile": "SSL_KEYFILE",
    "ssl_ca_certs": "SSL_CA_CERTS",
    "ssl_keyfile_password": "SSL_KEYFILE_PASSWORD",
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def _server_options() -> Dict[str, Any]:
    reload_enabled = _env_flag("RELOAD")
    options: Dict[str, Any] = {
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": int(os.getenv("PORT", "8000")),
        "reload": reload_enabled,
        "log_level": os.getenv("LOG_LEVEL", "info"),
        "proxy_headers": True,
        "forwarded_allow_ips": os.getenv("FORWARDED_ALLOW_IPS", "*"),
    }
    # uvicorn ignores workers when reloading.
    if not reload_enabled:
        options["workers"] = int(os.getenv("WEB_CONCURRENCY", "1"))

    for option, env_name in _SSL_ENV.items():
        value = os.getenv(env_name)
        if value:
            options[option] = value
    return options


def main() -> None:
    if os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION") == "CHANGE_ME_IN_PRODUCTION":
        logger.warning("SECRET_KEY is not set; bearer tokens are signed with the development key")
    uvicorn.run(APP_PATH, **_server_options())


if __name__ == "__main__":
    main()

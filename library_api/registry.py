from fastapi import FastAPI

from . import endpoints
from .config import Settings

# Modules exposing add_services(app, settings) and define_endpoints(app).
ENDPOINT_MODULES = (endpoints,)


def add_endpoint_services(app: FastAPI, settings: Settings) -> None:
    for module in ENDPOINT_MODULES:
        module.add_services(app, settings)


def use_endpoints(app: FastAPI) -> None:
    for module in ENDPOINT_MODULES:
        module.define_endpoints(app)

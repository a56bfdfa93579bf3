from fastapi import Request
from orus_builder.core.registry import ServiceRegistry


def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services

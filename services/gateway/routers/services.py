"""Backend service registry router.

Endpoints:
- GET /api/services - List registered services
- POST /api/services - Register a service
- GET /api/services/{service_id} - Get one service
- PATCH /api/services/{service_id} - Update a service
- DELETE /api/services/{service_id} - Delete a service
"""

from fastapi import APIRouter, Depends, Response, status

from core.exceptions import NotFoundError
from core.models.service import Service
from core.models.user import AuthenticatedIdentity
from core.security.deps import get_current_identity
from services.gateway.database.services import ServiceRegistry, get_service_registry
from services.gateway.schemas import CreateServiceRequest, UpdateServiceRequest

router = APIRouter(
    prefix="/api/services",
    tags=["services"],
    dependencies=[Depends(get_current_identity)],
)


@router.get("", response_model=list[Service])
async def list_services(
    registry: ServiceRegistry = Depends(get_service_registry),
) -> list[Service]:
    """List all registered services, newest first."""
    return await registry.list_services()


@router.post("", response_model=Service, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: CreateServiceRequest,
    registry: ServiceRegistry = Depends(get_service_registry),
) -> Service:
    """
    Register a backend service.

    Raises:
        DuplicateServiceNameError: If the name is already registered
    """
    fields = data.model_dump(exclude_none=True)
    fields["auth_type"] = data.auth_type.value
    return await registry.create_service(**fields)


@router.get("/{service_id}", response_model=Service)
async def get_service(
    service_id: str,
    registry: ServiceRegistry = Depends(get_service_registry),
) -> Service:
    """Get a service by ID."""
    service = await registry.get_service(service_id)
    if service is None:
        raise NotFoundError("Service not found")
    return service


@router.patch("/{service_id}", response_model=Service)
async def update_service(
    service_id: str,
    data: UpdateServiceRequest,
    registry: ServiceRegistry = Depends(get_service_registry),
) -> Service:
    """
    Update a service. Only the fields sent are changed.

    Raises:
        NotFoundError: If the service does not exist
        DuplicateServiceNameError: If renamed to a name already in use
    """
    # description is the only field that may be cleared with an explicit null
    fields = {
        name: value
        for name, value in data.model_dump(exclude_unset=True).items()
        if value is not None or name == "description"
    }
    if "auth_type" in fields:
        fields["auth_type"] = data.auth_type.value

    service = await registry.update_service(service_id, **fields)
    if service is None:
        raise NotFoundError("Service not found")
    return service


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: str,
    registry: ServiceRegistry = Depends(get_service_registry),
) -> Response:
    """Delete a service. Its request log entries are kept, unlinked."""
    if not await registry.delete_service(service_id):
        raise NotFoundError("Service not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

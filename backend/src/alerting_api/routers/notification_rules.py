"""Notification rules router."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from alerting_api.dependencies import get_notification_rule_service
from alerting_api.exceptions import InvalidArgumentError
from alerting_api.models.domain.user_resource_mapping import UserType
from alerting_api.models.dto.notification_rule import (
    LabelResponse,
    LabelsResponse,
    QueryResponse,
    ResourceMember,
    ResourceMembersResponse,
)
from alerting_api.security.auth import Principal, get_current_principal
from alerting_api.services.notification_rule_service import NotificationRuleService
from alerting_api.utils.filters import decode_notification_rule_filter

router = APIRouter(dependencies=[Depends(get_current_principal)])

ServiceDep = Annotated[NotificationRuleService, Depends(get_notification_rule_service)]
PrincipalDep = Annotated[Principal, Depends(get_current_principal)]


async def _read_json(request: Request) -> Any:
    """Read the JSON request body."""
    try:
        return await request.json()
    except ValueError as e:
        raise InvalidArgumentError("request body is not valid JSON") from e


# =============================================================================
# Rules
# =============================================================================


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notification_rule(
    request: Request, principal: PrincipalDep, service: ServiceDep
) -> JSONResponse:
    """Create a notification rule."""
    document = await service.create_rule(await _read_json(request), principal.user_id)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=document.to_json())


@router.get("")
async def list_notification_rules(request: Request, service: ServiceDep) -> JSONResponse:
    """List notification rules.

    Query parameters: ``orgID`` or ``org``, ``tag`` (repeatable ``key:value``),
    ``userID``, ``resourceID``, ``offset``, ``limit``, ``sortBy``, ``descending``.
    """
    rule_filter, options = decode_notification_rule_filter(request.query_params)
    composed = await service.list_rules(rule_filter, options)
    return JSONResponse(content=composed.to_response().to_json())


@router.get("/{rule_id}")
async def get_notification_rule(rule_id: str, service: ServiceDep) -> JSONResponse:
    """Get a notification rule."""
    document = await service.get_rule(rule_id)
    return JSONResponse(content=document.to_json())


@router.put("/{rule_id}")
async def replace_notification_rule(
    rule_id: str, request: Request, principal: PrincipalDep, service: ServiceDep
) -> JSONResponse:
    """Replace a notification rule."""
    document = await service.replace_rule(rule_id, await _read_json(request), principal.user_id)
    return JSONResponse(content=document.to_json())


@router.patch("/{rule_id}")
async def patch_notification_rule(
    rule_id: str, request: Request, service: ServiceDep
) -> JSONResponse:
    """Partially update a notification rule."""
    document = await service.patch_rule(rule_id, await _read_json(request))
    return JSONResponse(content=document.to_json())


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification_rule(rule_id: str, service: ServiceDep) -> Response:
    """Delete a notification rule and its task."""
    await service.delete_rule(rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{rule_id}/query", response_model=QueryResponse)
async def get_notification_rule_query(rule_id: str, service: ServiceDep) -> QueryResponse:
    """Get the task query rendered from a notification rule."""
    return await service.get_rule_query(rule_id)


# =============================================================================
# Members and owners
# =============================================================================


@router.post("/{rule_id}/members", response_model=ResourceMember, status_code=status.HTTP_201_CREATED)
async def add_notification_rule_member(
    rule_id: str, request: Request, service: ServiceDep
) -> ResourceMember:
    """Add a member to a notification rule."""
    return await service.add_resource_user(rule_id, await _read_json(request), UserType.MEMBER)


@router.get("/{rule_id}/members", response_model=ResourceMembersResponse)
async def list_notification_rule_members(rule_id: str, service: ServiceDep) -> ResourceMembersResponse:
    """List the members of a notification rule."""
    return await service.list_resource_users(rule_id, UserType.MEMBER)


@router.delete("/{rule_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_notification_rule_member(
    rule_id: str, user_id: str, service: ServiceDep
) -> Response:
    """Remove a member from a notification rule."""
    await service.remove_resource_user(rule_id, user_id, UserType.MEMBER)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{rule_id}/owners", response_model=ResourceMember, status_code=status.HTTP_201_CREATED)
async def add_notification_rule_owner(
    rule_id: str, request: Request, service: ServiceDep
) -> ResourceMember:
    """Add an owner to a notification rule."""
    return await service.add_resource_user(rule_id, await _read_json(request), UserType.OWNER)


@router.get("/{rule_id}/owners", response_model=ResourceMembersResponse)
async def list_notification_rule_owners(rule_id: str, service: ServiceDep) -> ResourceMembersResponse:
    """List the owners of a notification rule."""
    return await service.list_resource_users(rule_id, UserType.OWNER)


@router.delete("/{rule_id}/owners/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_notification_rule_owner(
    rule_id: str, user_id: str, service: ServiceDep
) -> Response:
    """Remove an owner from a notification rule."""
    await service.remove_resource_user(rule_id, user_id, UserType.OWNER)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Labels
# =============================================================================


@router.get("/{rule_id}/labels", response_model=LabelsResponse)
async def list_notification_rule_labels(rule_id: str, service: ServiceDep) -> LabelsResponse:
    """List the labels of a notification rule."""
    return await service.list_labels(rule_id)


@router.post("/{rule_id}/labels", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
async def add_notification_rule_label(
    rule_id: str, request: Request, service: ServiceDep
) -> LabelResponse:
    """Attach a label to a notification rule."""
    return await service.add_label(rule_id, await _read_json(request))


@router.delete("/{rule_id}/labels/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_notification_rule_label(
    rule_id: str, label_id: str, service: ServiceDep
) -> Response:
    """Detach a label from a notification rule."""
    await service.remove_label(rule_id, label_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

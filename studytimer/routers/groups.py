"""
Subject Groups API Router

Endpoints:
- GET /api/groups - All subject groups
- POST /api/groups - Create a group
- DELETE /api/groups/{id} - Delete a group (its tasks stay, ungrouped)
"""

from fastapi import APIRouter, Depends, status

from studytimer.container import Container
from studytimer.dependencies import get_container
from studytimer.middleware.error_handling import raise_for_failure
from studytimer.models.base import SuccessResponse
from studytimer.models.study import SubjectGroup, SubjectGroupCreate

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.get("", response_model=list[SubjectGroup])
async def list_groups(container: Container = Depends(get_container)) -> list[SubjectGroup]:
    return raise_for_failure(await container.groups.get_all())


@router.post("", response_model=SubjectGroup, status_code=status.HTTP_201_CREATED)
async def create_group(
    draft: SubjectGroupCreate,
    container: Container = Depends(get_container),
) -> SubjectGroup:
    group_id = raise_for_failure(await container.groups.insert(draft))
    return raise_for_failure(await container.groups.get_by_id(group_id))


@router.delete("/{group_id}", response_model=SuccessResponse)
async def delete_group(
    group_id: int,
    container: Container = Depends(get_container),
) -> SuccessResponse:
    raise_for_failure(await container.groups.delete(group_id))
    return SuccessResponse(message=f"Group {group_id} deleted")

"""JSON endpoints for groups, visions and generated images."""

from uuid import UUID

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    Header,
    HTTPException,
    Request,
    status,
)

from shared_visions.api.schemas import (
    AestheticProfileRequest,
    CreateGroupRequest,
    CreateVisionRequest,
    GenerateImageRequest,
    JoinGroupRequest,
)
from shared_visions.containers import AppContainer
from shared_visions.domain.models import UserProfile
from shared_visions.services.events import ObservableService

router = APIRouter()


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_user(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(_container),
) -> UUID:
    """Resolve the bearer access token to the acting user id."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user_id = await container.auth_service.user_id_from_token(token)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user_id


def _require_member(container: AppContainer, group_id: UUID, user_id: UUID) -> None:
    member_repository = container.group_service.member_repository
    if member_repository.get_member(group_id, user_id) is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)


def _failed(service: ObservableService) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=service.error_message or "Request failed",
    )


def _acting_profile(container: AppContainer, user_id: UUID) -> UserProfile:
    profile = container.auth_service.profiles.get_profile(user_id)
    return profile or UserProfile(id=user_id)


@router.get("/groups")
async def list_groups(
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Return the groups of the acting user."""
    groups = await container.group_service.fetch_groups(user_id)
    if groups is None:
        raise _failed(container.group_service)
    return {"groups": groups}


@router.post("/groups", status_code=status.HTTP_201_CREATED)
async def create_group(
    payload: CreateGroupRequest,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Create a group owned by the acting user."""
    group = await container.group_service.create_group(payload.name, user_id)
    if group is None:
        raise _failed(container.group_service)
    return {"group": group}


@router.post("/groups/join")
async def join_group(
    payload: JoinGroupRequest,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, str]:
    """Join a group with an invite code."""
    if not await container.group_service.join_group(payload.invite_code, user_id):
        raise _failed(container.group_service)
    return {"status": "ok"}


@router.get("/groups/{group_id}/members")
async def list_members(
    group_id: UUID,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Return the members of a group."""
    _require_member(container, group_id, user_id)
    members = await container.group_service.fetch_members(group_id)
    if members is None:
        raise _failed(container.group_service)
    return {"members": members}


@router.delete("/groups/{group_id}/membership")
async def leave_group(
    group_id: UUID,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, str]:
    """Leave a group."""
    if not await container.group_service.leave_group(group_id, user_id):
        raise _failed(container.group_service)
    return {"status": "ok"}


@router.post("/groups/{group_id}/invite-code")
async def regenerate_invite_code(
    group_id: UUID,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, str]:
    """Replace a group's invite code."""
    _require_member(container, group_id, user_id)
    code = await container.group_service.regenerate_invite_code(group_id)
    if code is None:
        raise _failed(container.group_service)
    return {"invite_code": code}


@router.put("/groups/{group_id}/aesthetic")
async def update_aesthetic(
    group_id: UUID,
    payload: AestheticProfileRequest,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Store a group's aesthetic profile and preview its prompt suffix."""
    _require_member(container, group_id, user_id)
    profile = payload.to_domain()
    if not await container.group_service.update_aesthetic_profile(group_id, profile):
        raise _failed(container.group_service)
    return {"aesthetic_profile": profile, "prompt_suffix": profile.prompt_suffix()}


@router.get("/groups/{group_id}/visions")
async def list_group_visions(
    group_id: UUID,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Return a group's visions, newest first."""
    _require_member(container, group_id, user_id)
    visions = await container.vision_service.fetch_visions(group_id)
    if visions is None:
        raise _failed(container.vision_service)
    return {"visions": visions}


@router.get("/visions")
async def list_visions(
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Return visions across all groups of the acting user."""
    visions = await container.vision_service.fetch_visions_for_user(user_id)
    if visions is None:
        raise _failed(container.vision_service)
    return {"visions": visions}


@router.post("/visions", status_code=status.HTTP_201_CREATED)
async def create_vision(
    payload: CreateVisionRequest,
    background_tasks: BackgroundTasks,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Create a vision, optionally generating its first image afterwards."""
    _require_member(container, payload.group_id, user_id)
    service = container.vision_service
    vision = await service.create_vision(
        group_id=payload.group_id,
        created_by=user_id,
        title=payload.title,
        description=payload.description,
        target_members=payload.target_members,
    )
    if vision is None:
        raise _failed(service)
    if payload.generate:
        background_tasks.add_task(
            service.generate_image,
            vision,
            style=payload.style,
            current_user=_acting_profile(container, user_id),
        )
    return {"vision": vision, "generation_scheduled": payload.generate}


@router.post("/visions/{vision_id}/generate")
async def generate_image(
    vision_id: UUID,
    payload: GenerateImageRequest,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Generate one more image for a vision."""
    service = container.vision_service
    vision = await service.get_vision(vision_id)
    if vision is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    _require_member(container, vision.group_id, user_id)
    image = await service.generate_image(
        vision,
        style=payload.style,
        current_user=_acting_profile(container, user_id),
    )
    if image is None:
        raise _failed(service)
    return {"image": image}


@router.delete("/visions/{vision_id}")
async def delete_vision(
    vision_id: UUID,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, str]:
    """Delete a vision and its images."""
    service = container.vision_service
    vision = await service.get_vision(vision_id)
    if vision is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    _require_member(container, vision.group_id, user_id)
    if not await service.delete_vision(vision_id):
        raise _failed(service)
    return {"status": "ok"}


@router.post("/images/{image_id}/favorite")
async def toggle_favorite(
    image_id: UUID,
    user_id: UUID = Depends(require_user),
    container: AppContainer = Depends(_container),
) -> dict[str, object]:
    """Flip the favorite flag of a generated image."""
    service = container.vision_service
    image = await service.get_image(image_id)
    if image is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    vision = await service.get_vision(image.vision_id)
    if vision is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    _require_member(container, vision.group_id, user_id)
    updated = await service.toggle_favorite(image)
    if updated is None:
        raise _failed(service)
    return {"image": updated}

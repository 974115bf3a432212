"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from shared_visions.adapters.imagen_client import HttpxImagenClient
from shared_visions.adapters.openai_text_client import OpenAITextClient
from shared_visions.adapters.photo_downloader import HttpxPhotoDownloader
from shared_visions.adapters.supabase_auth_gateway import SupabaseAuthGateway
from shared_visions.adapters.supabase_group_repository import (
    SupabaseGroupRepository,
    SupabaseMemberRepository,
)
from shared_visions.adapters.supabase_photo_repository import (
    SupabaseGeneratedImageRepository,
    SupabasePhotoRepository,
)
from shared_visions.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from shared_visions.adapters.supabase_storage import SupabaseBucketStorage
from shared_visions.adapters.supabase_vision_repository import (
    SupabaseVisionRepository,
)
from shared_visions.config import Settings
from shared_visions.services.auth import AuthService
from shared_visions.services.events import EventBus
from shared_visions.services.generation import GenerationService
from shared_visions.services.groups import GroupService
from shared_visions.services.members import MemberResolver
from shared_visions.services.photos import PhotoService
from shared_visions.services.storage import StorageService
from shared_visions.services.visions import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    events: EventBus
    auth_service: AuthService
    group_service: GroupService
    photo_service: PhotoService
    storage_service: StorageService
    generation_service: GenerationService
    vision_service: VisionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    events = EventBus()
    profile_repository = SupabaseProfileRepository(supabase_client)
    photo_repository = SupabasePhotoRepository(supabase_client)
    image_repository = SupabaseGeneratedImageRepository(supabase_client)
    group_repository = SupabaseGroupRepository(supabase_client)
    member_repository = SupabaseMemberRepository(supabase_client)
    vision_repository = SupabaseVisionRepository(supabase_client)

    storage_service = StorageService(
        buckets=SupabaseBucketStorage(supabase_client),
        photo_repository=photo_repository,
        image_repository=image_repository,
        avatar_repository=profile_repository,
    )
    text_client = OpenAITextClient.create(
        api_key=resolved_settings.gemini_api_key,
        base_url=resolved_settings.gemini_base_url,
    )
    imagen_client = HttpxImagenClient.create(
        api_key=resolved_settings.gemini_api_key,
        endpoint=resolved_settings.imagen_endpoint,
    )
    photo_downloader = HttpxPhotoDownloader.create()
    generation_service = GenerationService(
        text_client=text_client,
        image_client=imagen_client,
        text_model=resolved_settings.text_model,
        image_generation_enabled=resolved_settings.image_generation_enabled,
    )
    auth_service = AuthService(
        gateway=SupabaseAuthGateway(supabase_client),
        profiles=profile_repository,
        events=events,
    )
    group_service = GroupService(
        group_repository=group_repository,
        member_repository=member_repository,
        track_created=False,
        events=events,
    )
    photo_service = PhotoService(
        storage=storage_service,
        downloader=photo_downloader,
        events=events,
    )
    vision_service = VisionService(
        repository=vision_repository,
        group_repository=group_repository,
        member_repository=member_repository,
        image_repository=image_repository,
        storage=storage_service,
        generation=generation_service,
        resolver=MemberResolver(text_client, resolved_settings.text_model),
        track_created=False,
        events=events,
    )

    async def close_resources() -> None:
        await text_client.close()
        await imagen_client.close()
        await photo_downloader.close()

    return AppContainer(
        settings=resolved_settings,
        events=events,
        auth_service=auth_service,
        group_service=group_service,
        photo_service=photo_service,
        storage_service=storage_service,
        generation_service=generation_service,
        vision_service=vision_service,
        close_resources=close_resources,
    )

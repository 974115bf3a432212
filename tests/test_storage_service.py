"""Tests for bucket uploads and photo bookkeeping."""

from uuid import uuid4

import pytest

from shared_visions.domain.errors import (
    DeleteFailedError,
    ImageEncodingError,
    UploadFailedError,
)
from shared_visions.services.storage import (
    AVATARS_BUCKET,
    GENERATED_IMAGES_BUCKET,
    USER_PHOTOS_BUCKET,
)
from tests.conftest import JPEG_BYTES, PNG_BYTES, World


def test_upload_user_photo_stores_object_and_row(world: World) -> None:
    user_id = uuid4()

    photo = world.storage_service.upload_user_photo(user_id, JPEG_BYTES)

    ((bucket, path),) = world.buckets.objects
    assert bucket == USER_PHOTOS_BUCKET
    assert path.startswith(f"{user_id}/") and path.endswith(".jpg")
    assert world.buckets.objects[(bucket, path)] == (JPEG_BYTES, "image/jpeg", False)
    assert photo.photo_url.endswith(f"/{USER_PHOTOS_BUCKET}/{path}")
    assert world.photos.list_photos(user_id) == [photo]


def test_upload_primary_photo_clears_previous_primary(world: World) -> None:
    user_id = uuid4()
    first = world.storage_service.upload_user_photo(user_id, PNG_BYTES, is_primary=True)

    second = world.storage_service.upload_user_photo(user_id, PNG_BYTES, is_primary=True)

    photos = {photo.id: photo for photo in world.photos.list_photos(user_id)}
    assert not photos[first.id].is_primary
    assert photos[second.id].is_primary
    assert second.photo_url.endswith(".png")


def test_upload_rejects_empty_bytes(world: World) -> None:
    with pytest.raises(ImageEncodingError):
        world.storage_service.upload_user_photo(uuid4(), b"")


def test_upload_failure_is_wrapped(world: World) -> None:
    world.buckets.fail_uploads = True

    with pytest.raises(UploadFailedError):
        world.storage_service.upload_generated_image(uuid4(), PNG_BYTES, "prompt")
    assert world.images.images == {}


def test_upload_generated_image(world: World) -> None:
    vision_id = uuid4()

    image = world.storage_service.upload_generated_image(vision_id, PNG_BYTES, "prompt")

    ((bucket, path),) = world.buckets.objects
    assert bucket == GENERATED_IMAGES_BUCKET
    assert path.startswith(f"{vision_id}/") and path.endswith(".png")
    assert image.vision_id == vision_id
    assert image.prompt_used == "prompt"
    assert not image.is_favorite


def test_delete_user_photo_removes_object_then_row(world: World) -> None:
    user_id = uuid4()
    photo = world.storage_service.upload_user_photo(user_id, JPEG_BYTES)
    ((_, path),) = world.buckets.objects

    world.storage_service.delete_user_photo(photo)

    assert world.buckets.removed == [(USER_PHOTOS_BUCKET, path)]
    assert world.photos.list_photos(user_id) == []


def test_delete_failure_keeps_row(world: World) -> None:
    user_id = uuid4()
    photo = world.storage_service.upload_user_photo(user_id, JPEG_BYTES)

    def fail(bucket: str, paths: list[str]) -> None:
        raise RuntimeError("bucket locked")

    world.buckets.remove = fail  # type: ignore[method-assign]

    with pytest.raises(DeleteFailedError):
        world.storage_service.delete_user_photo(photo)
    assert world.photos.list_photos(user_id) == [photo]


def test_upload_avatar_upserts_and_updates_profile(world: World) -> None:
    user = world.add_user("Alex Smith")

    url = world.storage_service.upload_avatar(user.id, PNG_BYTES)

    assert world.buckets.objects[(AVATARS_BUCKET, f"{user.id}.png")] == (
        PNG_BYTES,
        "image/png",
        True,
    )
    profile = world.profiles.get_profile(user.id)
    assert profile is not None and profile.avatar_url == url


def test_photos_for_users_short_circuits_on_empty_list(world: World) -> None:
    world.storage_service.upload_user_photo(uuid4(), JPEG_BYTES)

    assert world.storage_service.get_photos_for_users([], limit=4) == []

"""Supabase Storage bucket adapter."""

from dataclasses import dataclass

from supabase import Client

from shared_visions.services.storage import BucketStorage


@dataclass
class SupabaseBucketStorage(BucketStorage):
    """Supabase implementation of bucket storage."""

    client: Client

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> None:
        """Upload bytes to a bucket path."""
        self.client.storage.from_(bucket).upload(
            path=path,
            file=data,
            file_options={
                "content-type": content_type,
                "upsert": "true" if upsert else "false",
            },
        )

    def public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of an object."""
        return self.client.storage.from_(bucket).get_public_url(path)

    def remove(self, bucket: str, paths: list[str]) -> None:
        """Delete objects from a bucket."""
        self.client.storage.from_(bucket).remove(paths)
